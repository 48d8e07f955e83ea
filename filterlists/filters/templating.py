"""
Filter template expansion.

Templates are Jinja2 sources evaluated in a sandbox with strict undefined
handling. Expansion yields one adblock rule (or comment) per line; blank lines
are dropped. Test mode rewrites the expanded rules into a non-blocking form.
"""
import re
from typing import Any, Dict, List

from jinja2 import StrictUndefined, meta
from jinja2.sandbox import SandboxedEnvironment

TEST_MODE_STYLE = ':style(outline: 2px dashed red !important)'
TEST_MODE_PREFIX = '! [test] '

# Cosmetic rules that already carry an action cannot take an extra :style()
_COSMETIC_ACTION = re.compile(r':(style|remove|remove-attr|remove-class)\(')


def _lines(value):
    """Jinja filter: split a multiline string (or list) into stripped, non-empty lines."""
    if isinstance(value, (list, tuple)):
        items = value
    else:
        items = str(value or '').splitlines()
    return [item.strip() for item in items if str(item).strip()]


_env = SandboxedEnvironment(
    undefined=StrictUndefined,
    trim_blocks=True,
    lstrip_blocks=True,
    autoescape=False,
)
_env.filters['lines'] = _lines


def check_template(source):
    """Parse a template source; raises jinja2.TemplateSyntaxError if invalid."""
    _env.parse(source)


def template_variables(source):
    """Names a template reads from its context, excluding environment globals."""
    return meta.find_undeclared_variables(_env.parse(source)) - set(_env.globals)


def compile_template(source):
    return _env.from_string(source)


def to_test_mode(rule: str) -> str:
    """Rewrite one expanded rule so it highlights instead of blocking."""
    if rule.startswith('!'):
        return rule
    if '##' in rule and '##+js(' not in rule and '##^' not in rule:
        if not _COSMETIC_ACTION.search(rule):
            return rule + TEST_MODE_STYLE
    return TEST_MODE_PREFIX + rule


def expand(definition, template, params: Dict[str, Any], test_mode: bool = False) -> List[str]:
    """
    Render one instance of a definition into its list of rules.

    Declared defaults are applied first, stored params override them.
    """
    context = definition.defaults()
    context.update(params)
    rendered = template.render(context)
    rules = [line.strip() for line in rendered.splitlines() if line.strip()]
    if test_mode:
        rules = [to_test_mode(rule) for rule in rules]
    return rules
