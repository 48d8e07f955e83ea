"""
Filter definition loader.

A definition source is a YAML metadata block, a separator line starting with
"---", and a markdown description:

    title: Hide cookie banners
    params:
      - name: strict
        type: checkbox
        default: false
    template: |
      ##.cookie-banner
    ---
    Hides the **cookie consent** banners found on most sites.

Loading is all-or-nothing: any failure raises MalformedDefinition and no
partial definition is returned.
"""
import hashlib
import logging

import markdown
import yaml
from jinja2 import TemplateSyntaxError
from pydantic import ValidationError

from filterlists.errors import MalformedDefinition
from filterlists.filters.definition import FilterDefinition
from filterlists.filters.templating import check_template, template_variables

logger = logging.getLogger('filters.loader')

SEPARATOR = b'\n---'
_NEWLINE = b'\n'

_MARKDOWN_EXTENSIONS = ['extra', 'sane_lists']


def _read(source):
    if isinstance(source, bytes):
        return source
    if isinstance(source, str):
        return source.encode('utf-8')
    data = source.read()
    return data.encode('utf-8') if isinstance(data, str) else data


def split_source(name, raw):
    """Split raw bytes into (metadata, body) at the first separator line."""
    pos = raw.find(SEPARATOR)
    if pos < 0:
        raise MalformedDefinition(name, 'separator not found')
    # The rest of the separator line is discarded
    end_of_line = raw.find(_NEWLINE, pos + len(SEPARATOR))
    body = b'' if end_of_line < 0 else raw[end_of_line + 1:]
    return raw[:pos], body


def _validation_summary(exc):
    parts = []
    for error in exc.errors():
        loc = '.'.join(str(p) for p in error.get('loc', ()))
        parts.append(f"{loc}: {error.get('msg')}" if loc else error.get('msg', ''))
    return '; '.join(parts)


def parse_definition(name, source):
    """
    Parse one definition source into a FilterDefinition.

    Args:
        name:   Filter name (the source file stem).
        source: bytes, str, or a readable stream.

    Raises:
        MalformedDefinition on a missing separator, undecodable metadata,
        failed validation, a template that does not compile or a template
        reading a parameter it does not declare.
    """
    raw = _read(source)
    head, body = split_source(name, raw)

    try:
        metadata = yaml.safe_load(head.decode('utf-8'))
        description = body.decode('utf-8')
    except (UnicodeDecodeError, yaml.YAMLError) as e:
        raise MalformedDefinition(name, f'cannot decode metadata: {e}') from e
    if not isinstance(metadata, dict):
        raise MalformedDefinition(name, 'metadata block is not a mapping')

    fields = dict(metadata)
    fields['name'] = name
    fields['description_html'] = markdown.markdown(description, extensions=_MARKDOWN_EXTENSIONS)
    fields['fingerprint'] = hashlib.sha256(raw).hexdigest()

    try:
        definition = FilterDefinition.model_validate(fields)
    except ValidationError as e:
        raise MalformedDefinition(name, _validation_summary(e)) from e

    try:
        check_template(definition.template)
    except TemplateSyntaxError as e:
        raise MalformedDefinition(name, f'template line {e.lineno}: {e.message}') from e

    undeclared = template_variables(definition.template) - {p.name for p in definition.params}
    if undeclared:
        raise MalformedDefinition(name, f"template uses undeclared parameters: {', '.join(sorted(undeclared))}")

    logger.debug("Parsed filter definition %s (%d params)", name, len(definition.params))
    return definition
