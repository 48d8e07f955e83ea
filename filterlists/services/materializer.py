"""
List materializer — turns a RenderedList into adblocker-consumable text.

Fragments are yielded as they are produced so the route can stream them:
header, one fragment per instance, then the install-prompt snippet that lets
the browser extension hide its own install nag for this list.
"""
import logging

from jinja2 import TemplateError

from filterlists.config import LIST_EXPIRES
from filterlists.errors import CorruptInstance, UnknownFilter
from filterlists.filters.templating import expand

logger = logging.getLogger('services.materializer')

LIST_HEADER = """! Title: {title}
! Expires: {expires}
! Homepage: https://{domain}/
"""

INSTALL_PROMPT_TEMPLATE = """
! Hide the list install prompt for that list
{domain}###install-prompt-{token}
"""


class ListMaterializer:
    """Renders lists against a fixed definition corpus."""

    def __init__(self, corpus, domain):
        self.corpus = corpus
        self.domain = domain

    def _render_instance(self, instance, test_mode):
        definition = self.corpus.require(instance.filter_name)
        template = self.corpus.template_for(instance.filter_name)
        try:
            rules = expand(definition, template, instance.params, test_mode=test_mode)
        except TemplateError as e:
            raise CorruptInstance(instance.filter_name, f'template expansion failed: {e}') from e
        lines = [f'! {instance.filter_name}'] + rules
        return '\n' + '\n'.join(lines) + '\n'

    def iter_render(self, rendered, token=None, test_mode=False, domain=None,
                    diagnostics=None, errors=None):
        """
        Yield the list text fragment by fragment.

        Args:
            rendered:    RenderedList from the aggregator (or an import).
            token:       List token; the install-prompt snippet is only added when set.
            test_mode:   Global override, every instance renders in test mode.
            domain:      Serving domain, defaults to the materializer's domain.
            diagnostics: Logger receiving unknown-filter reports.
            errors:      Optional list collecting UnknownFilter errors.
        """
        log = diagnostics or logger
        domain = domain or self.domain
        force_test_mode = test_mode or rendered.test_mode

        yield LIST_HEADER.format(title=rendered.title, expires=LIST_EXPIRES, domain=domain)

        for instance in rendered.instances:
            try:
                yield self._render_instance(instance, force_test_mode or instance.test_mode)
            except UnknownFilter as e:
                log.warning("List %s references a retired filter: %s", token or '-', e)
                if errors is not None:
                    errors.append(e)
                yield f'\n! {instance.filter_name}: unknown filter, skipped\n'

        if token:
            yield INSTALL_PROMPT_TEMPLATE.format(domain=domain, token=token)

    def render_to(self, sink, rendered, **kwargs):
        """Write the whole list to a file-like sink. Returns the UnknownFilter errors."""
        errors = []
        for fragment in self.iter_render(rendered, errors=errors, **kwargs):
            sink.write(fragment)
        return errors
