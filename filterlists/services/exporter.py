"""
Structured exporter — YAML interchange document for a list.

The document keeps aggregator order, so an export renders exactly like the
served list. parse_export() reads it back for the render CLI and for imports.
"""
from datetime import datetime, timezone

import yaml

from filterlists.config import DEFAULT_LIST_TITLE
from filterlists.errors import CorruptInstance
from filterlists.models.rendered_list import Instance, RenderedList
from filterlists.services.aggregator import check_param_values

EXPORT_FILENAME = 'exported-filter-list.yaml'

EXPORT_HEADER = """# Filter list export
#
# List token: {token}
# Export date: {date}
#
# You can edit this file and render it locally with:
#   filterlists-render {filename}

"""


def export_document(rendered):
    return {
        'title': rendered.title,
        'instances': [
            {
                'template': instance.filter_name,
                'params': dict(instance.params),
                'test_mode': bool(instance.test_mode),
            }
            for instance in rendered.instances
        ],
    }


def export_list(rendered, token, sink, now=None):
    """Write the provenance header and the YAML document to sink."""
    now = now or datetime.now(timezone.utc)
    sink.write(EXPORT_HEADER.format(token=token, date=now.strftime('%Y-%m-%d'), filename=EXPORT_FILENAME))
    yaml.safe_dump(export_document(rendered), sink, sort_keys=False, default_flow_style=False, allow_unicode=True)


def parse_export(text, corpus=None):
    """
    Parse an exported document back into a RenderedList.

    Raises CorruptInstance if the document shape is wrong, a filter appears
    twice, or a parameter mapping does not validate.
    """
    try:
        document = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise CorruptInstance('-', f'cannot decode export: {e}') from e
    if document is None:
        document = {}
    if not isinstance(document, dict):
        raise CorruptInstance('-', 'export is not a mapping')

    raw_instances = document.get('instances') or []
    if not isinstance(raw_instances, list):
        raise CorruptInstance('-', 'instances is not a list')

    seen = set()
    instances = []
    for entry in raw_instances:
        if not isinstance(entry, dict) or not isinstance(entry.get('template'), str):
            raise CorruptInstance('-', 'instance without a template name')
        name = entry['template']
        if name in seen:
            raise CorruptInstance(name, 'filter listed more than once')
        seen.add(name)
        test_mode = entry.get('test_mode', False)
        if not isinstance(test_mode, bool):
            raise CorruptInstance(name, 'test_mode is not a boolean')
        definition = corpus.get(name) if corpus is not None else None
        params = check_param_values(name, entry.get('params') or {}, definition)
        instances.append(Instance(filter_name=name, params=params, test_mode=test_mode))

    return RenderedList(
        instances=instances,
        title=document.get('title') or DEFAULT_LIST_TITLE,
    )
