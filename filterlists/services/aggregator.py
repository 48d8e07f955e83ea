"""
Instance aggregator — loads a list's instances in render order.

Order: templated instances ascending by filter name (from the query), then
every custom-rules instance in retrieval order. Any undecodable payload fails
the whole aggregation; a partial blocking list is never produced.
"""
import json
import logging

from sqlalchemy.exc import SQLAlchemyError

from filterlists.config import CUSTOM_RULES_FILTER_NAME
from filterlists.errors import CorruptInstance, StoreError
from filterlists.filters.definition import value_matches
from filterlists.models.filter_instance import FilterInstance
from filterlists.models.rendered_list import Instance, RenderedList

logger = logging.getLogger('services.aggregator')

_SCALAR_TYPES = (str, bool, int, float)


def order_instances(instances):
    """Stable partition: custom-rules instances move to the end, keeping their order."""
    templated = [i for i in instances if i.filter_name != CUSTOM_RULES_FILTER_NAME]
    custom = [i for i in instances if i.filter_name == CUSTOM_RULES_FILTER_NAME]
    return templated + custom


def _is_variant(value):
    if isinstance(value, _SCALAR_TYPES):
        return True
    return isinstance(value, list) and all(isinstance(v, str) for v in value)


def check_param_values(filter_name, params, definition=None):
    """
    Validate a parameter mapping.

    Values must be a string, number, boolean or list of strings. When the
    definition is known, every declared parameter present must match its
    declared type. Undeclared keys are kept as-is.
    """
    if not isinstance(params, dict):
        raise CorruptInstance(filter_name, 'params is not a mapping')
    for key, value in params.items():
        if not isinstance(key, str):
            raise CorruptInstance(filter_name, f'non-string parameter name {key!r}')
        if not _is_variant(value):
            raise CorruptInstance(filter_name, f"unsupported value for '{key}'")
        spec = definition.param(key) if definition is not None else None
        if spec is not None and not value_matches(spec.type, value):
            raise CorruptInstance(filter_name, f"'{key}' is not a valid {spec.type} value")
    return params


def decode_params(filter_name, payload, definition=None):
    """Decode a stored JSON payload into a validated parameter mapping."""
    if payload is None or payload == '':
        return {}
    try:
        params = json.loads(payload)
    except (TypeError, ValueError) as e:
        raise CorruptInstance(filter_name, f'cannot decode params: {e}') from e
    return check_param_values(filter_name, params, definition)


def aggregate(session, list_id, corpus=None):
    """Load, decode and order every instance bound to list_id."""
    try:
        rows = (
            session.query(FilterInstance)
            .filter_by(filter_list_id=list_id)
            .order_by(FilterInstance.filter_name.asc())
            .all()
        )
    except SQLAlchemyError as e:
        raise StoreError(f'failed to get instances for list {list_id}: {e}') from e

    instances = []
    for row in rows:
        definition = corpus.get(row.filter_name) if corpus is not None else None
        instances.append(Instance(
            filter_name=row.filter_name,
            params=decode_params(row.filter_name, row.params, definition),
            test_mode=bool(row.test_mode),
        ))

    logger.debug("List %s: %d instances aggregated", list_id, len(instances))
    return RenderedList(instances=order_instances(instances))
