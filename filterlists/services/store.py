"""
List and instance persistence helpers.

Used by the management flow and by list imports. Every instance mutation
bumps the owning list's updated_at, which feeds the list ETag; bumps are
strictly increasing at one-second granularity.

All helpers take the caller's session and never commit: wrap them in
database.transaction().
"""
import json
import logging
import uuid
from datetime import datetime, timedelta, timezone

from filterlists.models.filter_instance import FilterInstance
from filterlists.models.filter_list import FilterList
from filterlists.services.aggregator import check_param_values

logger = logging.getLogger('services.store')


def _now():
    return datetime.now(timezone.utc).replace(microsecond=0)


def _as_utc(value):
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def touch_list(flist):
    """Advance updated_at to now, or one second past its current value."""
    stamp = _now()
    if flist.updated_at is not None:
        previous = _as_utc(flist.updated_at).replace(microsecond=0)
        if stamp <= previous:
            stamp = previous + timedelta(seconds=1)
    flist.updated_at = stamp


def create_list(session, user_id):
    """Create the user's list with a fresh token."""
    flist = FilterList(user_id=user_id, token=str(uuid.uuid4()), updated_at=_now())
    session.add(flist)
    session.flush()  # get flist.id
    logger.info("Created list %s for user %s", flist.id, user_id)
    return flist


def get_list_for_user(session, user_id):
    return session.query(FilterList).filter_by(user_id=user_id).one_or_none()


def rotate_token(session, flist):
    """Replace the list token; the previous one stops resolving immediately."""
    flist.token = str(uuid.uuid4())
    session.flush()
    logger.info("Rotated token for list %s", flist.id)
    return flist.token


def _write_instance(session, flist, filter_name, params, test_mode, definition):
    params = check_param_values(filter_name, params or {}, definition)
    instance = session.query(FilterInstance).filter_by(
        filter_list_id=flist.id,
        filter_name=filter_name,
    ).one_or_none()

    if instance is None:
        instance = FilterInstance(
            filter_list_id=flist.id,
            user_id=flist.user_id,
            filter_name=filter_name,
        )
        session.add(instance)
    instance.params = json.dumps(params, sort_keys=True)
    instance.test_mode = bool(test_mode)
    return instance


def upsert_instance(session, flist, filter_name, params=None, test_mode=False, definition=None):
    """Create or update the (list, filter) instance."""
    instance = _write_instance(session, flist, filter_name, params, test_mode, definition)
    touch_list(flist)
    session.flush()
    return instance


def delete_instance(session, flist, filter_name):
    """Delete the (list, filter) instance. Returns False if there was none."""
    deleted = session.query(FilterInstance).filter_by(
        filter_list_id=flist.id,
        filter_name=filter_name,
    ).delete(synchronize_session='fetch')
    if not deleted:
        return False
    touch_list(flist)
    session.flush()
    return True


def import_list(session, flist, rendered, corpus=None):
    """Replace every instance of flist with the instances of a RenderedList."""
    session.query(FilterInstance).filter_by(filter_list_id=flist.id).delete(synchronize_session='fetch')
    session.flush()
    for instance in rendered.instances:
        definition = corpus.get(instance.filter_name) if corpus is not None else None
        _write_instance(session, flist, instance.filter_name, instance.params, instance.test_mode, definition)
    touch_list(flist)
    session.flush()
    logger.info("Imported %d instances into list %s", len(rendered.instances), flist.id)
