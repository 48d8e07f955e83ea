"""
Access & fingerprint resolver.

Runs inside the caller's transaction, in a fixed order:
  1. token parse        → NotFound (store untouched)
  2. list lookup        → NotFound
  3. ban / ownership    → Forbidden
  4. ETag comparison    → not_modified, instances skipped
  5. instance aggregation

Authorization always precedes the ETag short-circuit, so a banned or rotated
token never benefits from a client's cached validator.
"""
import logging
import uuid
from dataclasses import dataclass
from datetime import timezone
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from filterlists.errors import Forbidden, NotFound, StoreError
from filterlists.models.filter_list import FilterList
from filterlists.models.rendered_list import RenderedList
from filterlists.services.aggregator import aggregate

logger = logging.getLogger('services.access')

RENDER_SUFFIX = '.txt'

# HHMMSSYYYYMMDD, UTC, one-second granularity
ETAG_TIME_FORMAT = '%H%M%S%Y%m%d'


@dataclass
class ListAccess:
    """Outcome of an authorized read."""
    list_id: int
    user_id: str
    token: str
    etag: str
    not_modified: bool = False
    rendered: Optional[RenderedList] = None


def parse_token(raw, allow_suffix=False):
    """Normalize a raw token to its canonical UUID string.

    Only the download path accepts the optional .txt suffix.
    """
    if not isinstance(raw, str):
        raise NotFound()
    if allow_suffix and raw.endswith(RENDER_SUFFIX):
        raw = raw[:-len(RENDER_SUFFIX)]
    try:
        return str(uuid.UUID(raw))
    except ValueError:
        raise NotFound() from None


def compute_etag(corpus_fingerprint, updated_at):
    """Corpus fingerprint followed by the list's last update time."""
    if updated_at is None:
        return corpus_fingerprint
    if updated_at.tzinfo is None:
        # SQLite hands back naive datetimes; everything is stored in UTC
        updated_at = updated_at.replace(tzinfo=timezone.utc)
    return corpus_fingerprint + updated_at.astimezone(timezone.utc).strftime(ETAG_TIME_FORMAT)


class AccessResolver:
    """Resolves tokens to authorized list reads for both download and export."""

    def __init__(self, corpus, bans):
        self.corpus = corpus
        self.bans = bans

    def _load_list(self, session, token):
        try:
            flist = session.query(FilterList).filter_by(token=token).one_or_none()
        except SQLAlchemyError as e:
            raise StoreError(f'failed to get list: {e}') from e
        if flist is None:
            raise NotFound()
        return flist

    def for_download(self, session, raw_token, validator=None, has_referrer=False):
        """
        Anonymous download path.

        Marks the list as downloaded when the request has no referrer (direct
        fetch by an adblocker rather than a browser navigation).
        """
        token = parse_token(raw_token, allow_suffix=True)
        flist = self._load_list(session, token)
        if self.bans.is_banned(session, flist.user_id):
            logger.info("Refusing download of list %s: owner is banned", flist.id)
            raise Forbidden()

        if not has_referrer:
            flist.downloaded = True
            try:
                session.flush()
            except SQLAlchemyError as e:
                raise StoreError(f'failed to mark list download: {e}') from e

        etag = compute_etag(self.corpus.fingerprint, flist.updated_at)
        access = ListAccess(list_id=flist.id, user_id=flist.user_id, token=token, etag=etag)
        if validator and validator == etag:
            access.not_modified = True
            return access

        access.rendered = aggregate(session, flist.id, self.corpus)
        return access

    def for_export(self, session, raw_token, user_id):
        """Authenticated export path: caller must own the list."""
        token = parse_token(raw_token)
        flist = self._load_list(session, token)
        if flist.user_id != user_id:
            raise Forbidden()

        etag = compute_etag(self.corpus.fingerprint, flist.updated_at)
        return ListAccess(
            list_id=flist.id,
            user_id=flist.user_id,
            token=token,
            etag=etag,
            rendered=aggregate(session, flist.id, self.corpus),
        )
