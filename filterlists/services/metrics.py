"""
Download metrics — tagged counters kept in a Redis hash.

Emission is best-effort: a Redis failure is logged and never reaches the
request.
"""
import logging

from filterlists.config import METRICS_PREFIX

logger = logging.getLogger('services.metrics')


def _tag(name, value):
    return f'{name}:{str(bool(value)).lower()}'


class DownloadMetrics:
    """
    Usage:
        metrics = DownloadMetrics(redis_client)
        metrics.record_download(etag_present=True, etag_match=False)

    Produces HINCRBY filterlists.list_download "etag_present:true,etag_match:false" 1
    """

    def __init__(self, redis_client, prefix=METRICS_PREFIX):
        self.redis = redis_client
        self.prefix = prefix

    @property
    def _download_key(self):
        return f'{self.prefix}.list_download'

    def record_download(self, etag_present, etag_match):
        field = ','.join([_tag('etag_present', etag_present), _tag('etag_match', etag_match)])
        try:
            self.redis.hincrby(self._download_key, field, 1)
        except Exception:
            logger.debug("Failed to record list download metric", exc_info=True)
