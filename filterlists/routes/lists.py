"""
List routes — anonymous list download and authenticated YAML export.
"""
import io
import logging

from flask import Blueprint, Response, current_app, jsonify, request, session, stream_with_context

from filterlists.config import MAIN_DOMAIN, OFFICIAL_INSTANCE
from filterlists.database import transaction
from filterlists.errors import CorruptInstance, Forbidden, NotFound, StoreError
from filterlists.services.exporter import EXPORT_FILENAME, export_list as write_export

logger = logging.getLogger('routes.lists')

bp = Blueprint('lists', __name__)


def _pipeline():
    return current_app.extensions['filterlists']


def _request_etag():
    """If-None-Match value with weak prefix and quotes removed."""
    value = request.headers.get('If-None-Match', '').strip()
    if value.startswith('W/'):
        value = value[2:]
    return value.strip('"')


def _serving_domain():
    return MAIN_DOMAIN if OFFICIAL_INSTANCE else request.host


# ── Error handlers ───────────────────────────────────────────────────────────

@bp.app_errorhandler(NotFound)
def _not_found(e):
    return jsonify({'error': 'Not found'}), 404


@bp.app_errorhandler(Forbidden)
def _forbidden(e):
    return jsonify({'error': 'Forbidden'}), 403


@bp.app_errorhandler(CorruptInstance)
@bp.app_errorhandler(StoreError)
def _internal_error(e):
    logger.error("List request failed: %s", e, exc_info=True)
    return jsonify({'error': 'Internal error'}), 500


# ── Routes ───────────────────────────────────────────────────────────────────

@bp.route('/list/<token>')
def render_list(token):
    """Rendered filter list, cached by the client through its ETag."""
    pipeline = _pipeline()
    request_etag = _request_etag()

    with transaction() as db:
        access = pipeline.resolver.for_download(
            db,
            token,
            validator=request_etag or None,
            has_referrer=bool(request.headers.get('Referer')),
        )

    pipeline.metrics.record_download(etag_present=bool(request_etag), etag_match=access.not_modified)

    if access.not_modified:
        resp = Response(status=304)
        resp.set_etag(access.etag)
        return resp

    body = pipeline.materializer.iter_render(
        access.rendered,
        token=access.token,
        test_mode='test_mode' in request.args,
        domain=_serving_domain(),
        diagnostics=current_app.logger,
    )
    resp = Response(stream_with_context(body), mimetype='text/plain')
    resp.set_etag(access.etag)
    return resp


@bp.route('/export/<token>')
def export_list(token):
    """YAML export of the caller's own list."""
    user_id = session.get('user_id')
    if not user_id:
        return jsonify({'error': 'Authentication required'}), 401

    with transaction() as db:
        access = _pipeline().resolver.for_export(db, token, user_id)

    buf = io.StringIO()
    write_export(access.rendered, access.token, buf)
    return Response(
        buf.getvalue(),
        mimetype='text/yaml',
        headers={'Content-Disposition': f'attachment; filename="{EXPORT_FILENAME}"'},
    )
