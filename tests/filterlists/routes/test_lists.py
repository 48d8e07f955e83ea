"""Tests for filterlists.routes.lists — list download and export endpoints."""
from unittest.mock import patch

import yaml
from flask import has_request_context
from sqlalchemy.exc import OperationalError

from filterlists.models.filter_list import FilterList
from filterlists.services import store

TOKEN = '0b3f7a3c-1f2e-4d5c-8b9a-6e7d8c9b0a1f'


def _login(client, user_id):
    with client.session_transaction() as sess:
        sess['user_id'] = user_id


def _fetch(client, url, **kwargs):
    """GET and drain the body so a streamed response releases its request context."""
    resp = client.get(url, **kwargs)
    resp.get_data()
    return resp


# ---------------------------------------------------------------------------
# GET /list/<token>
# ---------------------------------------------------------------------------

class TestRenderList:

    def test_renders_list(self, client, make_list):
        make_list(token=TOKEN, instances=[
            ('custom-rules', {'rules': '||ads.example^'}, False),
            ('easylist', {}, False),
        ])
        resp = _fetch(client, f'/list/{TOKEN}')
        assert resp.status_code == 200
        assert resp.mimetype == 'text/plain'
        body = resp.get_data(as_text=True)
        assert body.index('! easylist') < body.index('! custom-rules')
        assert body.rstrip().endswith(f'localhost###install-prompt-{TOKEN}')

    def test_streamed_body_releases_request_context(self, client, make_list):
        make_list(token=TOKEN, instances=[('easylist', {}, False)])
        _fetch(client, f'/list/{TOKEN}')
        assert not has_request_context()

    def test_txt_suffix(self, client, make_list):
        make_list(token=TOKEN)
        assert _fetch(client, f'/list/{TOKEN}.txt').status_code == 200

    def test_sets_etag(self, client, make_list, app):
        make_list(token=TOKEN)
        resp = _fetch(client, f'/list/{TOKEN}')
        corpus = app.extensions['filterlists'].corpus
        assert resp.headers['ETag'] == f'"{corpus.fingerprint}10000020260115"'

    def test_second_request_with_etag_not_modified(self, client, make_list):
        make_list(token=TOKEN, instances=[('easylist', {}, False)])
        first = _fetch(client, f'/list/{TOKEN}')
        etag = first.headers['ETag']

        second = _fetch(client, f'/list/{TOKEN}', headers={'If-None-Match': etag})
        assert second.status_code == 304
        assert second.get_data() == b''
        assert second.headers['ETag'] == etag

    def test_weak_etag_accepted(self, client, make_list):
        make_list(token=TOKEN)
        etag = _fetch(client, f'/list/{TOKEN}').headers['ETag']
        resp = _fetch(client, f'/list/{TOKEN}', headers={'If-None-Match': 'W/' + etag})
        assert resp.status_code == 304

    def test_mutation_invalidates_etag(self, client, make_list, db_session):
        flist = make_list(token=TOKEN)
        etag = _fetch(client, f'/list/{TOKEN}').headers['ETag']
        store.upsert_instance(db_session, flist, 'easylist')
        db_session.commit()

        resp = _fetch(client, f'/list/{TOKEN}', headers={'If-None-Match': etag})
        assert resp.status_code == 200
        assert resp.headers['ETag'] != etag
        assert '! easylist' in resp.get_data(as_text=True)

    def test_test_mode_flag(self, client, make_list):
        make_list(token=TOKEN, instances=[('easylist', {}, False)])
        body = client.get(f'/list/{TOKEN}?test_mode').get_data(as_text=True)
        assert '! [test] ||ads.doubleclick.example^' in body

    def test_malformed_token_404(self, client):
        with patch('filterlists.database.get_session') as get_session:
            resp = client.get('/list/abc')
        assert resp.status_code == 404
        get_session.return_value.query.assert_not_called()

    def test_unknown_token_404(self, client):
        resp = _fetch(client, f'/list/{TOKEN}')
        assert resp.status_code == 404
        assert resp.get_json() == {'error': 'Not found'}

    def test_banned_owner_403(self, client, make_list, ban_user):
        make_list(user_id='banned', token=TOKEN)
        ban_user('banned')
        assert _fetch(client, f'/list/{TOKEN}').status_code == 403

    def test_banned_owner_403_with_matching_etag(self, client, make_list, ban_user):
        make_list(user_id='soon-banned', token=TOKEN)
        etag = _fetch(client, f'/list/{TOKEN}').headers['ETag']
        ban_user('soon-banned')
        resp = _fetch(client, f'/list/{TOKEN}', headers={'If-None-Match': etag})
        assert resp.status_code == 403

    def test_marks_downloaded_without_referrer(self, client, make_list, db_session):
        make_list(token=TOKEN)
        _fetch(client, f'/list/{TOKEN}')
        assert db_session.query(FilterList).filter_by(token=TOKEN).one().downloaded is True

    def test_referrer_does_not_mark_downloaded(self, client, make_list, db_session):
        make_list(token=TOKEN)
        _fetch(client, f'/list/{TOKEN}', headers={'Referer': 'https://lists.example/'})
        assert db_session.query(FilterList).filter_by(token=TOKEN).one().downloaded is False

    def test_corrupt_instance_500(self, client, make_list):
        make_list(token=TOKEN, instances=[('easylist', '{broken', False)])
        resp = _fetch(client, f'/list/{TOKEN}')
        assert resp.status_code == 500
        assert resp.get_json() == {'error': 'Internal error'}

    def test_commit_failure_500(self, client, make_list, db_session):
        make_list(token=TOKEN)
        failure = OperationalError('COMMIT', {}, Exception('database is locked'))
        with patch.object(db_session, 'commit', side_effect=failure):
            resp = _fetch(client, f'/list/{TOKEN}')
        assert resp.status_code == 500
        assert resp.get_json() == {'error': 'Internal error'}

    def test_official_instance_uses_main_domain(self, client, make_list):
        make_list(token=TOKEN)
        with patch('filterlists.routes.lists.OFFICIAL_INSTANCE', True), \
                patch('filterlists.routes.lists.MAIN_DOMAIN', 'lists.example'):
            body = client.get(f'/list/{TOKEN}').get_data(as_text=True)
        assert f'lists.example###install-prompt-{TOKEN}' in body


class TestDownloadMetrics:

    def test_records_without_etag(self, client, make_list, mock_redis):
        make_list(token=TOKEN)
        _fetch(client, f'/list/{TOKEN}')
        mock_redis.hincrby.assert_called_once_with(
            'filterlists.list_download', 'etag_present:false,etag_match:false', 1)

    def test_records_matching_etag(self, client, make_list, mock_redis):
        make_list(token=TOKEN)
        etag = _fetch(client, f'/list/{TOKEN}').headers['ETag']
        mock_redis.hincrby.reset_mock()
        _fetch(client, f'/list/{TOKEN}', headers={'If-None-Match': etag})
        mock_redis.hincrby.assert_called_once_with(
            'filterlists.list_download', 'etag_present:true,etag_match:true', 1)

    def test_metrics_failure_does_not_fail_request(self, client, make_list, mock_redis):
        make_list(token=TOKEN)
        mock_redis.hincrby.side_effect = ConnectionError('redis down')
        assert _fetch(client, f'/list/{TOKEN}').status_code == 200

    def test_no_metric_on_404(self, client, mock_redis):
        _fetch(client, f'/list/{TOKEN}')
        mock_redis.hincrby.assert_not_called()


# ---------------------------------------------------------------------------
# GET /export/<token>
# ---------------------------------------------------------------------------

class TestExportList:

    def test_owner_downloads_yaml(self, client, make_list):
        make_list(user_id='owner', token=TOKEN, instances=[
            ('custom-rules', {'rules': '||ads.example^'}, False),
            ('easylist', {}, True),
        ])
        _login(client, 'owner')
        resp = client.get(f'/export/{TOKEN}')

        assert resp.status_code == 200
        assert resp.mimetype == 'text/yaml'
        assert resp.headers['Content-Disposition'] == 'attachment; filename="exported-filter-list.yaml"'
        text = resp.get_data(as_text=True)
        assert f'# List token: {TOKEN}' in text
        document = yaml.safe_load(text)
        assert document['instances'] == [
            {'template': 'easylist', 'params': {}, 'test_mode': True},
            {'template': 'custom-rules', 'params': {'rules': '||ads.example^'}, 'test_mode': False},
        ]

    def test_requires_login(self, client, make_list):
        make_list(user_id='owner', token=TOKEN)
        assert client.get(f'/export/{TOKEN}').status_code == 401

    def test_other_user_403(self, client, make_list):
        make_list(user_id='owner', token=TOKEN)
        _login(client, 'intruder')
        assert client.get(f'/export/{TOKEN}').status_code == 403

    def test_unknown_token_404(self, client):
        _login(client, 'owner')
        assert client.get(f'/export/{TOKEN}').status_code == 404

    def test_malformed_token_404(self, client):
        _login(client, 'owner')
        assert client.get('/export/abc').status_code == 404

    def test_txt_suffix_404(self, client, make_list):
        make_list(user_id='owner', token=TOKEN)
        _login(client, 'owner')
        assert client.get(f'/export/{TOKEN}.txt').status_code == 404

    def test_export_order_matches_render_order(self, client, make_list):
        make_list(user_id='owner', token=TOKEN, instances=[
            ('search-results', {}, False),
            ('custom-rules', {'rules': '||x^'}, False),
            ('easylist', {}, False),
        ])
        _login(client, 'owner')
        exported = yaml.safe_load(client.get(f'/export/{TOKEN}').get_data(as_text=True))
        rendered = client.get(f'/list/{TOKEN}').get_data(as_text=True)

        names = [i['template'] for i in exported['instances']]
        assert names == ['easylist', 'search-results', 'custom-rules']
        positions = [rendered.index(f'\n! {name}\n') for name in names]
        assert positions == sorted(positions)
