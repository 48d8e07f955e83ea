"""Shared test fixtures."""
import json
import os
import uuid
from datetime import datetime, timezone

import pytest
from unittest.mock import patch, MagicMock
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from filterlists.database import Base

FIXTURE_FILTERS_DIR = os.path.join(os.path.dirname(__file__), 'fixtures', 'filters')


@pytest.fixture
def db_engine():
    """In-memory SQLite engine with schema created."""
    engine = create_engine('sqlite:///:memory:')
    import filterlists.models.filter_list
    import filterlists.models.filter_instance
    import filterlists.models.user_ban
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(db_engine):
    """SQLAlchemy session bound to in-memory SQLite. Rolls back after each test."""
    Session = sessionmaker(bind=db_engine)
    session = Session()
    yield session
    session.rollback()
    session.close()


@pytest.fixture(autouse=True)
def patch_get_session(db_session):
    """Route all get_session() calls to the test session.

    We disable close() so that transaction() closing the session in its
    finally block does not invalidate the shared test session.
    """
    _real_close = db_session.close
    db_session.close = lambda: None
    with patch('filterlists.database.get_session', return_value=db_session):
        yield db_session
    db_session.close = _real_close


@pytest.fixture
def mock_redis():
    """Mock Redis client used as the metrics sink."""
    mock = MagicMock()
    mock.hincrby.return_value = 1
    with patch('filterlists.extensions.redis_client', mock):
        yield mock


@pytest.fixture
def corpus():
    """Definition corpus loaded from tests/fixtures/filters."""
    from filterlists.filters.corpus import FilterCorpus
    return FilterCorpus.load(FIXTURE_FILTERS_DIR)


@pytest.fixture
def app(mock_redis):
    """Flask test app serving the fixture corpus."""
    from filterlists import create_app
    app = create_app(filters_dir=FIXTURE_FILTERS_DIR)
    app.config['TESTING'] = True
    yield app


@pytest.fixture
def client(app):
    """Flask test client."""
    yield app.test_client()


@pytest.fixture
def make_list(db_session):
    """Factory fixture — inserts a FilterList with instances and commits."""
    from filterlists.models.filter_instance import FilterInstance
    from filterlists.models.filter_list import FilterList

    def _make(user_id='user-1', instances=(), updated_at=None, token=None):
        flist = FilterList(
            user_id=user_id,
            token=token or str(uuid.uuid4()),
            updated_at=updated_at or datetime(2026, 1, 15, 10, 0, 0, tzinfo=timezone.utc),
        )
        db_session.add(flist)
        db_session.flush()
        for name, params, test_mode in instances:
            db_session.add(FilterInstance(
                filter_list_id=flist.id,
                user_id=user_id,
                filter_name=name,
                params=params if isinstance(params, str) else json.dumps(params),
                test_mode=test_mode,
            ))
        db_session.commit()
        return flist
    return _make


@pytest.fixture
def ban_user(db_session):
    """Factory fixture — records an active ban for a user id."""
    from filterlists.models.user_ban import UserBan

    def _ban(user_id, reason='spam'):
        db_session.add(UserBan(user_id=user_id, reason=reason))
        db_session.commit()
    return _ban
