"""
Database engine + session factory.

Always initializes — defaults to SQLite for local dev, Postgres in production.
get_session() always returns a real session; transaction() wraps one in a
commit-or-rollback scope.
"""
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker, DeclarativeBase

from filterlists.config import DATABASE_URL
from filterlists.errors import StoreError


class Base(DeclarativeBase):
    pass


# Hosting providers inject postgres:// but SQLAlchemy 2.x requires postgresql://
url = DATABASE_URL.replace('postgres://', 'postgresql://', 1)

# SQLite needs different engine kwargs than Postgres
if url.startswith('sqlite'):
    engine = create_engine(url, connect_args={'check_same_thread': False})
else:
    engine = create_engine(url, pool_pre_ping=True, pool_size=5, max_overflow=10)

SessionLocal = sessionmaker(bind=engine)


def get_session():
    """Return a new DB session."""
    return SessionLocal()


@contextmanager
def transaction():
    """
    Scoped transaction: yields a session, commits when the block exits
    cleanly, rolls back on any exception and always closes the session.
    A failed commit is raised as StoreError.

    Usage:
        with transaction() as session:
            ...
    """
    session = get_session()
    try:
        yield session
        try:
            session.commit()
        except SQLAlchemyError as e:
            raise StoreError(f'failed to commit transaction: {e}') from e
    except BaseException:
        session.rollback()
        raise
    finally:
        session.close()
