"""
Alembic environment — migrations run against filterlists.database.engine.
"""
from alembic import context

from filterlists.database import Base, engine
import filterlists.models.filter_list  # noqa: F401
import filterlists.models.filter_instance  # noqa: F401
import filterlists.models.user_ban  # noqa: F401

target_metadata = Base.metadata


def run_migrations_offline():
    context.configure(url=str(engine.url), target_metadata=target_metadata, literal_binds=True)
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online():
    with engine.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
