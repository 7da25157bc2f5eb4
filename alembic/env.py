from logging.config import fileConfig

from alembic import context
from sqlalchemy import create_engine, pool

from evshop.core.config import settings
from evshop.db.session import Base
import evshop.db.models  # noqa

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# shared by both modes; evshop keeps its own version table
MIGRATION_OPTIONS = {
    "target_metadata": Base.metadata,
    "version_table": "alembic_version_evshop",
    "compare_type": True,
}


def run_offline(dsn: str):
    context.configure(url=dsn, literal_binds=True, dialect_opts={"paramstyle": "named"}, **MIGRATION_OPTIONS)
    with context.begin_transaction():
        context.run_migrations()


def run_online(dsn: str):
    engine = create_engine(dsn, poolclass=pool.NullPool)
    with engine.connect() as connection:
        context.configure(connection=connection, **MIGRATION_OPTIONS)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_offline(settings.POSTGRES_DSN)
else:
    run_online(settings.POSTGRES_DSN)
