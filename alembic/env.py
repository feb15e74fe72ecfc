import os
from logging.config import fileConfig

from alembic import context

from qbloader.core.config import settings
from qbloader.core.db import build_engine
from qbloader.models.base import Base


config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# qbloader.core.db imports every model module, so the metadata is complete
target_metadata = Base.metadata

# ALEMBIC_DATABASE_URL overrides the loader's own DATABASE_URL (.env included)
database_url = os.getenv("ALEMBIC_DATABASE_URL") or settings.DATABASE_URL
options = {
    "target_metadata": target_metadata,
    "compare_type": True,
    # SQLite can only alter tables by copying them
    "render_as_batch": database_url.startswith("sqlite"),
}


if context.is_offline_mode():
    context.configure(url=database_url, literal_binds=True, **options)
    with context.begin_transaction():
        context.run_migrations()
else:
    engine = build_engine(database_url)
    with engine.connect() as connection:
        context.configure(connection=connection, **options)
        with context.begin_transaction():
            context.run_migrations()
    engine.dispose()
