from logging.config import fileConfig

from alembic import context
from sqlalchemy import pool, create_engine

from oceanview.core.config import settings
from oceanview.db.session import Base

# Import all models so Alembic sees them in metadata
from oceanview.models.user import User  # noqa: F401
from oceanview.models.destination import Destination  # noqa: F401
from oceanview.models.cruise import Cruise  # noqa: F401
from oceanview.models.cabin_type import CabinType  # noqa: F401
from oceanview.models.amenity import Amenity  # noqa: F401
from oceanview.models.booking import Booking  # noqa: F401
from oceanview.models.payment import Payment  # noqa: F401
from oceanview.models.testimonial import Testimonial  # noqa: F401
from oceanview.models.enquiry import Enquiry, EnquiryResponse  # noqa: F401

config = context.config

# sqlalchemy.url always comes from the runtime DATABASE_URL, never from alembic.ini
config.set_main_option("sqlalchemy.url", settings.DATABASE_URL)

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode."""
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Run migrations in 'online' mode."""
    connectable = create_engine(config.get_main_option("sqlalchemy.url"), poolclass=pool.NullPool)

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
            # SQLite cannot ALTER most things in place
            render_as_batch=connection.dialect.name == "sqlite",
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
