"""Create the schema directly, bypassing Alembic (local development only)."""

import logging

from quluub.db.session import create_tables, engine

logger = logging.getLogger(__name__)


def init_db() -> None:
    """Initialize the database by creating all tables."""
    create_tables()
    logger.info("Database initialized at %s", engine.url.render_as_string(hide_password=True))


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    init_db()


if __name__ == "__main__":
    main()
