"""
Script to reset the database by dropping and recreating all tables.
Use this when you need to apply schema changes that require dropping tables.
"""
from agromarket.core.config import settings
from agromarket.core.database import Base, create_db_engine, dispose_db
from agromarket import models  # noqa: F401
import logging

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def reset_database(database_url: str = settings.DATABASE_URL):
    """Drop all tables and recreate them."""
    engine = create_db_engine(database_url)
    try:
        logger.info("Dropping existing tables...")
        Base.metadata.drop_all(bind=engine)
        logger.info("All tables dropped successfully")

        logger.info("Creating tables with new schema...")
        Base.metadata.create_all(bind=engine)
        logger.info("All tables created successfully")
    except Exception as e:
        logger.error(f"Error resetting database: {e}")
        raise
    finally:
        dispose_db(engine)


if __name__ == "__main__":
    print("WARNING: This will drop all existing data in the database!")
    print("Proceeding with database reset...")
    reset_database()
    print("\n✓ Database reset complete.")
