"""
Script to reset the database by dropping and recreating all tables.
Use this when you need to apply schema changes that require dropping tables.
"""
from sqlalchemy import text
from app.core.database import engine, Base
import app.models  # noqa: F401
import logging

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Children first so foreign keys never block the drop
TABLES = ["reviews", "order_items", "orders", "products", "users"]


def reset_database():
    """Drop all tables and recreate them."""
    try:
        with engine.connect() as conn:
            logger.info("Dropping existing tables...")
            cascade = "" if engine.dialect.name == "sqlite" else " CASCADE"
            for table in TABLES:
                conn.execute(text(f"DROP TABLE IF EXISTS {table}{cascade}"))
            conn.commit()
            logger.info("All tables dropped successfully")

        logger.info("Creating tables with new schema...")
        Base.metadata.create_all(bind=engine)
        logger.info("All tables created successfully")

    except Exception as e:
        logger.error(f"Error resetting database: {e}")
        raise


if __name__ == "__main__":
    print("WARNING: This will drop all existing data in the database!")
    print("Proceeding with database reset...")
    reset_database()
    print("\n✓ Database reset complete. Run init_db.py to create the admin account.")
