"""
Database initialization script
Creates all tables and optionally seeds the admin account
"""
from loguru import logger

from storefront.services.seed_service import run_seed
from storefront.utils.database import SessionLocal, create_tables, drop_tables


def init_database(seed: bool = False):
    """Initialize the database by creating all tables"""
    logger.info("Creating database tables...")
    create_tables()
    logger.info("Database tables created successfully!")
    if seed:
        seed_database()


def reset_database(seed: bool = False):
    """Reset the database by dropping and recreating all tables"""
    logger.info("Dropping existing tables...")
    drop_tables()
    init_database(seed=seed)
    logger.info("Database reset successfully!")


def seed_database():
    db = SessionLocal()
    try:
        run_seed(db)
    finally:
        db.close()


def main():
    import argparse

    parser = argparse.ArgumentParser(description="Database management script")
    parser.add_argument("--init", action="store_true", help="Initialize database")
    parser.add_argument("--reset", action="store_true", help="Reset database")
    parser.add_argument("--seed", action="store_true", help="Create the admin user after initializing")

    args = parser.parse_args()

    if args.reset:
        reset_database(seed=args.seed)
    elif args.init:
        init_database(seed=args.seed)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
