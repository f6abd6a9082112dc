"""
Seed default roles and a sample catalogue (class types, instructors, plans)
Usage: python seed_sample_data.py
"""
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))

from yogastudio.database import Base, SessionLocal, engine
from yogastudio.seed import seed_default_roles, seed_sample_data

logging.basicConfig(level=logging.INFO, format='%(message)s')
logger = logging.getLogger(__name__)


def main():
    Base.metadata.create_all(bind=engine, checkfirst=True)
    db = SessionLocal()
    try:
        seed_default_roles(db)
        counts = seed_sample_data(db)
    except Exception as e:
        logger.error(f"❌ Seeding failed: {e}")
        db.rollback()
        sys.exit(1)
    finally:
        db.close()

    if not any(counts.values()):
        logger.info("Nothing to seed, catalogue already populated")


if __name__ == "__main__":
    main()
