# scripts/setup/init_db.py
"""
Initialize database — creates all tables and seeds the sample garage layout.
Run once before first launch, or after adding new models.
Usage: python scripts/setup/init_db.py [--no-seed]
"""

import argparse
import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

from decimal import Decimal
from app.database import create_tables, engine, SessionLocal
from app.config import settings
from app.models.parking_space import ParkingSpace
from sqlalchemy import inspect, text

# (number, floor, section, type, status, hourly_rate, x, y)
SAMPLE_SPACES = [
    ("A1-01", 1, "A", "disabled", "available", "5.00", 20, 50),
    ("A1-02", 1, "A", "disabled", "available", "5.00", 100, 50),
    ("A1-03", 1, "A", "compact", "available", "8.00", 180, 50),
    ("A1-04", 1, "A", "compact", "available", "8.00", 260, 50),
    ("A1-05", 1, "A", "compact", "available", "8.00", 340, 50),
    ("A1-06", 1, "A", "compact", "available", "8.00", 420, 50),
    ("A1-07", 1, "A", "electric", "available", "12.00", 500, 50),
    ("A1-08", 1, "A", "electric", "available", "12.00", 580, 50),
    ("A1-09", 1, "A", "regular", "available", "10.00", 660, 50),
    ("A1-10", 1, "A", "regular", "available", "10.00", 740, 50),
    ("B1-01", 1, "B", "regular", "available", "10.00", 20, 200),
    ("B1-02", 1, "B", "regular", "available", "10.00", 100, 200),
    ("B1-03", 1, "B", "regular", "available", "10.00", 180, 200),
    ("B1-04", 1, "B", "regular", "available", "10.00", 260, 200),
    ("B1-05", 1, "B", "compact", "available", "8.00", 340, 200),
    ("B1-06", 1, "B", "compact", "available", "8.00", 420, 200),
    ("B1-07", 1, "B", "electric", "available", "12.00", 500, 200),
    ("B1-08", 1, "B", "electric", "available", "12.00", 580, 200),
    ("B1-09", 1, "B", "regular", "maintenance", "10.00", 660, 200),
    ("B1-10", 1, "B", "regular", "available", "10.00", 740, 200),
    ("A2-01", 2, "A", "disabled", "available", "5.00", 20, 50),
    ("A2-02", 2, "A", "disabled", "available", "5.00", 100, 50),
    ("A2-03", 2, "A", "compact", "available", "8.00", 180, 50),
    ("A2-04", 2, "A", "compact", "available", "8.00", 260, 50),
    ("A2-05", 2, "A", "electric", "available", "12.00", 340, 50),
    ("A2-06", 2, "A", "electric", "available", "12.00", 420, 50),
    ("A2-07", 2, "A", "regular", "available", "10.00", 500, 50),
    ("A2-08", 2, "A", "regular", "available", "10.00", 580, 50),
    ("A2-09", 2, "A", "regular", "available", "10.00", 660, 50),
    ("A2-10", 2, "A", "regular", "available", "10.00", 740, 50),
]


def seed_spaces() -> int:
    """Insert sample spaces whose number is not taken yet. Returns how many were added."""
    db = SessionLocal()
    try:
        existing = {number for (number,) in db.query(ParkingSpace.number).all()}
        added = 0
        for number, floor, section, type_, status, rate, x, y in SAMPLE_SPACES:
            if number in existing:
                continue
            db.add(ParkingSpace(number=number, floor=floor, section=section, type=type_,
                                status=status, hourly_rate=Decimal(rate), position={"x": x, "y": y}))
            added += 1
        db.commit()
        return added
    finally:
        db.close()


def main():
    parser = argparse.ArgumentParser(description="Create tables and seed sample spaces")
    parser.add_argument("--no-seed", action="store_true", help="only create tables")
    args = parser.parse_args()

    print("🗄️  Parking Reservation DB Initialization")
    print("=" * 40)
    print(f"📡 Database: {settings.DATABASE_URL}")

    # Test connection
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        print("✅ Database connection OK")
    except Exception as e:
        print(f"❌ Cannot connect to database: {e}")
        print("\nMake sure PostgreSQL is running:")
        print("  docker-compose up -d db")
        print("  # or: sudo systemctl start postgresql")
        sys.exit(1)

    print("\n📋 Creating tables...")
    create_tables()
    print("✅ All tables created")

    tables = sorted(inspect(engine).get_table_names())
    print(f"\n📊 Tables in database ({len(tables)} total):")
    for t in tables:
        print(f"   ✓ {t}")

    if not args.no_seed:
        added = seed_spaces()
        print(f"\n🅿️  Seeded {added} sample spaces ({len(SAMPLE_SPACES) - added} already present)")

    print("\n🎉 Database ready! You can now start the backend:")
    print("   uvicorn app.main:app --host 0.0.0.0 --port 8080 --reload")


if __name__ == "__main__":
    main()
