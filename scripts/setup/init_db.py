"""
Initialize database — creates all tables and the default layout.
Run once before first launch, or after adding new models.
Usage: python scripts/setup/init_db.py [--no-seed]
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

import argparse
from sqlalchemy import inspect, text
from sqlalchemy.exc import SQLAlchemyError
from app.database import SessionLocal, create_tables, engine
from app.config import settings
from app.services.slot_service import ensure_default_floor, seed_default_layout


def main():
    parser = argparse.ArgumentParser(description="Create parking tables and seed the default layout")
    parser.add_argument("--no-seed", action="store_true", help="Skip creating the default floor and slots")
    args = parser.parse_args()

    print("🗄️  Smart Parking DB Initialization")
    print("=" * 40)
    print(f"📡 Database: {settings.DATABASE_URL}")

    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        print("✅ Database connection OK")
    except SQLAlchemyError as e:
        print(f"❌ Cannot connect to database: {e}")
        sys.exit(1)

    print("\n📋 Creating tables...")
    create_tables()
    tables = sorted(inspect(engine).get_table_names())
    print(f"📊 Tables in database ({len(tables)} total):")
    for t in tables:
        print(f"   ✓ {t}")

    if not args.no_seed:
        db = SessionLocal()
        try:
            floor_number = ensure_default_floor(db).floor_number
            created = seed_default_layout(db)
        finally:
            db.close()
        print(f"\n🅿️  Default floor {floor_number} ready, {created} slot(s) seeded")

    print("\n🎉 Database ready! You can now start the backend:")
    print(f"   uvicorn app.main:app --host {settings.BACKEND_HOST} --port {settings.BACKEND_PORT} --reload")


if __name__ == "__main__":
    main()
