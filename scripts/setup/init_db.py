# scripts/setup/init_db.py
"""
Initialize database — creates all tables and optionally loads a facility layout.
Run once before first launch, or after adding new models.
Usage:
    python scripts/setup/init_db.py
    python scripts/setup/init_db.py --layout scripts/setup/sample_layout.json
"""

import sys
import os
import argparse
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

from app.database import create_tables, engine, SessionLocal
from app.config import settings
from app.services.layout_service import load_layout_file
from sqlalchemy import inspect, text


def main():
    parser = argparse.ArgumentParser(description="Create tables and load a parking layout")
    parser.add_argument("--layout", help="Path to a layout JSON file")
    args = parser.parse_args()

    print("🗄️  Parking DB Initialization")
    print("=" * 40)
    print(f"📡 Database: {settings.DATABASE_URL}")

    # Test connection
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        print("✅ Database connection OK")
    except Exception as e:
        print(f"❌ Cannot connect to database: {e}")
        print("\nCheck DATABASE_URL in .env, or make sure PostgreSQL is running:")
        print("  sudo systemctl start postgresql")
        sys.exit(1)

    print("\n📋 Creating tables...")
    create_tables()
    tables = sorted(inspect(engine).get_table_names())
    print(f"\n📊 Tables in database ({len(tables)} total):")
    for t in tables:
        print(f"   ✓ {t}")

    if args.layout:
        print(f"\n🅿️  Loading layout from {args.layout}...")
        db = SessionLocal()
        try:
            summary = load_layout_file(db, args.layout)
        finally:
            db.close()
        for kind, count in summary.items():
            print(f"   ✓ {count} {kind}")

    print("\n🎉 Database ready! You can now start the backend:")
    print("   uvicorn app.main:app --host 0.0.0.0 --port 8080 --reload")


if __name__ == "__main__":
    main()
