#!/usr/bin/env python3
"""Prepare the MongoDB collections used by ApplyDesk, or reset them."""

import argparse
import sys

from dotenv import load_dotenv

load_dotenv()

from applydesk.config import load_settings
from applydesk.database import ALL_COLLECTIONS, LINKS, create_indexes, get_database, get_mongo_client
from applydesk.services.auth_service import AuthService


def reset_all_collections(db):
    """Drop all collections and start fresh."""
    print("🗑️  Clearing all collections...")
    for collection_name in ALL_COLLECTIONS:
        try:
            db[collection_name].drop()
            print(f"   ✓ Dropped {collection_name}")
        except Exception as e:
            print(f"   ⚠️  Could not drop {collection_name}: {e}")
    print("\n✅ Database reset complete!")


def setup(db, settings):
    """Create indexes, prune expired sessions and check that the links collection is reachable."""
    print("🔄 Creating indexes...")
    create_indexes(db)

    removed = AuthService(db, settings.session_ttl_seconds).cleanup_expired_sessions()
    print(f"🧹 Removed {removed['sessions_deleted']} expired session(s), {removed['resets_deleted']} reset token(s)")

    print("🧪 Testing collection access...")
    try:
        db[LINKS].find_one({}, {"_id": 1})
    except Exception as e:
        print(f"❌ Collection test failed: {e}")
        return False
    print("✅ Collections ready!")
    return True


def main(argv=None):
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--reset", action="store_true", help="drop every ApplyDesk collection first")
    args = parser.parse_args(argv)

    settings = load_settings()
    db = get_database(get_mongo_client(settings), settings)

    if args.reset:
        print("   This will DELETE ALL existing data.")
        confirm = input("\n⚠️  Are you sure? Type 'yes' to continue: ")
        if confirm.lower() != "yes":
            print("❌ Reset cancelled.")
            return 1
        reset_all_collections(db)

    return 0 if setup(db, settings) else 1


if __name__ == "__main__":
    sys.exit(main())
