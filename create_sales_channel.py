#!/usr/bin/env python3
"""
Sales Channel Creation Script

Creates a store API sales channel, prints its access key and optionally
enables the wishlist feature for it.
Usage: python create_sales_channel.py
"""

import secrets
import sys
import os

# Add the project root to Python path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from sqlalchemy.orm import Session
from db.session import SessionLocal
from core.logging_config import get_logger
from core.model import SalesChannel
from core.system_config import SystemConfigService
from core.wishlist import WISHLIST_ENABLED_CONFIG

logger = get_logger("sales_channel_creation")


def generate_access_key() -> str:
    return "SW" + secrets.token_hex(12).upper()


def create_sales_channel():
    """Interactive sales channel creation"""
    print("=" * 50)
    print("🔧 STORE API SALES CHANNEL CREATION")
    print("=" * 50)

    name = input("Enter sales channel name: ").strip()
    if not name:
        print("❌ Name is required!")
        return False

    enable_wishlist = input("Enable wishlist for this channel? [Y/n]: ").strip().lower() != "n"

    db: Session = SessionLocal()
    try:
        existing = db.query(SalesChannel).filter(SalesChannel.name == name).first()
        if existing:
            print(f"❌ Sales channel {name} already exists!")
            return False

        sales_channel = SalesChannel(name=name, access_key=generate_access_key())
        db.add(sales_channel)
        db.commit()
        db.refresh(sales_channel)

        SystemConfigService(db).set(WISHLIST_ENABLED_CONFIG, enable_wishlist, sales_channel.id)

        print(f"✅ Sales channel created successfully!")
        print(f"🆔 ID: {sales_channel.id}")
        print(f"🔑 Access key: {sales_channel.access_key}")
        print(f"💝 Wishlist enabled: {enable_wishlist}")

        logger.info(f"Sales channel created: {name} (ID: {sales_channel.id})")
        return True

    except Exception as e:
        print(f"❌ Failed to create sales channel: {str(e)}")
        logger.error(f"Failed to create sales channel {name}: {str(e)}")
        db.rollback()
        return False
    finally:
        db.close()


def main():
    """Main function"""
    try:
        success = create_sales_channel()
        if not success:
            print("\n💥 Sales channel creation failed!")
            sys.exit(1)
    except KeyboardInterrupt:
        print("\n\n⚠️  Operation cancelled by user.")
        sys.exit(1)


if __name__ == "__main__":
    main()
