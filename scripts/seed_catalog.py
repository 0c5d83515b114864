#!/usr/bin/env python3
"""Seed catalog script.

Creates the database tables, an admin user and a small sample catalog,
then prints a bearer token for the admin.

Usage:
    python scripts/seed_catalog.py
    python scripts/seed_catalog.py --email admin@example.com --no-products
"""

import argparse
import asyncio
import sys
from datetime import timedelta
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from storefront.application.container import Container, build_container
from storefront.catalog import Matches
from storefront.domain.entities import CATEGORIES, USERS, User
from storefront.infrastructure.config import settings
from storefront.infrastructure.database import create_tables

SAMPLE_CATALOG = {
    "Electronics": {
        "Phones": [
            ("Pixel Phone", "Android phone with a bright display and all-day battery", [
                {"ram": "8GB", "price": 599.0, "quantity": 25},
                {"ram": "12GB", "price": 699.0, "quantity": 10},
            ]),
            ("Budget Phone", "Affordable phone with a large battery and dual cameras", [
                {"ram": "4GB", "price": 179.0, "quantity": 60},
            ]),
        ],
        "Laptops": [
            ("Ultrabook 14", "Thin and light laptop for travel with a long battery life", [
                {"ram": "16GB", "price": 1199.0, "quantity": 8},
                {"ram": "32GB", "price": 1499.0, "quantity": 4},
            ]),
        ],
    },
    "Home": {
        "Kitchen": [
            ("Smart Kettle", "Wi-Fi kettle with temperature presets and keep-warm mode", [
                {"ram": "N/A", "price": 89.0, "quantity": 40},
            ]),
        ],
    },
}


async def ensure_admin(container: Container, email: str) -> User:
    """Get or create the admin user."""
    existing = await container.store.find(USERS, (Matches("email", email, exact=True),), limit=1)
    if existing:
        return User.from_document(existing[0])
    document = await container.store.insert(
        USERS,
        {"email": email, "name": "Admin", "role": "admin", "is_active": True, "wishlist": []},
    )
    return User.from_document(document)


async def seed_catalog(container: Container, admin: User) -> dict[str, int]:
    """Create the sample categories, subcategories and products.

    Categories that already exist are left untouched.
    """
    counts = {"categories": 0, "subcategories": 0, "products": 0}
    for category_name, subcategories in SAMPLE_CATALOG.items():
        if await container.store.count(CATEGORIES, (Matches("name", category_name, exact=True),)):
            continue
        category = await container.categories.create(category_name, actor=admin)
        counts["categories"] += 1

        for sub_name, products in subcategories.items():
            sub_category = await container.subcategories.create(
                sub_name, category.id, actor=admin
            )
            counts["subcategories"] += 1

            for title, description, variants in products:
                await container.products.create(
                    {
                        "title": title,
                        "description": description,
                        "sub_category": sub_category.id,
                        "variants": variants,
                    },
                    actor=admin,
                )
                counts["products"] += 1
    return counts


async def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Seed the storefront catalog")
    parser.add_argument(
        "--email",
        default="admin@example.com",
        help="Email of the admin user (default: admin@example.com)",
    )
    parser.add_argument(
        "--no-products",
        action="store_true",
        help="Only create tables and the admin user",
    )
    parser.add_argument(
        "--token-days",
        type=int,
        default=7,
        help="Lifetime of the printed token in days",
    )
    args = parser.parse_args()

    container = build_container(settings)

    print("=" * 60)
    print("Storefront Catalog Seeder")
    print("=" * 60)

    try:
        if settings.store_backend == "sql":
            print("Creating database tables...")
            await create_tables(container.store.engine)
            print("Tables ready.")

        admin = await ensure_admin(container, args.email)
        print(f"Admin user: {admin.email} ({admin.id})")

        if not args.no_products:
            counts = await seed_catalog(container, admin)
            print(f"  Categories: {counts['categories']}")
            print(f"  Subcategories: {counts['subcategories']}")
            print(f"  Products: {counts['products']}")

        token = container.token_provider.issue(admin.id, timedelta(days=args.token_days))
        print()
        print(f"Bearer token: {token}")
    finally:
        await container.close()

    print("=" * 60)
    print("Seeding complete!")
    print("=" * 60)


if __name__ == "__main__":
    asyncio.run(main())
