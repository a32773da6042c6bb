#!/usr/bin/env python3
"""
Create the product index and load the sample catalog into Elasticsearch.

Idempotent: the index is only created when missing and products are
upserted by id.

Usage:
    # From project root, with venv active:
    PYTHONPATH=src python scripts/seed_catalog.py

    # Dry run - list what would be indexed:
    PYTHONPATH=src python scripts/seed_catalog.py --dry-run

    # Only create the index (no documents):
    PYTHONPATH=src python scripts/seed_catalog.py --index-only
"""

import argparse
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from dotenv import load_dotenv
load_dotenv()

from config.settings import get_settings
from core.logging import configure_logging, get_logger
from product_search.errors import ProductSearchError
from product_search.search_service import ProductSearchService
from product_search.seed import SAMPLE_PRODUCTS, seed_sample_catalog

logger = get_logger("seed_catalog")


def main():
    parser = argparse.ArgumentParser(description="Seed the product index with sample data")
    parser.add_argument("--dry-run", action="store_true", help="List products without indexing")
    parser.add_argument("--index-only", action="store_true", help="Create the index and stop")
    args = parser.parse_args()

    configure_logging(json_logs=False)
    settings = get_settings()

    print(f"Elasticsearch: {settings.elasticsearch_url}")
    print(f"Index:         {settings.product_index_name}")

    if args.dry_run:
        for product in SAMPLE_PRODUCTS:
            print(f"  [{product.id:>2}] {product.name} ({product.category}, {product.price:.2f})")
        print(f"Dry run: {len(SAMPLE_PRODUCTS)} products would be indexed")
        return 0

    service = ProductSearchService()
    try:
        if args.index_only:
            created = service.create_index_if_not_exists()
            print("Index created" if created else "Index already exists")
            return 0
        indexed = seed_sample_catalog(service)
    except ProductSearchError as e:
        logger.error("Seeding failed", error=str(e))
        return 1

    print(f"Indexed {indexed}/{len(SAMPLE_PRODUCTS)} products")
    return 0 if indexed == len(SAMPLE_PRODUCTS) else 1


if __name__ == "__main__":
    sys.exit(main())
