"""
Sample catalog bootstrap.

One-shot and idempotent: the index is created only if missing and each
product is upserted under its fixed id, so re-running just overwrites the
same ten documents.
"""

from typing import Iterable, List, Optional

from core.logging import get_logger
from product_search.errors import ProductSearchError
from product_search.models import Product
from product_search.search_service import ProductSearchService

logger = get_logger(__name__)

_IMG = "https://images.unsplash.com/photo-{}?w=300&h=200&fit=crop"

SAMPLE_PRODUCTS: List[Product] = [
    Product(
        id="1",
        name="Running Shoes Pro",
        description="Lightweight breathable running shoes with cushioned sole for marathon "
                    "training and daily jogging on pavement or trail",
        category="Footwear",
        price=129.99,
        image_url=_IMG.format("1542291026-7eec264c27ff"),
    ),
    Product(
        id="2",
        name="Wireless Noise-Cancelling Headphones",
        description="Over-ear Bluetooth headphones with active noise cancellation, 30-hour "
                    "battery life, perfect for music lovers and remote workers",
        category="Electronics",
        price=249.99,
        image_url=_IMG.format("1505740420928-5e560c06d30e"),
    ),
    Product(
        id="3",
        name="Organic Green Tea Collection",
        description="Premium Japanese matcha and sencha green tea variety pack, rich in "
                    "antioxidants, calming and refreshing natural beverage",
        category="Food & Beverage",
        price=24.99,
        image_url=_IMG.format("1556881286-fc6915169721"),
    ),
    Product(
        id="4",
        name="Ergonomic Office Chair",
        description="Adjustable lumbar support mesh office chair with headrest, designed for "
                    "long hours of comfortable sitting and back health",
        category="Furniture",
        price=449.99,
        image_url=_IMG.format("1580480055273-228ff5388ef8"),
    ),
    Product(
        id="5",
        name="Stainless Steel Water Bottle",
        description="Double-wall vacuum insulated water bottle keeps drinks cold for 24 hours "
                    "or hot for 12, eco-friendly reusable container",
        category="Kitchen",
        price=34.99,
        image_url=_IMG.format("1602143407151-7111542de6e8"),
    ),
    Product(
        id="6",
        name="Yoga Mat Premium",
        description="Extra thick non-slip yoga mat for home workouts, pilates, stretching and "
                    "meditation, made from eco-friendly TPE material",
        category="Sports",
        price=49.99,
        image_url=_IMG.format("1601925260368-ae2f83cf8b7f"),
    ),
    Product(
        id="7",
        name="Mechanical Keyboard RGB",
        description="Compact tenkeyless mechanical keyboard with Cherry MX switches, "
                    "programmable RGB lighting for gaming and programming",
        category="Electronics",
        price=159.99,
        image_url=_IMG.format("1618384887929-16ec33fab9ef"),
    ),
    Product(
        id="8",
        name="Portable Bluetooth Speaker",
        description="Waterproof portable speaker with 360-degree surround sound, 20-hour "
                    "battery, great for outdoor adventures and pool parties",
        category="Electronics",
        price=89.99,
        image_url=_IMG.format("1608043152269-423dbba4e7e1"),
    ),
    Product(
        id="9",
        name="French Press Coffee Maker",
        description="Borosilicate glass french press for brewing rich full-bodied coffee at "
                    "home, stainless steel filter for smooth extraction",
        category="Kitchen",
        price=39.99,
        image_url=_IMG.format("1517256064527-9d164d0e5961"),
    ),
    Product(
        id="10",
        name="Backpack Laptop Bag",
        description="Water-resistant travel backpack with padded laptop compartment fits "
                    "15.6 inch laptops, multiple pockets for organization",
        category="Bags",
        price=79.99,
        image_url=_IMG.format("1553062407-98eeb64c6a62"),
    ),
]


def seed_sample_catalog(
    service: ProductSearchService,
    products: Optional[Iterable[Product]] = None,
) -> int:
    """
    Create the index if needed and upsert the sample products.

    A product that fails to index is logged and skipped.

    Returns:
        Number of products indexed.
    """
    products = list(products if products is not None else SAMPLE_PRODUCTS)
    logger.info("Initializing product index and sample data", products=len(products))

    service.create_index_if_not_exists()

    indexed = 0
    for product in products:
        try:
            service.index_product(product)
            indexed += 1
        except ProductSearchError as e:
            logger.warning("Failed to index product", product_id=product.id, name=product.name, error=str(e))

    logger.info("Sample data initialization complete", indexed=indexed, total=len(products))
    return indexed
