"""
Seed data for the Plant Shop API.

seed_data() fills a fresh MemStorage with the static catalogues: payment
methods, categories, services, products and the Monstera care sheet.
Prices are in paise (29900 == Rs 299).
"""

import logging

from schemas import (
    CategoryCreate,
    PaymentMethodCreate,
    ProductCreate,
    ProductDetailCreate,
    ServiceCreate,
)
from storage import MemStorage

logger = logging.getLogger(__name__)

UNSPLASH = "https://images.unsplash.com/photo-{}?ixlib=rb-1.2.1&auto=format&fit=crop&w={}&q=80"

SAMPLE_PAYMENT_METHODS = [
    {"name": "Credit / Debit Card", "code": "card", "icon": "credit-card", "requires_card_details": True, "sort_order": 1},
    {"name": "Google Pay", "code": "googlepay", "icon": "google", "is_digital_wallet": True, "sort_order": 2},
    {"name": "Apple Pay", "code": "applepay", "icon": "apple", "is_digital_wallet": True, "sort_order": 3},
    {"name": "PayPal", "code": "paypal", "icon": "paypal", "is_digital_wallet": True, "sort_order": 4},
    {"name": "Cash on Delivery", "code": "cod", "icon": "cash", "is_cash_option": True, "sort_order": 5},
]

SAMPLE_CATEGORIES = [
    {"name": "Plants", "slug": "plants"},
    {"name": "Pots", "slug": "pots"},
    {"name": "Soil", "slug": "soil"},
    {"name": "Accessories", "slug": "accessories"},
]

SAMPLE_SERVICES = [
    {"name": "Indoor Plant Care", "description": "Expert care for your indoor plants and arrangements", "icon": "leaf"},
    {"name": "Garden Design", "description": "Professional landscape and garden design services", "icon": "pencil-ruler"},
    {"name": "Plant Health", "description": "Diagnosis and treatment for plant diseases and pests", "icon": "heartbeat"},
    {"name": "Seasonal Planting", "description": "Seasonal planting and garden refresh services", "icon": "calendar"},
]

# Keyed by category slug; category ids are resolved while seeding.
SAMPLE_PRODUCTS = {
    "plants": [
        {
            "name": "Monstera Deliciosa Plant",
            "slug": "monstera-deliciosa",
            "description": "The Monstera Deliciosa, also known as the Swiss Cheese Plant, is famous for its quirky natural leaf holes.",
            "price": 49900,
            "original_price": 69900,
            "image_url": UNSPLASH.format("1614594895304-fe7116ac3b73", 800),
            "featured": True,
            "rating": 4.0,
            "review_count": 24,
        },
        {
            "name": "Snake Plant",
            "slug": "snake-plant",
            "description": "The Snake Plant is one of the most low-maintenance plants you can grow, making it perfect for beginners.",
            "price": 34900,
            "image_url": UNSPLASH.format("1598880513596-cf08398a71d1", 400),
            "featured": True,
            "rating": 4.5,
            "review_count": 42,
        },
        {
            "name": "Peace Lily",
            "slug": "peace-lily",
            "description": "The Peace Lily is an easy-care plant that brings elegance and tranquility to any indoor space.",
            "price": 59900,
            "image_url": UNSPLASH.format("1632822118334-6896c2e7364f", 400),
            "featured": True,
            "rating": 4.0,
            "review_count": 18,
        },
        {
            "name": "Money Plant",
            "slug": "money-plant",
            "description": "The Money Plant is believed to bring good luck and prosperity, and it's also very easy to grow.",
            "price": 29900,
            "image_url": UNSPLASH.format("1603436326446-74e69e9f54af", 400),
            "featured": True,
            "rating": 3.5,
            "review_count": 31,
        },
    ],
    "pots": [
        {
            "name": "Ceramic Pot",
            "slug": "ceramic-pot",
            "description": "A beautiful ceramic pot for your favorite plants.",
            "price": 59900,
            "image_url": UNSPLASH.format("1562517634-baa2da3acfbf", 500),
            "rating": 4.2,
            "review_count": 15,
        },
    ],
    "accessories": [
        {
            "name": "Gardening Gloves",
            "slug": "gardening-gloves",
            "description": "Durable gardening gloves to protect your hands while working in the garden.",
            "price": 24900,
            "image_url": UNSPLASH.format("1559070657-e4f688d76e8d", 500),
            "rating": 4.0,
            "review_count": 23,
        },
        {
            "name": "Watering Can",
            "slug": "watering-can",
            "description": "A stylish watering can for all your plant watering needs.",
            "price": 39900,
            "image_url": UNSPLASH.format("1588621697430-44e66a13a29f", 500),
            "rating": 4.1,
            "review_count": 19,
        },
        {
            "name": "Garden Shovel",
            "slug": "garden-shovel",
            "description": "A high-quality garden shovel for your planting needs.",
            "price": 34900,
            "image_url": UNSPLASH.format("1599707367072-cd6ada2bc375", 500),
            "rating": 3.9,
            "review_count": 27,
        },
    ],
    "soil": [
        {
            "name": "Organic Potting Soil",
            "slug": "organic-potting-soil",
            "description": "High-quality organic potting soil for healthy plant growth.",
            "price": 29900,
            "image_url": UNSPLASH.format("1467205077495-1712e4be58d0", 400),
            "rating": 4.3,
            "review_count": 32,
        },
        {
            "name": "Vermicompost",
            "slug": "vermicompost",
            "description": "Nutrient-rich organic compost produced by earthworms for your plants.",
            "price": 19900,
            "image_url": UNSPLASH.format("1581281698667-7524cd5b2ba2", 400),
            "rating": 4.6,
            "review_count": 44,
        },
        {
            "name": "Coco Peat",
            "slug": "coco-peat",
            "description": "Eco-friendly growing medium made from coconut husk.",
            "price": 14900,
            "image_url": UNSPLASH.format("1635526909130-f0b76e90f7dc", 400),
            "rating": 4.2,
            "review_count": 36,
        },
        {
            "name": "Perlite Mix",
            "slug": "perlite-mix",
            "description": "Lightweight soil amendment for improved drainage and aeration.",
            "price": 24900,
            "image_url": UNSPLASH.format("1605159723089-96db12163e1a", 400),
            "rating": 4.0,
            "review_count": 28,
        },
    ],
}

SAMPLE_DETAILS = {
    "monstera-deliciosa": {
        "light": "Bright Indirect",
        "water": "Once a week",
        "height": "30-40 cm",
        "temperature": "18-30°C",
        "care_instructions": (
            "Keep soil moist but not soggy\n"
            "Place in bright, indirect sunlight\n"
            "Wipe leaves occasionally to remove dust\n"
            "Repot every 2-3 years in spring"
        ),
    },
}


def seed_data(storage: MemStorage) -> None:
    """Populate the static catalogues. Meant to run once on an empty store."""
    for method in SAMPLE_PAYMENT_METHODS:
        storage.create_payment_method(PaymentMethodCreate(**method))

    categories = {c["slug"]: storage.create_category(CategoryCreate(**c)) for c in SAMPLE_CATEGORIES}

    for service in SAMPLE_SERVICES:
        storage.create_service(ServiceCreate(**service))

    for slug, products in SAMPLE_PRODUCTS.items():
        category = categories[slug]
        for p in products:
            product = storage.create_product(ProductCreate(category_id=category.id, **p))
            details = SAMPLE_DETAILS.get(product.slug)
            if details:
                storage.create_product_detail(ProductDetailCreate(product_id=product.id, **details))

    logger.info(
        "Seeded %d categories, %d products, %d services, %d payment methods",
        len(storage.categories), len(storage.products), len(storage.services), len(storage.payment_methods),
    )
