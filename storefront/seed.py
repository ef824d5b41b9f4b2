# storefront/seed.py
"""Populate an empty database with demo categories, products and an admin account.

Safe to run repeatedly: rows are matched by slug / e-mail and only created
when missing.
"""
import argparse
from decimal import Decimal

from sqlalchemy.orm import Session

from storefront.database import SessionLocal, init_db
from storefront.models.category import Category
from storefront.models.product import Product, ProductStatus
from storefront.models.stock import StockMovementType
from storefront.models.users import User
from storefront.utils.hashing import MAX_PASSWORD_BYTES, get_password_hash, password_too_long
from storefront.utils.stock import apply_stock_change

CATEGORIES = [
    {"name": "Electronics", "slug": "electronics", "description": "Latest electronic devices and gadgets"},
    {"name": "Fashion", "slug": "fashion", "description": "Trendy clothing and accessories"},
    {"name": "Home & Garden", "slug": "home-garden", "description": "Everything for your home and garden"},
    {"name": "Sports & Fitness", "slug": "sports-fitness", "description": "Sports equipment and fitness gear"},
]

PRODUCTS = [
    {
        "name": "Premium Wireless Headphones",
        "slug": "premium-wireless-headphones",
        "description": "High-quality wireless headphones with active noise cancellation, "
                       "30-hour battery life, and premium comfort design.",
        "price": Decimal("299.99"),
        "compare_price": Decimal("399.99"),
        "category": "electronics",
        "quantity": 50,
        "sku": "WH-001",
        "seo_title": "Premium Wireless Headphones",
        "seo_description": "Experience premium sound quality with noise cancellation technology",
    },
    {
        "name": "Smart Fitness Tracker",
        "slug": "smart-fitness-tracker",
        "description": "Advanced fitness tracker with heart rate monitoring, GPS tracking, "
                       "sleep analysis, and 7-day battery life.",
        "price": Decimal("199.99"),
        "compare_price": Decimal("249.99"),
        "category": "electronics",
        "quantity": 30,
        "sku": "FT-002",
        "seo_title": "Smart Fitness Tracker",
        "seo_description": "Track your fitness goals with our advanced smart fitness tracker",
    },
    {
        "name": "Ergonomic Office Chair",
        "slug": "ergonomic-office-chair",
        "description": "Comfortable ergonomic office chair with lumbar support, adjustable height, "
                       "and breathable mesh back.",
        "price": Decimal("459.99"),
        "compare_price": Decimal("599.99"),
        "category": "home-garden",
        "quantity": 15,
        "sku": "OC-003",
        "seo_title": "Ergonomic Office Chair",
        "seo_description": "Premium ergonomic office chair for comfortable work",
    },
    {
        "name": "Organic Cotton T-Shirt",
        "slug": "organic-cotton-t-shirt",
        "description": "Soft, comfortable, and eco-friendly organic cotton t-shirt. "
                       "Available in multiple colors and sizes.",
        "price": Decimal("29.99"),
        "compare_price": Decimal("39.99"),
        "category": "fashion",
        "quantity": 100,
        "sku": "TS-004",
        "seo_title": "Organic Cotton T-Shirt",
        "seo_description": "Comfortable and sustainable organic cotton t-shirt",
    },
    {
        "name": "Yoga Mat Premium",
        "slug": "yoga-mat-premium",
        "description": "Non-slip premium yoga mat with excellent cushioning and grip. "
                       "Perfect for all types of yoga practice.",
        "price": Decimal("79.99"),
        "compare_price": Decimal("99.99"),
        "category": "sports-fitness",
        "quantity": 45,
        "sku": "YM-006",
        "seo_title": "Premium Yoga Mat",
        "seo_description": "High-quality yoga mat for comfortable practice",
    },
]


def seed_catalog(db: Session) -> dict:
    created = {"categories": 0, "products": 0}

    categories = {}
    for data in CATEGORIES:
        category = db.query(Category).filter(Category.slug == data["slug"]).first()
        if not category:
            category = Category(**data)
            db.add(category)
            db.flush()
            created["categories"] += 1
        categories[data["slug"]] = category

    for data in PRODUCTS:
        if db.query(Product).filter(Product.slug == data["slug"]).first():
            continue
        fields = dict(data)
        category = categories[fields.pop("category")]
        quantity = fields.pop("quantity")
        product = Product(
            **fields,
            category_id=category.id,
            status=ProductStatus.ACTIVE,
            images=["/api/placeholder/400/400"],
            quantity=0,
        )
        db.add(product)
        db.flush()
        apply_stock_change(db, product, quantity, movement_type=StockMovementType.IN, reason="Initial stock")
        created["products"] += 1

    db.commit()
    return created


def seed_admin(db: Session, email: str, password: str, name: str = "Store Admin") -> bool:
    email = email.strip().lower()
    if db.query(User).filter(User.email == email).first():
        return False
    db.add(User(email=email, password_hash=get_password_hash(password), name=name, role="admin"))
    db.commit()
    return True


def main(argv=None):
    parser = argparse.ArgumentParser(description="Seed the storefront database with demo data.")
    parser.add_argument("--admin-email", help="Create an admin account with this e-mail")
    parser.add_argument("--admin-password", help="Password for the admin account")
    args = parser.parse_args(argv)

    if bool(args.admin_email) != bool(args.admin_password):
        parser.error("--admin-email and --admin-password must be given together")
    if args.admin_password and password_too_long(args.admin_password):
        parser.error(f"--admin-password must be at most {MAX_PASSWORD_BYTES} bytes")

    init_db()
    db = SessionLocal()
    try:
        created = seed_catalog(db)
        print(f"Categories created: {created['categories']}")
        print(f"Products created: {created['products']}")
        if args.admin_email:
            if seed_admin(db, args.admin_email, args.admin_password):
                print(f"Admin account created: {args.admin_email}")
            else:
                print(f"Admin account already exists: {args.admin_email}")
    finally:
        db.close()


if __name__ == "__main__":
    main()
