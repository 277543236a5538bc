"""
Demo data generation for the catalog and accounts
This script generates data for:
- Categories (three-level tree)
- Brands
- Products with images and specifications
- Customers
- Discount codes

Orders, carts and reviews come from real API traffic and are not generated here.
"""
import random
from datetime import timedelta
from decimal import Decimal

from faker import Faker
from loguru import logger

from storefront.models.cart import CartItem, WishlistItem
from storefront.models.discount import DISCOUNT_FIXED, DISCOUNT_PERCENTAGE, Discount, ProductDiscount
from storefront.models.order import Order
from storefront.models.product import Brand, Category, Product, ProductImage, ProductSpecification
from storefront.models.review import Review
from storefront.models.user import ROLE_CUSTOMER, User
from storefront.services.auth_service import hash_password
from storefront.utils.database import SessionLocal, create_tables
from storefront.utils.dates import utcnow
from storefront.utils.slug import generate_slug, make_unique_slug

DEFAULT_CUSTOMER_PASSWORD = "password123"

CATEGORY_TREE = {
    "Vitamins & Supplements": {
        "Multivitamins": ["Men's Multivitamins", "Women's Multivitamins"],
        "Minerals": ["Calcium", "Magnesium"],
    },
    "Sports Nutrition": {
        "Protein": ["Whey Protein", "Plant Protein"],
        "Pre-Workout": [],
    },
    "Personal Care": {
        "Skin Care": ["Moisturizers", "Sunscreen"],
        "Hair Care": [],
    },
    "Herbal Remedies": {
        "Ayurvedic": [],
        "Herbal Teas": [],
    },
}

BRANDS = [
    ("Himalaya", "India"),
    ("Optimum Nutrition", "USA"),
    ("Nature's Bounty", "USA"),
    ("Dabur", "India"),
    ("Blackmores", "Australia"),
    ("MuscleBlaze", "India"),
    ("Cetaphil", "France"),
    ("Organic India", "India"),
]

PRODUCT_TEMPLATES = [
    ("Daily Multivitamin Tablets", "60 tablets", 900, 2500),
    ("Vitamin D3 1000 IU", "120 softgels", 600, 1500),
    ("Magnesium Glycinate", "90 capsules", 1200, 2800),
    ("Gold Standard Whey", "2 lb", 6500, 9500),
    ("Plant Protein Blend", "1 kg", 4000, 7000),
    ("Ashwagandha Capsules", "60 capsules", 450, 1200),
    ("Green Tea Extract", "100 g", 300, 900),
    ("Gentle Skin Cleanser", "250 ml", 1100, 2200),
    ("SPF 50 Sunscreen", "50 ml", 800, 1800),
    ("Omega-3 Fish Oil", "60 softgels", 1300, 3200),
]

DISCOUNTS = [
    ("Welcome offer", "WELCOME10", DISCOUNT_PERCENTAGE, Decimal("10"), None, Decimal("500")),
    ("Festive sale", "DASHAIN20", DISCOUNT_PERCENTAGE, Decimal("20"), Decimal("2000"), Decimal("1500")),
    ("Flat 250 off", "FLAT250", DISCOUNT_FIXED, Decimal("250"), Decimal("1500"), None),
]


class DataGenerator:
    def __init__(self, db=None, seed=None):
        self.db = db or SessionLocal()
        self._owns_session = db is None
        self.fake = Faker(["en_US", "en_IN"])
        self.random = random.Random(seed)
        if seed is not None:
            self.fake.seed_instance(seed)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self._owns_session:
            self.db.close()

    def _commit(self, label: str, rows: list) -> list:
        try:
            self.db.commit()
            logger.info(f"Created {len(rows)} {label}")
            return rows
        except Exception:
            self.db.rollback()
            logger.exception(f"Error creating {label}")
            raise

    def generate_categories(self) -> list:
        """Generate the category tree"""
        logger.info("Generating categories...")
        slugs = {slug for (slug,) in self.db.query(Category.slug).all()}
        categories = []

        def add(name, level, parent=None, order=0):
            slug = make_unique_slug(generate_slug(name), slugs)
            slugs.add(slug)
            category = Category(
                name=name,
                slug=slug,
                description=f"Shop {name.lower()}",
                level=level,
                parent=parent,
                display_order=order,
            )
            self.db.add(category)
            categories.append(category)
            return category

        for i, (root_name, children) in enumerate(CATEGORY_TREE.items()):
            root = add(root_name, 1, order=i)
            for j, (child_name, grandchildren) in enumerate(children.items()):
                child = add(child_name, 2, root, order=j)
                for k, grandchild_name in enumerate(grandchildren):
                    add(grandchild_name, 3, child, order=k)

        return self._commit("categories", categories)

    def generate_brands(self) -> list:
        logger.info("Generating brands...")
        slugs = {slug for (slug,) in self.db.query(Brand.slug).all()}
        brands = []
        for name, country in BRANDS:
            slug = make_unique_slug(generate_slug(name), slugs)
            slugs.add(slug)
            brand = Brand(
                name=name,
                slug=slug,
                description=self.fake.sentence(nb_words=12),
                country_of_origin=country,
                is_featured=self.random.random() < 0.4,
            )
            self.db.add(brand)
            brands.append(brand)
        return self._commit("brands", brands)

    def generate_products(self, count: int = 40) -> list:
        """Generate products with images and specifications for existing brands and categories"""
        logger.info(f"Generating {count} products...")

        categories = self.db.query(Category).all()
        brands = self.db.query(Brand).all()
        if not categories or not brands:
            logger.warning("No categories or brands found. Please generate them first.")
            return []

        slugs = {slug for (slug,) in self.db.query(Product.slug).all()}
        products = []
        for _ in range(count):
            base_name, volume, min_price, max_price = self.random.choice(PRODUCT_TEMPLATES)
            brand = self.random.choice(brands)
            category = self.random.choice(categories)
            name = f"{brand.name} {base_name}"

            price = Decimal(self.random.randint(min_price, max_price))
            original_price = price + Decimal(self.random.choice([0, 0, 100, 250, 500]))
            slug = make_unique_slug(generate_slug(name), slugs)
            slugs.add(slug)

            product = Product(
                name=name,
                slug=slug,
                sku=f"{brand.name[:3].upper()}-{self.fake.unique.random_number(digits=6, fix_len=True)}",
                brand=brand,
                category=category,
                price=price,
                original_price=original_price if original_price > price else None,
                cost_price=(price * Decimal("0.6")).quantize(Decimal("0.01")),
                short_description=self.fake.sentence(nb_words=10),
                long_description=self.fake.paragraph(nb_sentences=4),
                volume=volume,
                country_of_origin=brand.country_of_origin,
                features=[self.fake.sentence(nb_words=5) for _ in range(3)],
                stock_quantity=self.random.randint(0, 80),
                low_stock_threshold=5,
                is_active=self.random.random() < 0.9,
                is_featured=self.random.random() < 0.2,
            )
            for position in range(self.random.randint(1, 3)):
                product.images.append(
                    ProductImage(
                        image_url=f"https://picsum.photos/seed/{slug}-{position}/600/600",
                        alt_text=name,
                        is_primary=position == 0,
                        display_order=position + 1,
                    )
                )
            product.specifications.append(ProductSpecification(key="Net quantity", value=volume))
            product.specifications.append(ProductSpecification(key="Shelf life", value="24 months"))

            self.db.add(product)
            products.append(product)

        return self._commit("products", products)

    def generate_customers(self, count: int = 20) -> list:
        """Generate verified customer accounts sharing one demo password"""
        logger.info(f"Generating {count} customers...")
        emails = {email for (email,) in self.db.query(User.email).all()}
        password_hash = hash_password(DEFAULT_CUSTOMER_PASSWORD)

        customers = []
        while len(customers) < count:
            first_name = self.fake.first_name()
            last_name = self.fake.last_name()
            email = f"{first_name}.{last_name}{self.random.randint(1, 999)}@example.com".lower()
            if email in emails:
                continue
            emails.add(email)

            customer = User(
                email=email,
                password_hash=password_hash,
                first_name=first_name,
                last_name=last_name,
                phone=f"98{self.random.randint(10000000, 99999999)}",
                role=ROLE_CUSTOMER,
                is_email_verified=True,
            )
            self.db.add(customer)
            customers.append(customer)

        return self._commit("customers", customers)

    def generate_discounts(self) -> list:
        logger.info("Generating discounts...")
        existing = {code for (code,) in self.db.query(Discount.code).all()}
        products = self.db.query(Product).limit(5).all()
        now = utcnow()

        discounts = []
        for name, code, discount_type, value, min_purchase, max_discount in DISCOUNTS:
            if code in existing:
                continue
            discount = Discount(
                name=name,
                code=code,
                type=discount_type,
                value=value,
                min_purchase_amount=min_purchase,
                max_discount_amount=max_discount,
                start_date=now - timedelta(days=1),
                end_date=now + timedelta(days=60),
                usage_limit=self.random.choice([None, 100, 500]),
            )
            if discount_type == DISCOUNT_PERCENTAGE:
                for product in products:
                    discount.products.append(ProductDiscount(product=product))
            self.db.add(discount)
            discounts.append(discount)

        return self._commit("discounts", discounts)

    def clear_all_data(self):
        """Clear generated data; admin accounts are kept"""
        logger.info("Clearing all data...")
        try:
            # Children before parents
            for model in (CartItem, WishlistItem, Review, ProductDiscount, ProductImage, ProductSpecification):
                self.db.query(model).delete(synchronize_session=False)
            for order in self.db.query(Order).all():
                self.db.delete(order)
            self.db.query(Discount).delete(synchronize_session=False)
            self.db.query(Product).delete(synchronize_session=False)
            self.db.query(Brand).delete(synchronize_session=False)
            self.db.query(Category).filter(Category.level == 3).delete(synchronize_session=False)
            self.db.query(Category).filter(Category.level == 2).delete(synchronize_session=False)
            self.db.query(Category).delete(synchronize_session=False)
            self.db.query(User).filter(User.role == ROLE_CUSTOMER).delete(synchronize_session=False)
            self.db.commit()
            logger.info("All data cleared")
        except Exception:
            self.db.rollback()
            logger.exception("Error clearing data")
            raise

    def generate_all(self, products: int = 40, customers: int = 20) -> dict:
        """Generate the full demo data set"""
        logger.info("=== Generating demo data ===")
        summary = {
            "categories": len(self.generate_categories()),
            "brands": len(self.generate_brands()),
            "products": len(self.generate_products(products)),
            "customers": len(self.generate_customers(customers)),
            "discounts": len(self.generate_discounts()),
        }
        logger.info(f"=== Demo data complete: {summary} ===")
        return summary


def main():
    """Main function to run data generation"""
    import argparse

    parser = argparse.ArgumentParser(description="Generate demo data for the storefront")
    parser.add_argument("--products", type=int, default=40, help="Number of products to generate")
    parser.add_argument("--customers", type=int, default=20, help="Number of customers to generate")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for repeatable data")
    parser.add_argument("--clear", action="store_true", help="Clear all existing data")

    args = parser.parse_args()

    create_tables()
    with DataGenerator(seed=args.seed) as generator:
        if args.clear:
            generator.clear_all_data()
        else:
            generator.generate_all(products=args.products, customers=args.customers)


if __name__ == "__main__":
    main()
