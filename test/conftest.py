import os

# Must be set before storefront.config is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENVIRONMENT"] = "test"
os.environ["EMAIL_HOST"] = ""
os.environ["GOOGLE_CLIENT_ID"] = ""
os.environ["GOOGLE_CLIENT_SECRET"] = ""

from datetime import timedelta  # noqa: E402
from decimal import Decimal  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from storefront.main import app  # noqa: E402
from storefront.models.discount import DISCOUNT_PERCENTAGE, Discount  # noqa: E402
from storefront.models.product import Brand, Category, Product, ProductImage  # noqa: E402
from storefront.models.user import ROLE_ADMIN, ROLE_CUSTOMER, User  # noqa: E402
from storefront.services.auth_service import generate_access_token, hash_password  # noqa: E402
from storefront.services.email_service import EmailService, get_email_service  # noqa: E402
from storefront.utils.database import SessionLocal, create_tables, drop_tables  # noqa: E402
from storefront.utils.dates import utcnow  # noqa: E402

PASSWORD = "secret123"


class RecordingEmailService(EmailService):
    """Renders every template but keeps the messages in memory"""

    def __init__(self):
        super().__init__()
        self.outbox = []

    def send(self, to, subject, html):
        self.outbox.append({"to": to, "subject": subject, "html": html})


@pytest.fixture(autouse=True)
def fresh_database():
    create_tables()
    yield
    drop_tables()


@pytest.fixture
def db():
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def mailer():
    recorder = RecordingEmailService()
    app.dependency_overrides[get_email_service] = lambda: recorder
    yield recorder
    app.dependency_overrides.pop(get_email_service, None)


@pytest.fixture
def client(mailer):
    return TestClient(app)


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {generate_access_token(user.id, user.email, user.role)}"}


@pytest.fixture
def make_user(db):
    def _make(email="customer@example.com", role=ROLE_CUSTOMER, password=PASSWORD, verified=True, **fields):
        user = User(
            email=email,
            password_hash=hash_password(password),
            role=role,
            is_email_verified=verified,
            first_name=fields.pop("first_name", "Test"),
            last_name=fields.pop("last_name", "User"),
            **fields,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def admin(make_user):
    return make_user(email="admin@example.com", role=ROLE_ADMIN, first_name="Admin")


@pytest.fixture
def customer(make_user):
    return make_user()


@pytest.fixture
def headers_for():
    return auth_headers


@pytest.fixture
def admin_headers(admin):
    return auth_headers(admin)


@pytest.fixture
def customer_headers(customer):
    return auth_headers(customer)


@pytest.fixture
def make_category(db):
    def _make(name="Vitamins", slug=None, level=1, parent=None, **fields):
        category = Category(name=name, slug=slug or name.lower().replace(" ", "-"), level=level, parent=parent, **fields)
        db.add(category)
        db.commit()
        db.refresh(category)
        return category

    return _make


@pytest.fixture
def make_brand(db):
    def _make(name="Himalaya", slug=None, **fields):
        brand = Brand(name=name, slug=slug or name.lower().replace(" ", "-"), **fields)
        db.add(brand)
        db.commit()
        db.refresh(brand)
        return brand

    return _make


@pytest.fixture
def make_product(db):
    counter = {"n": 0}

    def _make(name=None, price="500", stock=10, image_url=None, **fields):
        counter["n"] += 1
        name = name or f"Product {counter['n']}"
        product = Product(
            name=name,
            slug=fields.pop("slug", f"product-{counter['n']}"),
            price=Decimal(price),
            stock_quantity=stock,
            low_stock_threshold=fields.pop("low_stock_threshold", 5),
            is_active=fields.pop("is_active", True),
            is_featured=fields.pop("is_featured", False),
            **fields,
        )
        if image_url:
            product.images.append(ProductImage(image_url=image_url, is_primary=True, display_order=1))
        db.add(product)
        db.commit()
        db.refresh(product)
        return product

    return _make


@pytest.fixture
def make_discount(db):
    def _make(code="SAVE10", type=DISCOUNT_PERCENTAGE, value="10", **fields):
        now = utcnow()
        discount = Discount(
            name=fields.pop("name", code.title()),
            code=code,
            type=type,
            value=Decimal(value),
            start_date=fields.pop("start_date", now - timedelta(days=1)),
            end_date=fields.pop("end_date", now + timedelta(days=30)),
            is_active=fields.pop("is_active", True),
            used_count=fields.pop("used_count", 0),
            **fields,
        )
        db.add(discount)
        db.commit()
        db.refresh(discount)
        return discount

    return _make


SHIPPING = {
    "full_name": "Sita Sharma",
    "phone": "9800000000",
    "address_line1": "Putalisadak",
    "city": "Kathmandu",
    "postal_code": "44600",
}


@pytest.fixture
def checkout(client):
    """POST /api/orders/checkout with sensible defaults"""

    def _checkout(headers, city="Kathmandu", payment_method="cod", **extra):
        body = {"shipping_info": dict(SHIPPING, city=city), "payment_method": payment_method}
        body.update(extra)
        return client.post("/api/orders/checkout", json=body, headers=headers)

    return _checkout
