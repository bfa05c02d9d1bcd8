"""
Pytest fixtures for Haki Bá Vương backend tests.

Provides an isolated in-memory database per test, the test client, and
account/catalog fixtures for two independent brands.
"""

import re
from decimal import Decimal

import pytest
from haki import create_app
from haki.extensions import db, get_mailer
from haki.models import Brand, Customer, Product
from haki.permissions import ADMIN, BRAND_MANAGER, STAFF
from haki.services import inventory_service
from haki.services.auth_service import create_user, hash_password


PASSWORD = "Password123!"

OTP_PATTERN = re.compile(r"<strong>(\d{6})</strong>")


@pytest.fixture(scope='function')
def app(tmp_path):
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'SECRET_KEY': 'test-secret',
        'JWT_SECRET_KEY': 'test-jwt-secret',
        'BCRYPT_ROUNDS': 4,
        'MAIL_BACKEND': 'outbox',
        'RECAPTCHA_SECRET_KEY': '',
        'UPLOAD_FOLDER': str(tmp_path / 'Images'),
    })

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Session bound to the per-test database."""
    yield db.session
    db.session.rollback()


@pytest.fixture(scope='function')
def outbox(app):
    """Messages sent by the in-memory mailer."""
    mailer = get_mailer()
    mailer.clear()
    return mailer.outbox


@pytest.fixture(scope='function')
def admin(db_session):
    """Verified Admin account."""
    return create_user("Quản trị", "admin@haki.test", PASSWORD, ADMIN)


@pytest.fixture(scope='function')
def owner_a(db_session):
    """Owner of Brand A."""
    return create_user("Chủ A", "owner_a@haki.test", PASSWORD, BRAND_MANAGER)


@pytest.fixture(scope='function')
def owner_b(db_session):
    """Owner of Brand B."""
    return create_user("Chủ B", "owner_b@haki.test", PASSWORD, BRAND_MANAGER)


@pytest.fixture(scope='function')
def brand_a(db_session, owner_a):
    brand = Brand(name="Brand A", owner_id=owner_a.id)
    db_session.add(brand)
    db_session.commit()
    return brand


@pytest.fixture(scope='function')
def brand_b(db_session, owner_b):
    brand = Brand(name="Brand B", owner_id=owner_b.id)
    db_session.add(brand)
    db_session.commit()
    return brand


@pytest.fixture(scope='function')
def staff_a(db_session, brand_a):
    """Approved Staff member of Brand A."""
    return create_user("Nhân viên A", "staff_a@haki.test", PASSWORD, STAFF, brand_id=brand_a.id)


@pytest.fixture(scope='function')
def customer(db_session):
    """Verified storefront customer."""
    customer = Customer(
        name="Khách Hàng",
        email="customer@haki.test",
        password_hash=hash_password(PASSWORD),
        is_email_verified=True,
    )
    db_session.add(customer)
    db_session.commit()
    return customer


def make_product(brand, name="Product A", price_sell="100000", price_cost="60000", stock=5):
    """Create a product with its inventory row."""
    product = Product(
        brand_id=brand.id,
        name=name,
        price_sell=Decimal(price_sell),
        price_cost=Decimal(price_cost) if price_cost is not None else None,
    )
    db.session.add(product)
    inventory_service.create_inventory(product, stock)
    db.session.commit()
    return product


@pytest.fixture(scope='function')
def product_a(db_session, brand_a):
    """Product in Brand A with stock 5."""
    return make_product(brand_a)


@pytest.fixture(scope='function')
def product_b(db_session, brand_b):
    """Product in Brand B with stock 10."""
    return make_product(brand_b, name="Product B", price_sell="50000", price_cost="20000", stock=10)


def latest_otp(email: str) -> str:
    """Most recent OTP mailed to `email`."""
    for message in reversed(get_mailer().outbox):
        if message.to == email:
            match = OTP_PATTERN.search(message.html_body)
            if match:
                return match.group(1)
    return None


def get_auth_token(client, email: str, password: str = PASSWORD) -> str:
    """Helper to get a back-office token (password step + emailed 2FA code)."""
    response = client.post('/api/auth/login', json={'email': email, 'password': password})
    if response.status_code != 200:
        return None
    response = client.post('/api/auth/verify-2fa', json={'email': email, 'otp': latest_otp(email)})
    if response.status_code == 200:
        return response.json.get('token')
    return None


def get_customer_token(client, email: str, password: str = PASSWORD) -> str:
    """Helper to get a storefront token (password step + emailed 2FA code)."""
    response = client.post('/api/auth/loginCustomer', json={'email': email, 'password': password})
    if response.status_code != 200:
        return None
    response = client.post('/api/auth/verify-2fa-customer', json={'email': email, 'otp': latest_otp(email)})
    if response.status_code == 200:
        return response.json.get('token')
    return None


def auth_headers(token: str) -> dict:
    """Helper to create Authorization headers."""
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture(scope='function')
def otp_for(app):
    """Function returning the latest OTP mailed to an address."""
    return latest_otp


@pytest.fixture(scope='function')
def admin_headers(client, admin):
    return auth_headers(get_auth_token(client, admin.email))


@pytest.fixture(scope='function')
def owner_a_headers(client, owner_a, brand_a):
    return auth_headers(get_auth_token(client, owner_a.email))


@pytest.fixture(scope='function')
def owner_b_headers(client, owner_b, brand_b):
    return auth_headers(get_auth_token(client, owner_b.email))


@pytest.fixture(scope='function')
def staff_a_headers(client, staff_a):
    return auth_headers(get_auth_token(client, staff_a.email))


@pytest.fixture(scope='function')
def customer_headers(client, customer):
    return auth_headers(get_customer_token(client, customer.email))
