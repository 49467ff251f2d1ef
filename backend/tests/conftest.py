"""
Shared fixtures: an isolated in-memory database per test, a TestClient
bound to it, user/course factories and a stubbed Razorpay order API.
"""
import itertools
import os
import tempfile

_TMP_DIR = tempfile.mkdtemp(prefix="learnhub-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP_DIR, 'learnhub.db')}"
os.environ["LOG_DIR"] = os.path.join(_TMP_DIR, "logs")
os.environ["JWT_SECRET"] = "test-jwt-secret"
os.environ["RAZORPAY_KEY_ID"] = "rzp_test_key"
os.environ["RAZORPAY_KEY_SECRET"] = "rzp_test_secret"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import get_db, init_db
from app.main import app
from app.models import Course, User
from app.services.payment_gateway import RazorpayGateway
from app.utils.security import hash_password
from tests.helpers import PASSWORD


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    counter = itertools.count(1)

    def _make_user(role="student", name=None, email=None, approved=True, status="active"):
        n = next(counter)
        user = User(
            name=name or f"{role.title()} {n}",
            email=email or f"{role}{n}@example.com",
            password_hash=hash_password(PASSWORD),
            role=role,
            approved=approved,
            status=status,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make_user


@pytest.fixture
def make_course(db):
    def _make_course(instructor, price=0.0, published=True, approved=True, lessons=None, **fields):
        course = Course(
            title=fields.pop("title", "Technical Analysis Basics"),
            description=fields.pop("description", "Charts, trends and indicators for beginners."),
            category=fields.pop("category", "Trading"),
            price=price,
            instructor_id=instructor.id,
            published=published,
            approved=approved,
            lessons=lessons if lessons is not None else [
                {"_id": "l1", "title": "Intro", "content": "Welcome", "duration": 10, "order": 0, "video": ""},
                {"_id": "l2", "title": "Candles", "content": "Candlestick charts", "duration": 20, "order": 1, "video": ""},
            ],
            **fields,
        )
        db.add(course)
        db.commit()
        db.refresh(course)
        return course

    return _make_course


@pytest.fixture
def student(make_user):
    return make_user("student")


@pytest.fixture
def instructor(make_user):
    return make_user("instructor")


@pytest.fixture
def admin(make_user):
    return make_user("admin")


@pytest.fixture
def gateway(monkeypatch):
    """Replace the Razorpay order API with an in-memory fake."""
    orders = []
    counter = itertools.count(1)

    def fake_create_order(amount_paise, receipt, notes=None):
        order = {
            "id": f"order_test{next(counter):04d}",
            "amount": amount_paise,
            "currency": "INR",
            "receipt": receipt,
            "notes": notes or {},
            "status": "created",
        }
        orders.append(order)
        return order

    monkeypatch.setattr(RazorpayGateway, "create_order", staticmethod(fake_create_order))
    return orders
