"""Pytest configuration.

Points the app at an in-memory SQLite database before anything under
``portal`` is imported, and provides factories for the common fixtures.
"""

import os
import tempfile
from decimal import Decimal

os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("LOG_DIR", os.path.join(tempfile.gettempdir(), "portal-test-logs"))

import pytest
from fastapi.testclient import TestClient

from portal.crud import pettycash as crud_pc
from portal.database import Base, SessionLocal, engine
from portal.main import app
from portal.models import Branch, PettyCashCategory, Role, User
from portal.schemas.pettycash import FloatConfigUpsert
from portal.security import create_access_token


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    return TestClient(app)


@pytest.fixture
def branch(db):
    branch = Branch(name="Thika", region="Central")
    db.add(branch)
    db.commit()
    db.refresh(branch)
    return branch


@pytest.fixture
def make_user(db, branch):
    counter = {"n": 0}

    def _make(role: Role = Role.STAFF, **kwargs) -> User:
        counter["n"] += 1
        user = User(
            email=kwargs.pop("email", f"{role.value}{counter['n']}@kechita.co.ke"),
            full_name=kwargs.pop("full_name", f"{role.value.title()} {counter['n']}"),
            password_hash=kwargs.pop("password_hash", "not-a-real-hash"),
            role=role,
            branch_id=kwargs.pop("branch_id", branch.id),
            **kwargs,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def staff(make_user):
    return make_user(Role.STAFF)


@pytest.fixture
def finance(make_user):
    return make_user(Role.FINANCE)


@pytest.fixture
def manager(make_user):
    return make_user(Role.BRANCH_MANAGER)


@pytest.fixture
def auth_headers():
    def _headers(user: User) -> dict:
        token = create_access_token({"sub": str(user.id), "role": user.role.value})
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def make_float(db):
    def _make(branch_id: int, base="10000", cap="15000", pct="20", tier="B"):
        return crud_pc.upsert_float_config(db, FloatConfigUpsert(
            branch_id=branch_id,
            tier=tier,
            base_amount=Decimal(base),
            min_trigger_pct=Decimal(pct),
            hard_cap=Decimal(cap),
        ))

    return _make


@pytest.fixture
def float_config(make_float, branch):
    return make_float(branch.id)


@pytest.fixture
def category(db):
    category = PettyCashCategory(
        code="TRANSPORT", name="Local Transport", max_per_transaction=Decimal("3000"), order=2,
    )
    db.add(category)
    db.commit()
    db.refresh(category)
    return category
