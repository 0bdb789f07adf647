"""Shared fixtures: an in-memory SQLite database and an authenticated API client."""
import unittest
from datetime import datetime
from decimal import Decimal
from typing import Optional

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from teenbudget.db import models
from teenbudget.db.base import Base
from teenbudget.db.session import get_db
from teenbudget.main import app
from teenbudget.schemas.auth import Identity
from teenbudget.services.categories import create_default_categories
from teenbudget.services.security import create_access_token, hash_pin

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class DatabaseTestCase(unittest.TestCase):
    """Fresh tables per test plus one seeded user with the default categories."""

    def setUp(self) -> None:
        Base.metadata.create_all(bind=engine)
        self.db = TestingSession()
        self.user = self.make_user("teen@example.com", "Sam")
        self.identity = Identity(user_id=self.user.id, email=self.user.email, name=self.user.name)

    def tearDown(self) -> None:
        self.db.close()
        Base.metadata.drop_all(bind=engine)

    def make_user(self, email: str, name: str, pin: Optional[str] = "1234") -> models.User:
        user = models.User(email=email, name=name, pin_hash=hash_pin(pin) if pin else None)
        self.db.add(user)
        self.db.flush()
        create_default_categories(self.db, user)
        self.db.commit()
        self.db.refresh(user)
        return user

    def category(self, name: str, user: Optional[models.User] = None) -> models.Category:
        owner = user or self.user
        return (
            self.db.query(models.Category)
            .filter(models.Category.user_id == owner.id, models.Category.name == name)
            .one()
        )

    def add_transaction(
        self,
        amount: str,
        category_name: str,
        date: datetime,
        savings_goal_id: Optional[int] = None,
        description: Optional[str] = None,
    ) -> models.Transaction:
        cat = self.category(category_name)
        txn = models.Transaction(
            user_id=self.user.id,
            type=cat.type,
            amount=Decimal(amount),
            description=description,
            date=date,
            category_id=cat.id,
            savings_goal_id=savings_goal_id,
        )
        self.db.add(txn)
        self.db.commit()
        self.db.refresh(txn)
        return txn


class ApiTestCase(DatabaseTestCase):
    """DatabaseTestCase plus a TestClient wired to the same session factory."""

    def setUp(self) -> None:
        super().setUp()

        def override_get_db():
            db = TestingSession()
            try:
                yield db
            finally:
                db.close()

        app.dependency_overrides[get_db] = override_get_db
        self.client = TestClient(app)
        self.headers = self.auth_headers(self.user)

    def tearDown(self) -> None:
        app.dependency_overrides.clear()
        super().tearDown()

    @staticmethod
    def auth_headers(user: models.User) -> dict:
        token = create_access_token(user.id, email=user.email)
        return {"Authorization": f"Bearer {token}"}
