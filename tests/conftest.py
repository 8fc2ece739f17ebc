from datetime import date, datetime, timedelta
from decimal import Decimal
from itertools import count

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from expense_tracker.db.core import (
    Base,
    BudgetDB,
    BudgetPeriod,
    TransactionDB,
    TransactionType,
    UserDB,
    get_db,
)
from expense_tracker.main import app


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session(session_factory):
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
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db_session):
    sequence = count(1)

    def _make_user(**overrides) -> UserDB:
        n = next(sequence)
        fields = dict(
            email=f"user{n}@example.com",
            name=f"User {n}",
            password_hash="not-a-real-hash",
        )
        fields.update(overrides)
        user = UserDB(**fields)
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make_user


@pytest.fixture
def user(make_user):
    return make_user()


@pytest.fixture
def make_transaction(db_session):
    def _make_transaction(owner: UserDB, amount, category="food",
                          transaction_date=date(2024, 1, 15),
                          transaction_type=TransactionType.EXPENSE,
                          is_deleted=False, **overrides) -> TransactionDB:
        transaction = TransactionDB(
            user_id=owner.id,
            amount=Decimal(str(amount)),
            transaction_type=transaction_type,
            category=category,
            description=overrides.pop("description", f"{category} purchase"),
            transaction_date=transaction_date,
            is_deleted=is_deleted,
            **overrides,
        )
        db_session.add(transaction)
        db_session.commit()
        db_session.refresh(transaction)
        return transaction

    return _make_transaction


@pytest.fixture
def make_budget(db_session):
    base_time = datetime(2024, 1, 1, 9, 0, 0)
    sequence = count()

    def _make_budget(owner: UserDB, amount=1000, category="food",
                     start_date=date(2024, 1, 1), end_date=date(2024, 1, 31),
                     alert_threshold=80, **overrides) -> BudgetDB:
        n = next(sequence)
        fields = dict(
            user_id=owner.id,
            name=f"{category} budget {n}",
            amount=Decimal(str(amount)),
            category=category,
            period=BudgetPeriod.MONTHLY,
            start_date=start_date,
            end_date=end_date,
            alert_threshold=Decimal(str(alert_threshold)),
            # Distinct, increasing creation times keep ordering deterministic
            created_at=base_time + timedelta(minutes=n),
        )
        fields.update(overrides)
        budget = BudgetDB(**fields)
        db_session.add(budget)
        db_session.commit()
        db_session.refresh(budget)
        return budget

    return _make_budget


@pytest.fixture
def auth_headers(user):
    return {"X-User-Id": str(user.id)}
