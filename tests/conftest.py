"""Pytest fixtures for testing"""

import itertools
import pytest
from typing import Callable, Generator, Optional
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from loan_gateway.api.main import create_app
from loan_gateway.infrastructure.database.models import (
    AccountType,
    Base,
    CreditTier,
    EmploymentMultiplier,
    LoanSettingsRow,
    User,
)
from loan_gateway.infrastructure.database.session import get_db, get_session_factory


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

_account_numbers = itertools.count(100_000_001)


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def session_factory(db: Session) -> sessionmaker:
    """Factory for independent sessions on the test database (background work)"""
    return TestingSessionLocal


@pytest.fixture
def client(db: Session) -> TestClient:
    """Create FastAPI test client with test database"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: TestingSessionLocal
    return TestClient(app)


@pytest.fixture
def rating_tables(db: Session) -> None:
    """
    Standard underwriting configuration.

    Credit tiers start at 580, so the fallback score of 300 matches no tier.
    """
    db.add(LoanSettingsRow(dti_ratio=0.30, base_interest_rate=24.0))
    db.add_all(
        [
            EmploymentMultiplier(employment_status="Employed", multiplier=1.0),
            EmploymentMultiplier(employment_status="Self-Employed", multiplier=0.9),
            EmploymentMultiplier(employment_status="Unemployed", multiplier=0.5),
        ]
    )
    db.add_all(
        [
            CreditTier(min_score=580, max_score=669, multiplier=0.9),
            CreditTier(min_score=670, max_score=739, multiplier=1.0),
            CreditTier(min_score=740, max_score=850, multiplier=1.2),
        ]
    )
    db.commit()


@pytest.fixture
def make_borrower(db: Session) -> Callable[..., User]:
    """Factory creating a user with Deposit, Savings and (closed) Loan accounts"""

    def _make(
        credit_score: Optional[int] = None,
        deposit: float = 0.0,
        savings: float = 0.0,
        with_loan_account: bool = True,
    ) -> User:
        user = User(
            full_name="Test Borrower",
            email=f"borrower{next(_account_numbers)}@example.com",
            credit_score=credit_score,
        )
        db.add(user)
        db.flush()

        accounts = [("Deposit", deposit, "Open"), ("Savings", savings, "Open")]
        if with_loan_account:
            accounts.append(("Loan", 0.0, "Closed"))

        for type_name, balance, status in accounts:
            db.add(
                AccountType(
                    user_id=user.user_id,
                    account_number=f"ACCT-{next(_account_numbers)}",
                    type_name=type_name,
                    description=f"{type_name} account",
                    balance=balance,
                    account_status=status,
                )
            )
        db.commit()
        return user

    return _make
