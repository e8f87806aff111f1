"""
E2E tests for borrower personas through the full application lifecycle.

Each persona quotes, applies and (where accepted) goes through the admin
decision, disbursement and status endpoints against the test database.

Borrower personas:
- no_score: No credit score on file, defaults apply
- strong_credit: Top credit tier, large ceiling, approved and disbursed
- unemployed: Reduced employment multiplier, small ceiling
- over_limit: Asks for more than the ceiling, rejected with the ceiling
- repeat_applicant: Several applications, history newest first
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session
from loan_gateway.infrastructure.database.models import AccountType, LoanApplication


def _quote(client: TestClient, user_id: int, income: float, employment_status: str, term_months: int = 12):
    response = client.post(
        "/v1/loan/calculate",
        json={
            "user_id": user_id,
            "term_months": term_months,
            "income": income,
            "employment_status": employment_status,
        },
    )
    assert response.status_code == 200
    return response.json()


def _apply(client: TestClient, user_id: int, amount: float, income: float, employment_status: str, term_months: int = 12):
    return client.post(
        "/v1/loan/apply",
        json={
            "user_id": user_id,
            "amount": amount,
            "term_months": term_months,
            "income": income,
            "employment_status": employment_status,
        },
    )


@pytest.mark.integration
def test_no_score_uses_defaults(client: TestClient, rating_tables, make_borrower):
    """
    no_score: User exists but has never been scored
    Expected: Score 300, no tier match so multiplier 0.8
    """
    borrower = make_borrower()

    quote = _quote(client, borrower.user_id, income=10_000, employment_status="Employed")

    assert quote["credit_score"] == 300
    assert quote["allowed_monthly"] == 2400.0  # 10000 * 0.30 * 1.0 * 0.8
    assert _apply(client, borrower.user_id, 5_000, 10_000, "Employed").status_code == 200


@pytest.mark.integration
def test_strong_credit_full_lifecycle(client: TestClient, db: Session, rating_tables, make_borrower):
    """
    strong_credit: Score 780, employed, healthy balances
    Expected: Approved, funds credited, active loan visible with next due date
    """
    borrower = make_borrower(credit_score=780, deposit=200_000, savings=100_000)

    quote = _quote(client, borrower.user_id, income=30_000, employment_status="Employed", term_months=36)
    assert quote["allowed_monthly"] == 10_800.0  # 30000 * 0.30 * 1.0 * 1.2

    applied = _apply(client, borrower.user_id, 100_000, 30_000, "Employed", term_months=36)
    assert applied.status_code == 200
    assert applied.json()["max_principal"] == quote["max_principal"]

    eligibility = client.get(f"/v1/loan/eligibility/{borrower.user_id}").json()
    assert set(eligibility["eligible_tiers"]) == {"tier1", "tier2", "tier3"}

    decision = client.post(
        f"/v1/admin/applications/{applied.json()['application_id']}/approve",
        json={"admin_id": 1, "remarks": "Strong profile"},
    )
    assert decision.status_code == 200

    db.expire_all()
    loan_account = (
        db.query(AccountType)
        .filter(AccountType.user_id == borrower.user_id, AccountType.type_name == "Loan")
        .one()
    )
    assert loan_account.balance == 100_000

    status = client.get(f"/v1/loan/status/{borrower.user_id}").json()
    active_loan = status["active_loan"]
    assert active_loan["principal"] == 100_000
    assert active_loan["monthly_payment"] == applied.json()["monthly_payment"]
    assert active_loan["next_due"] is not None

    eligibility = client.get(f"/v1/loan/eligibility/{borrower.user_id}").json()
    assert eligibility["active_loan"]["loan_id"] == decision.json()["loan_id"]


@pytest.mark.integration
def test_unemployed_small_ceiling(client: TestClient, rating_tables, make_borrower):
    """
    unemployed: Tier-1 score but no employment
    Expected: Ceiling halved relative to an employed peer
    """
    borrower = make_borrower(credit_score=700)

    employed = _quote(client, borrower.user_id, income=4_000, employment_status="Employed")
    unemployed = _quote(client, borrower.user_id, income=4_000, employment_status="Unemployed")

    assert unemployed["allowed_monthly"] == employed["allowed_monthly"] / 2
    assert unemployed["max_principal"] < employed["max_principal"]


@pytest.mark.integration
def test_over_limit_rejected_with_ceiling(client: TestClient, db: Session, rating_tables, make_borrower):
    """
    over_limit: Asks for ten times the ceiling
    Expected: 400 with the ceiling, nothing stored; retry at the ceiling succeeds
    """
    borrower = make_borrower(credit_score=600)
    quote = _quote(client, borrower.user_id, income=5_000, employment_status="Self-Employed")

    rejected = _apply(client, borrower.user_id, quote["max_principal"] * 10, 5_000, "Self-Employed")

    assert rejected.status_code == 400
    assert rejected.json()["detail"]["max_principal"] == quote["max_principal"]
    assert db.query(LoanApplication).count() == 0

    accepted = _apply(client, borrower.user_id, quote["max_principal"], 5_000, "Self-Employed")
    assert accepted.status_code == 200


@pytest.mark.integration
def test_repeat_applicant_history(client: TestClient, rating_tables, make_borrower):
    """
    repeat_applicant: Three applications, the second denied
    Expected: Status history newest first with each decision reflected
    """
    borrower = make_borrower(credit_score=650)
    ids = [
        _apply(client, borrower.user_id, amount, 6_000, "Employed").json()["application_id"]
        for amount in (1_000, 2_000, 3_000)
    ]
    client.post(f"/v1/admin/applications/{ids[1]}/deny", json={"admin_id": 1})

    status = client.get(f"/v1/loan/status/{borrower.user_id}").json()

    assert status["active_loan"] is None
    assert [h["application_id"] for h in status["history"]] == list(reversed(ids))
    assert [h["status"] for h in status["history"]] == ["Pending", "Denied", "Pending"]
