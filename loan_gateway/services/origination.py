"""Loan origination workflow: quote, apply, status and admin decisions"""

import logging
import math
from datetime import date
from typing import List, Optional, Tuple
from sqlalchemy.orm import Session

from loan_gateway.config import settings
from loan_gateway.domain.amortization import build_schedule
from loan_gateway.domain.annuity import monthly_payment, monthly_rate
from loan_gateway.domain.eligibility import eligible_tiers, rate_borrower
from loan_gateway.domain.exceptions import (
    ApplicationNotFoundError,
    InvalidLoanRequestError,
    InvalidStatusTransitionError,
    LoanNotFoundError,
    RequestedAmountExceedsMaxError,
)
from loan_gateway.domain.models import (
    ApplicationResult,
    Eligibility,
    LoanCalculation,
    LoanQuote,
    LoanSettings,
    RatingFactors,
    RatingInputs,
)
from loan_gateway.infrastructure.database.models import Loan, LoanApplication, LoanPayment
from loan_gateway.infrastructure.database.repositories import (
    AccountRepository,
    ApplicationRepository,
    AuditRepository,
    LoanRepository,
    RatingRepository,
)
from loan_gateway.infrastructure.database.session import unit_of_work
from loan_gateway.utils.money import round_money

logger = logging.getLogger(__name__)


def _or_default(value, default):
    # Missing row means "use the default"; a stored 0 is a real value
    return default if value is None else value


def _check_money(name: str, value: float) -> None:
    if not math.isfinite(value):
        raise InvalidLoanRequestError(f"{name} must be a finite number")
    if value > settings.max_money_value:
        raise InvalidLoanRequestError(f"{name} must not exceed {settings.max_money_value:,.0f}")


def validate_loan_request(amount: Optional[float], term_months: int, income: float, amount_required: bool) -> None:
    """Reject malformed requests before touching any store"""
    if term_months is None or term_months < 1:
        raise InvalidLoanRequestError("term_months must be at least 1")
    if term_months > settings.max_term_months:
        raise InvalidLoanRequestError(f"term_months must not exceed {settings.max_term_months}")
    if income is None or income < 0:
        raise InvalidLoanRequestError("income must be zero or positive")
    _check_money("income", income)
    if amount is None:
        if amount_required:
            raise InvalidLoanRequestError("amount is required")
    elif amount <= 0:
        raise InvalidLoanRequestError("amount must be positive")
    else:
        _check_money("amount", amount)


class LoanOriginationService:
    """
    Orchestrates loan quotes, applications and approvals over one session.

    Rating inputs are fetched fresh on every call; nothing computed here is
    cached between requests.
    """

    def __init__(self, db: Session):
        self.db = db
        self.ratings = RatingRepository(db)
        self.applications = ApplicationRepository(db)
        self.loans = LoanRepository(db)
        self.accounts = AccountRepository(db)
        self.audit = AuditRepository(db)

    def resolve_rating(
        self, user_id: int, income: float, employment_status: str
    ) -> Tuple[RatingInputs, LoanSettings, RatingFactors]:
        """Fetch every rating input and apply the configured fallbacks"""
        credit_score = _or_default(self.ratings.get_credit_score(user_id), settings.default_credit_score)
        employment_multiplier = _or_default(
            self.ratings.get_employment_multiplier(employment_status), settings.default_employment_multiplier
        )
        credit_multiplier = _or_default(
            self.ratings.get_credit_multiplier(credit_score), settings.default_credit_multiplier
        )
        dti_ratio, base_interest_rate = self.ratings.get_loan_settings()

        inputs = RatingInputs(income=float(income), employment_status=employment_status, credit_score=int(credit_score))
        loan_settings = LoanSettings(
            dti_ratio=float(_or_default(dti_ratio, settings.default_dti_ratio)),
            base_interest_rate=float(_or_default(base_interest_rate, settings.default_base_interest_rate)),
        )
        factors = RatingFactors(
            employment_multiplier=float(employment_multiplier),
            credit_multiplier=float(credit_multiplier),
        )
        return inputs, loan_settings, factors

    def _rate(
        self, user_id: int, income: float, employment_status: str, term_months: int
    ) -> Tuple[RatingInputs, LoanSettings, LoanCalculation]:
        inputs, loan_settings, factors = self.resolve_rating(user_id, income, employment_status)
        calculation = rate_borrower(inputs, loan_settings, factors, term_months)
        return inputs, loan_settings, calculation

    def calculate(
        self,
        user_id: int,
        term_months: int,
        income: float,
        employment_status: str,
        amount: Optional[float] = None,
    ) -> LoanQuote:
        """Advisory quote: limits plus payment and schedule for an optional amount. Never writes."""
        validate_loan_request(amount, term_months, income, amount_required=False)

        inputs, loan_settings, calculation = self._rate(user_id, income, employment_status, term_months)
        quote = LoanQuote(
            calculation=calculation,
            interest_rate=loan_settings.base_interest_rate,
            credit_score=inputs.credit_score,
        )

        if amount:
            rate = monthly_rate(loan_settings.base_interest_rate)
            quote.monthly_for_requested = round_money(monthly_payment(amount, rate, term_months))
            quote.requested_schedule = build_schedule(amount, loan_settings.base_interest_rate, term_months)

        return quote

    def apply(
        self,
        user_id: int,
        amount: float,
        term_months: int,
        income: float,
        employment_status: str,
        purpose: Optional[str] = None,
    ) -> ApplicationResult:
        """
        Re-derive the borrower's limit and persist a Pending application.

        Flow (one transaction):
        1. Fetch credit score, multipliers and settings
        2. Recompute max principal
        3. Reject amounts above the ceiling (nothing is written)
        4. Build the amortization schedule
        5. Insert application + audit entry, commit

        Raises:
            InvalidLoanRequestError: Malformed amount, term or income
            RequestedAmountExceedsMaxError: Amount above the computed ceiling
        """
        validate_loan_request(amount, term_months, income, amount_required=True)

        with unit_of_work(self.db):
            inputs, loan_settings, calculation = self._rate(user_id, income, employment_status, term_months)

            if amount > calculation.max_principal:
                raise RequestedAmountExceedsMaxError(amount, calculation.max_principal)

            schedule = build_schedule(amount, loan_settings.base_interest_rate, term_months)
            application = self.applications.create_application(
                user_id=user_id,
                amount=amount,
                inputs=inputs,
                purpose=purpose,
                term_months=term_months,
                calculation=calculation,
                schedule=schedule,
                interest_rate=loan_settings.base_interest_rate,
            )
            application_id = application.application_id
            self.audit.log_action(
                target_id=application_id,
                target_table="loan_applications",
                action_type="Create",
                remarks="Application submitted via API",
            )

        return ApplicationResult(
            application_id=application_id,
            monthly_payment=schedule.monthly_payment,
            max_principal=calculation.max_principal,
        )

    def get_eligibility(self, user_id: int) -> Tuple[Eligibility, Optional[Loan]]:
        deposit_total, savings_total = self.accounts.get_balance_totals(user_id)
        combined = round_money(deposit_total + savings_total)
        eligibility = Eligibility(
            deposit_total=deposit_total,
            savings_total=savings_total,
            combined=combined,
            eligible_tiers=eligible_tiers(combined),
        )
        return eligibility, self.loans.get_active_loan(user_id)

    def get_status(self, user_id: int) -> Tuple[Optional[Loan], Optional[date], List[LoanApplication]]:
        """Active loan with its next pending due date, plus application history"""
        active_loan = self.loans.get_active_loan(user_id)
        next_due = self.loans.get_next_due_date(active_loan.loan_id) if active_loan else None
        history = self.applications.get_applications_by_user(user_id, limit=settings.status_history_limit)
        return active_loan, next_due, history

    def get_history(self, user_id: int) -> List[LoanPayment]:
        return self.loans.get_payments_by_user(user_id)

    def get_application(self, application_id: int) -> LoanApplication:
        application = self.applications.get_application(application_id)
        if not application:
            raise ApplicationNotFoundError(f"Application {application_id} not found")
        return application

    def get_loan(self, loan_id: int) -> Loan:
        loan = self.loans.get_loan(loan_id)
        if not loan:
            raise LoanNotFoundError(f"Loan {loan_id} not found")
        return loan

    def _get_pending(self, application_id: int) -> LoanApplication:
        application = self.get_application(application_id)
        if application.status != "Pending":
            raise InvalidStatusTransitionError(
                f"Application {application_id} is {application.status}, expected Pending"
            )
        return application

    def approve(self, application_id: int, admin_id: int, remarks: Optional[str] = None) -> Loan:
        """
        Approve a Pending application and open the loan.

        Creates the Loan and one LoanPayment per stored schedule period in the
        same transaction as the status change. Disbursement happens afterwards,
        outside this transaction.
        """
        with unit_of_work(self.db):
            application = self._get_pending(application_id)
            self.applications.set_status(application, "Approved")
            loan = self.loans.create_loan(application, start_date=date.today())
            self.audit.log_action(
                target_id=application.application_id,
                target_table="loan_applications",
                action_type="Approve",
                remarks=remarks or "Application approved",
                actor_id=admin_id,
            )

        logger.info(f"Application {application_id} approved as loan {loan.loan_id}")
        return loan

    def deny(self, application_id: int, admin_id: int, remarks: Optional[str] = None) -> LoanApplication:
        with unit_of_work(self.db):
            application = self._get_pending(application_id)
            self.applications.set_status(application, "Denied")
            self.audit.log_action(
                target_id=application.application_id,
                target_table="loan_applications",
                action_type="Deny",
                remarks=remarks or "Application denied",
                actor_id=admin_id,
            )

        logger.info(f"Application {application_id} denied")
        return application
