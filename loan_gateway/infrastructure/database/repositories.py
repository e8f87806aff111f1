"""Data access layer for loan origination entities"""

from datetime import date, datetime, timezone
from typing import List, Optional, Tuple
from sqlalchemy import case, func
from sqlalchemy.orm import Session
from loan_gateway.infrastructure.database.models import (
    AccountType,
    AdminAction,
    CreditTier,
    EmploymentMultiplier,
    Loan,
    LoanApplication,
    LoanPayment,
    LoanSettingsRow,
    Notification,
    Transaction,
    User,
)
from loan_gateway.domain.models import AmortizationEntry, AmortizationSchedule, LoanCalculation, RatingInputs
from loan_gateway.utils.money import round_money


class RatingRepository:
    """
    Lookups feeding the affordability calculation.

    Every getter returns None when no row (or a NULL column) is found so the
    caller decides the fallback; a stored 0 is returned as 0.
    """

    def __init__(self, db: Session):
        self.db = db

    def get_credit_score(self, user_id: int) -> Optional[int]:
        row = self.db.query(User.credit_score).filter(User.user_id == user_id).first()
        return row.credit_score if row else None

    def get_employment_multiplier(self, employment_status: str) -> Optional[float]:
        row = (
            self.db.query(EmploymentMultiplier.multiplier)
            .filter(EmploymentMultiplier.employment_status == employment_status)
            .first()
        )
        return row.multiplier if row else None

    def get_credit_multiplier(self, credit_score: int) -> Optional[float]:
        """Multiplier of the tier whose inclusive [min_score, max_score] range holds the score"""
        row = (
            self.db.query(CreditTier.multiplier)
            .filter(CreditTier.min_score <= credit_score, CreditTier.max_score >= credit_score)
            .order_by(CreditTier.min_score)
            .first()
        )
        return row.multiplier if row else None

    def get_loan_settings(self) -> Tuple[Optional[float], Optional[float]]:
        """(dti_ratio, base_interest_rate) from the settings row"""
        row = self.db.query(LoanSettingsRow).order_by(LoanSettingsRow.id).first()
        if not row:
            return None, None
        return row.dti_ratio, row.base_interest_rate


class ApplicationRepository:
    """Repository for loan applications"""

    def __init__(self, db: Session):
        self.db = db

    def create_application(
        self,
        user_id: int,
        amount: float,
        inputs: RatingInputs,
        purpose: Optional[str],
        term_months: int,
        calculation: LoanCalculation,
        schedule: AmortizationSchedule,
        interest_rate: float,
    ) -> LoanApplication:
        """Stage a Pending application; the caller's unit of work commits it"""
        db_application = LoanApplication(
            user_id=user_id,
            loan_amount=amount,
            loan_term_months=term_months,
            income=inputs.income,
            employment_status=inputs.employment_status,
            purpose=purpose,
            calculated_max_loan=calculation.max_principal,
            monthly_payment=schedule.monthly_payment,
            credit_score=inputs.credit_score,
            interest_rate=interest_rate,
            repayment_schedule=schedule.serialize(),
            status="Pending",
        )
        self.db.add(db_application)
        self.db.flush()  # Get ID without committing
        return db_application

    def get_application(self, application_id: int) -> Optional[LoanApplication]:
        return (
            self.db.query(LoanApplication)
            .filter(LoanApplication.application_id == application_id)
            .first()
        )

    def get_applications_by_user(self, user_id: int, limit: int = 50) -> List[LoanApplication]:
        """Fetch recent applications for a user, newest first"""
        return (
            self.db.query(LoanApplication)
            .filter(LoanApplication.user_id == user_id)
            .order_by(LoanApplication.application_date.desc(), LoanApplication.application_id.desc())
            .limit(limit)
            .all()
        )

    def set_status(self, application: LoanApplication, status: str) -> None:
        application.status = status
        application.decided_at = datetime.now(timezone.utc)
        self.db.flush()


class LoanRepository:
    """Repository for loans and their payment schedules"""

    def __init__(self, db: Session):
        self.db = db

    def create_loan(self, application: LoanApplication, start_date: date) -> Loan:
        """Create an Active loan with one Pending payment per stored schedule period"""
        entries = [AmortizationEntry.from_dict(item) for item in application.repayment_schedule]
        db_loan = Loan(
            user_id=application.user_id,
            application_id=application.application_id,
            principal=application.loan_amount,
            interest_rate=application.interest_rate,
            term_months=application.loan_term_months,
            monthly_payment=application.monthly_payment,
            remaining_balance=application.loan_amount,
            status="Active",
            start_date=start_date,
            end_date=entries[-1].due_date if entries else start_date,
        )
        self.db.add(db_loan)
        self.db.flush()

        for entry in entries:
            self.db.add(
                LoanPayment(
                    loan_id=db_loan.loan_id,
                    period=entry.period,
                    payment_date=entry.due_date,
                    amount=entry.payment,
                    principal=entry.principal,
                    interest=entry.interest,
                    status="Pending",
                )
            )
        self.db.flush()

        return db_loan

    def get_loan(self, loan_id: int) -> Optional[Loan]:
        return self.db.query(Loan).filter(Loan.loan_id == loan_id).first()

    def claim_disbursement(self, loan_id: int, disbursed_at: datetime) -> bool:
        """
        Stamp disbursed_at only while it is still unset.

        The conditional UPDATE takes the row lock, so of two concurrent runs
        exactly one sees a matched row; the other gets False.
        """
        claimed = (
            self.db.query(Loan)
            .filter(Loan.loan_id == loan_id, Loan.disbursed_at.is_(None))
            .update({Loan.disbursed_at: disbursed_at}, synchronize_session=False)
        )
        return claimed == 1

    def get_active_loan(self, user_id: int) -> Optional[Loan]:
        return (
            self.db.query(Loan)
            .filter(Loan.user_id == user_id, Loan.status == "Active")
            .order_by(Loan.loan_id)
            .first()
        )

    def get_next_due_date(self, loan_id: int) -> Optional[date]:
        row = (
            self.db.query(func.min(LoanPayment.payment_date).label("next_due"))
            .filter(LoanPayment.loan_id == loan_id, LoanPayment.status == "Pending")
            .first()
        )
        return row.next_due if row else None

    def get_payments_by_user(self, user_id: int) -> List[LoanPayment]:
        """Every payment across the user's loans, newest due date first"""
        return (
            self.db.query(LoanPayment)
            .join(Loan, Loan.loan_id == LoanPayment.loan_id)
            .filter(Loan.user_id == user_id)
            .order_by(LoanPayment.payment_date.desc(), LoanPayment.payment_id.desc())
            .all()
        )


class AccountRepository:
    """Repository for customer accounts and their ledger"""

    def __init__(self, db: Session):
        self.db = db

    def get_balance_totals(self, user_id: int) -> Tuple[float, float]:
        """(deposit_total, savings_total) across the user's accounts"""
        row = (
            self.db.query(
                func.sum(case((AccountType.type_name == "Deposit", AccountType.balance), else_=0)).label("deposit_total"),
                func.sum(case((AccountType.type_name == "Savings", AccountType.balance), else_=0)).label("savings_total"),
            )
            .filter(AccountType.user_id == user_id)
            .one()
        )
        return float(row.deposit_total or 0), float(row.savings_total or 0)

    def get_loan_account(self, user_id: int) -> Optional[AccountType]:
        return (
            self.db.query(AccountType)
            .filter(AccountType.user_id == user_id, AccountType.type_name == "Loan")
            .first()
        )

    def credit(self, account: AccountType, amount: float, transaction_type: str, description: str, reference: str) -> Transaction:
        """Increase the account balance and record the matching ledger entry"""
        account.balance = round_money(float(account.balance or 0) + amount)
        db_transaction = Transaction(
            type_id=account.type_id,
            transaction_type=transaction_type,
            amount=amount,
            status="Completed",
            description=description,
            reference_number=reference,
        )
        self.db.add(db_transaction)
        self.db.flush()
        return db_transaction


class AuditRepository:
    """Repository for the admin action audit log"""

    SYSTEM_ACTOR = 0

    def __init__(self, db: Session):
        self.db = db

    def log_action(
        self,
        target_id: int,
        target_table: str,
        action_type: str,
        remarks: str,
        actor_id: int = SYSTEM_ACTOR,
    ) -> AdminAction:
        action = AdminAction(
            user_id=actor_id,
            target_id=target_id,
            target_table=target_table,
            action_type=action_type,
            remarks=remarks,
        )
        self.db.add(action)
        self.db.flush()
        return action


class NotificationRepository:
    """Repository for user notifications"""

    def __init__(self, db: Session):
        self.db = db

    def create_notification(self, user_id: int, type: str, message: str) -> Notification:
        notification = Notification(user_id=user_id, type=type, message=message)
        self.db.add(notification)
        self.db.flush()
        return notification
