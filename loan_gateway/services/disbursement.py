"""Post-approval side effects: crediting loan funds and notifying the borrower"""

import logging
import time
from datetime import datetime, timezone
from typing import Optional
from sqlalchemy.exc import SQLAlchemyError

from loan_gateway.config import settings
from loan_gateway.domain.exceptions import DisbursementError, LoanNotFoundError
from loan_gateway.infrastructure.database.repositories import (
    AccountRepository,
    AuditRepository,
    LoanRepository,
    NotificationRepository,
)
from loan_gateway.infrastructure.database.session import SessionFactory, unit_of_work
from loan_gateway.infrastructure.observability.metrics import (
    disbursement_failure_counter,
    disbursement_latency_histogram,
    notification_failure_counter,
)

logger = logging.getLogger(__name__)

DISBURSED = "disbursed"
ALREADY_DISBURSED = "already_disbursed"
FAILED = "failed"


class DisbursementService:
    """
    Credits approved principal into the borrower's Loan account.

    Runs after the approval has committed, in its own session. Failures are
    logged and counted but never undo the approval; the task is idempotent,
    so it can be retried at any time.
    """

    def __init__(
        self,
        session_factory: SessionFactory,
        max_retries: Optional[int] = None,
        backoff_base: Optional[float] = None,
    ):
        self.session_factory = session_factory
        self.max_retries = settings.disbursement_max_retries if max_retries is None else max_retries
        self.backoff_base = settings.disbursement_backoff_base if backoff_base is None else backoff_base

    def disburse(self, loan_id: int) -> str:
        """
        Disburse with retry, never raising.

        Retry strategy:
        - Exponential backoff: base, 2*base, 4*base ...
        - Retries on database errors only; a missing loan or loan account fails at once

        Returns:
            "disbursed", "already_disbursed" or "failed"
        """
        attempt = 0
        while True:
            try:
                with disbursement_latency_histogram.time():
                    return self._disburse_once(loan_id)

            except (DisbursementError, LoanNotFoundError) as e:
                disbursement_failure_counter.inc()
                logger.error(f"Disbursement failed for loan {loan_id}: {e}", extra={"loan_id": loan_id})
                return FAILED

            except SQLAlchemyError as e:
                attempt += 1
                disbursement_failure_counter.inc()

                if attempt >= self.max_retries:
                    logger.error(
                        f"Disbursement failed for loan {loan_id} after {attempt} attempts: {e}",
                        extra={"loan_id": loan_id},
                    )
                    return FAILED

                backoff = self.backoff_base * (2 ** (attempt - 1))
                logger.warning(
                    f"Disbursement attempt {attempt} failed for loan {loan_id}, retrying in {backoff}s",
                    extra={"loan_id": loan_id},
                )
                time.sleep(backoff)

            except Exception as e:
                disbursement_failure_counter.inc()
                logger.exception(f"Unexpected disbursement error for loan {loan_id}: {e}", extra={"loan_id": loan_id})
                return FAILED

    def _disburse_once(self, loan_id: int) -> str:
        db = self.session_factory()
        try:
            with unit_of_work(db):
                loans = LoanRepository(db)
                loan = loans.get_loan(loan_id)
                if not loan:
                    raise LoanNotFoundError(f"Loan {loan_id} not found")
                if loan.disbursed_at is not None:
                    return ALREADY_DISBURSED
                # Claim rolls back with the credit if anything below fails
                if not loans.claim_disbursement(loan_id, datetime.now(timezone.utc)):
                    return ALREADY_DISBURSED

                accounts = AccountRepository(db)
                account = accounts.get_loan_account(loan.user_id)
                if not account:
                    raise DisbursementError(f"User {loan.user_id} has no Loan account")

                amount = float(loan.principal)
                accounts.credit(
                    account,
                    amount,
                    transaction_type="Loan Disbursement",
                    description=f"Disbursement of loan {loan.loan_id}",
                    reference=f"LOAN-{loan.loan_id}",
                )
                account.account_status = "Open"
                AuditRepository(db).log_action(
                    target_id=loan.loan_id,
                    target_table="loans",
                    action_type="Disburse",
                    remarks=f"Credited {amount:.2f} to account {account.account_number}",
                )

            logger.info(f"Loan {loan_id} disbursed", extra={"loan_id": loan_id, "step": "disbursement_complete"})
            return DISBURSED
        finally:
            db.close()


class NotificationService:
    """Best-effort in-app notifications"""

    def __init__(self, session_factory: SessionFactory):
        self.session_factory = session_factory

    def notify(self, user_id: int, type: str, message: str) -> bool:
        """Insert a notification; failures are logged and counted, never raised"""
        try:
            db = self.session_factory()
            try:
                with unit_of_work(db):
                    NotificationRepository(db).create_notification(user_id, type, message)
            finally:
                db.close()
        except SQLAlchemyError as e:
            notification_failure_counter.inc()
            logger.error(f"Notification for user {user_id} failed: {e}", extra={"user_id": user_id})
            return False
        except Exception as e:
            notification_failure_counter.inc()
            logger.exception(f"Unexpected notification error for user {user_id}: {e}", extra={"user_id": user_id})
            return False
        return True
