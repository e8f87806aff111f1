"""Borrower-facing loan endpoints: eligibility, calculate, apply, status, history"""

import time
import logging
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Request

from loan_gateway.api.v1.schemas import (
    ActiveLoanSchema,
    AmortizationEntrySchema,
    ApplicationResponse,
    ApplicationSummary,
    ApplyRequest,
    ApplyResponse,
    CalculateRequest,
    CalculateResponse,
    EligibilityResponse,
    PaymentHistoryResponse,
    PaymentSchema,
    ScheduleSchema,
    StatusResponse,
)
from loan_gateway.api.dependencies import get_origination_service, get_request_id
from loan_gateway.services.origination import LoanOriginationService
from loan_gateway.domain.exceptions import (
    InvalidLoanRequestError,
    RequestedAmountExceedsMaxError,
)
from loan_gateway.infrastructure.database.models import Loan
from loan_gateway.infrastructure.observability.metrics import quote_counter, record_application
from loan_gateway.infrastructure.observability.logging import log_application

router = APIRouter()


def _active_loan_schema(loan: Optional[Loan], next_due=None) -> Optional[ActiveLoanSchema]:
    if loan is None:
        return None
    return ActiveLoanSchema(
        loan_id=loan.loan_id,
        principal=loan.principal,
        remaining_balance=loan.remaining_balance,
        monthly_payment=loan.monthly_payment,
        interest_rate=loan.interest_rate,
        status=loan.status,
        start_date=loan.start_date,
        end_date=loan.end_date,
        next_due=next_due,
    )


def _server_error(request_id: str, step: str, error: Exception) -> HTTPException:
    logging.error(f"Unexpected error in {step}: {error}", extra={"request_id": request_id, "step": step})
    return HTTPException(status_code=500, detail={"error": "server_error"})


@router.get("/loan/eligibility/{user_id}", response_model=EligibilityResponse)
def get_eligibility(
    user_id: int,
    request: Request,
    service: LoanOriginationService = Depends(get_origination_service),
):
    """
    Advisory balance tiers and active loan for the loan UI.

    Not used to authorize applications.
    """
    request_id = get_request_id(request)
    try:
        eligibility, active_loan = service.get_eligibility(user_id)
    except Exception as e:
        raise _server_error(request_id, "eligibility", e)

    return EligibilityResponse(
        deposit_total=eligibility.deposit_total,
        savings_total=eligibility.savings_total,
        combined=eligibility.combined,
        eligible_tiers=eligibility.eligible_tiers,
        active_loan=_active_loan_schema(active_loan),
    )


@router.post("/loan/calculate", response_model=CalculateResponse)
def calculate_loan(
    request_body: CalculateRequest,
    request: Request,
    service: LoanOriginationService = Depends(get_origination_service),
):
    """
    Quote the borrower's limits without persisting anything.

    Returns:
        Allowed monthly payment, maximum principal, and when an amount is
        given, its monthly payment and full amortization schedule
    """
    request_id = get_request_id(request)
    try:
        quote = service.calculate(
            user_id=request_body.user_id,
            term_months=request_body.term_months,
            income=request_body.income,
            employment_status=request_body.employment_status,
            amount=request_body.amount,
        )
    except InvalidLoanRequestError as e:
        raise HTTPException(status_code=400, detail={"error": "invalid_request", "reason": str(e)})
    except Exception as e:
        raise _server_error(request_id, "calculate", e)

    quote_counter.inc()

    requested_schedule = None
    if quote.requested_schedule is not None:
        requested_schedule = ScheduleSchema(
            monthly_payment=quote.requested_schedule.monthly_payment,
            schedule=[AmortizationEntrySchema(**vars(entry)) for entry in quote.requested_schedule.entries],
        )

    return CalculateResponse(
        allowed_monthly=quote.calculation.allowed_monthly,
        max_principal=quote.calculation.max_principal,
        monthly_for_requested=quote.monthly_for_requested,
        requested_schedule=requested_schedule,
        interest_rate=quote.interest_rate,
        credit_score=quote.credit_score,
    )


@router.post("/loan/apply", response_model=ApplyResponse)
def apply_for_loan(
    request_body: ApplyRequest,
    request: Request,
    service: LoanOriginationService = Depends(get_origination_service),
):
    """
    Submit a loan application.

    Flow:
    1. Re-fetch rating inputs and recompute the maximum principal
    2. Reject requests above the maximum (400, ceiling attached)
    3. Persist a Pending application with its schedule and an audit entry
    4. Return application id, monthly payment and ceiling
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        result = service.apply(
            user_id=request_body.user_id,
            amount=request_body.amount,
            term_months=request_body.term_months,
            income=request_body.income,
            employment_status=request_body.employment_status,
            purpose=request_body.purpose,
        )

    except InvalidLoanRequestError as e:
        logging.warning(f"Invalid loan request: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=400, detail={"error": "invalid_request", "reason": str(e)})

    except RequestedAmountExceedsMaxError as e:
        record_application("exceeds_max", e.max_principal)
        log_application(
            request_id,
            request_body.user_id,
            "exceeds_max",
            request_body.amount,
            e.max_principal,
            (time.time() - start_time) * 1000,
        )
        raise HTTPException(
            status_code=400,
            detail={"error": "requested_amount_exceeds_max", "max_principal": e.max_principal},
        )

    except Exception as e:
        record_application("error")
        raise _server_error(request_id, "apply", e)

    record_application("accepted", result.max_principal)
    log_application(
        request_id,
        request_body.user_id,
        "accepted",
        request_body.amount,
        result.max_principal,
        (time.time() - start_time) * 1000,
    )

    return ApplyResponse(
        application_id=result.application_id,
        monthly_payment=result.monthly_payment,
        max_principal=result.max_principal,
    )


@router.get("/loan/status/{user_id}", response_model=StatusResponse)
def get_loan_status(
    user_id: int,
    request: Request,
    service: LoanOriginationService = Depends(get_origination_service),
):
    """
    Active loan (with next pending due date) and recent applications.
    """
    request_id = get_request_id(request)
    try:
        active_loan, next_due, applications = service.get_status(user_id)
    except Exception as e:
        raise _server_error(request_id, "status", e)

    history = [
        ApplicationSummary(
            application_id=a.application_id,
            loan_amount=a.loan_amount,
            loan_term_months=a.loan_term_months,
            status=a.status,
            application_date=a.application_date.isoformat(),
        )
        for a in applications
    ]

    return StatusResponse(
        user_id=user_id,
        active_loan=_active_loan_schema(active_loan, next_due),
        history=history,
    )


@router.get("/loan/history/{user_id}", response_model=PaymentHistoryResponse)
def get_payment_history(
    user_id: int,
    request: Request,
    service: LoanOriginationService = Depends(get_origination_service),
):
    request_id = get_request_id(request)
    try:
        payments = service.get_history(user_id)
    except Exception as e:
        raise _server_error(request_id, "history", e)

    return PaymentHistoryResponse(
        user_id=user_id,
        payments=[
            PaymentSchema(
                payment_id=p.payment_id,
                loan_id=p.loan_id,
                period=p.period,
                payment_date=p.payment_date,
                amount=p.amount,
                principal=p.principal,
                interest=p.interest,
                status=p.status,
            )
            for p in payments
        ],
    )


@router.get("/loan/applications/{application_id}", response_model=ApplicationResponse)
def get_application(
    application_id: int,
    service: LoanOriginationService = Depends(get_origination_service),
):
    """
    Retrieve one application with its stored repayment schedule.
    """
    application = service.get_application(application_id)

    return ApplicationResponse(
        application_id=application.application_id,
        user_id=application.user_id,
        loan_amount=application.loan_amount,
        loan_term_months=application.loan_term_months,
        income=application.income,
        employment_status=application.employment_status,
        purpose=application.purpose,
        calculated_max_loan=application.calculated_max_loan,
        monthly_payment=application.monthly_payment,
        credit_score=application.credit_score,
        interest_rate=application.interest_rate,
        status=application.status,
        repayment_schedule=[AmortizationEntrySchema(**entry) for entry in application.repayment_schedule],
        application_date=application.application_date.isoformat(),
    )
