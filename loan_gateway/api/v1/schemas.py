"""Pydantic schemas for API request/response validation"""

from pydantic import BaseModel, Field
from datetime import date
from typing import List, Optional
from loan_gateway.config import settings


class CalculateRequest(BaseModel):
    """Request body for POST /v1/loan/calculate"""

    user_id: int = Field(..., gt=0, description="Borrower identifier")
    amount: Optional[float] = Field(
        None,
        gt=0,
        le=settings.max_money_value,
        allow_inf_nan=False,
        description="Requested principal (optional for a quote)",
    )
    term_months: int = Field(..., ge=1, description="Repayment term in months")
    income: float = Field(
        ...,
        ge=0,
        le=settings.max_money_value,
        allow_inf_nan=False,
        description="Monthly income",
    )
    employment_status: str = Field(..., min_length=1)
    purpose: Optional[str] = None


class ApplyRequest(CalculateRequest):
    """Request body for POST /v1/loan/apply"""

    amount: float = Field(
        ...,
        gt=0,
        le=settings.max_money_value,
        allow_inf_nan=False,
        description="Requested principal",
    )


class AmortizationEntrySchema(BaseModel):
    """Single period in a repayment schedule"""

    period: int
    due_date: date
    payment: float
    principal: float
    interest: float
    balance: float


class ScheduleSchema(BaseModel):
    monthly_payment: float
    schedule: List[AmortizationEntrySchema]


class CalculateResponse(BaseModel):
    """Response for POST /v1/loan/calculate"""

    allowed_monthly: float
    max_principal: float
    monthly_for_requested: Optional[float] = None
    requested_schedule: Optional[ScheduleSchema] = None
    interest_rate: float
    credit_score: int


class ApplyResponse(BaseModel):
    """Response for POST /v1/loan/apply"""

    application_id: int
    monthly_payment: float
    max_principal: float


class ActiveLoanSchema(BaseModel):
    """Summary of a borrower's active loan"""

    loan_id: int
    principal: float
    remaining_balance: float
    monthly_payment: float
    interest_rate: float
    status: str
    start_date: date
    end_date: date
    next_due: Optional[date] = None


class EligibilityResponse(BaseModel):
    """Response for GET /v1/loan/eligibility/{user_id}"""

    deposit_total: float
    savings_total: float
    combined: float
    eligible_tiers: List[str]
    active_loan: Optional[ActiveLoanSchema] = None


class ApplicationSummary(BaseModel):
    """Single application in history"""

    application_id: int
    loan_amount: float
    loan_term_months: int
    status: str
    application_date: str


class StatusResponse(BaseModel):
    """Response for GET /v1/loan/status/{user_id}"""

    user_id: int
    active_loan: Optional[ActiveLoanSchema] = None
    history: List[ApplicationSummary]


class PaymentSchema(BaseModel):
    """Single scheduled or settled loan payment"""

    payment_id: int
    loan_id: int
    period: int
    payment_date: date
    amount: float
    principal: float
    interest: float
    status: str


class PaymentHistoryResponse(BaseModel):
    """Response for GET /v1/loan/history/{user_id}"""

    user_id: int
    payments: List[PaymentSchema]


class ApplicationResponse(BaseModel):
    """Response for GET /v1/loan/applications/{application_id}"""

    application_id: int
    user_id: int
    loan_amount: float
    loan_term_months: int
    income: float
    employment_status: str
    purpose: Optional[str] = None
    calculated_max_loan: float
    monthly_payment: float
    credit_score: int
    interest_rate: float
    status: str
    repayment_schedule: List[AmortizationEntrySchema]
    application_date: str


class DecisionRequest(BaseModel):
    """Request body for admin approve/deny"""

    admin_id: int = Field(..., ge=0, description="Acting admin identifier")
    remarks: Optional[str] = None


class DecisionResponse(BaseModel):
    """Response for admin approve/deny"""

    application_id: int
    status: str
    loan_id: Optional[int] = None


class DisbursementResponse(BaseModel):
    """Response for POST /v1/admin/loans/{loan_id}/disburse"""

    loan_id: int
    outcome: str
