"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class RatingInputs:
    """Borrower attributes that drive affordability"""

    income: float
    employment_status: str
    credit_score: int


@dataclass(frozen=True)
class LoanSettings:
    """Global underwriting settings (single row, admin managed)"""

    dti_ratio: float
    base_interest_rate: float  # APR percent, e.g. 24 means 24%


@dataclass(frozen=True)
class RatingFactors:
    """Multipliers resolved from the lookup tables"""

    employment_multiplier: float
    credit_multiplier: float


@dataclass
class LoanCalculation:
    """Affordable monthly payment and the principal it supports"""

    allowed_monthly: float
    max_principal: float


@dataclass
class AmortizationEntry:
    """Single period in an amortization schedule"""

    period: int
    due_date: date
    payment: float
    principal: float
    interest: float
    balance: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "period": self.period,
            "due_date": self.due_date.isoformat(),
            "payment": self.payment,
            "principal": self.principal,
            "interest": self.interest,
            "balance": self.balance,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AmortizationEntry":
        return cls(
            period=int(data["period"]),
            due_date=date.fromisoformat(data["due_date"]),
            payment=float(data["payment"]),
            principal=float(data["principal"]),
            interest=float(data["interest"]),
            balance=float(data["balance"]),
        )


@dataclass
class AmortizationSchedule:
    """Full repayment schedule with its nominal monthly payment"""

    monthly_payment: float
    entries: List[AmortizationEntry] = field(default_factory=list)

    def serialize(self) -> List[Dict[str, Any]]:
        """Representation stored on the loan application row"""
        return [entry.to_dict() for entry in self.entries]


@dataclass
class LoanQuote:
    """Result of an advisory (read-only) loan calculation"""

    calculation: LoanCalculation
    interest_rate: float
    credit_score: int
    monthly_for_requested: Optional[float] = None
    requested_schedule: Optional[AmortizationSchedule] = None


@dataclass
class Eligibility:
    """Balance-based advisory eligibility shown in the loan UI"""

    deposit_total: float
    savings_total: float
    combined: float
    eligible_tiers: List[str]


@dataclass
class ApplicationResult:
    """Outcome of a successfully persisted loan application"""

    application_id: int
    monthly_payment: float
    max_principal: float
