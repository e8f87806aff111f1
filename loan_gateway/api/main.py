"""FastAPI application factory"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from loan_gateway.api.middleware import RequestIDMiddleware, MetricsMiddleware
from loan_gateway.api.v1 import loans, admin
from loan_gateway.domain.exceptions import (
    ApplicationNotFoundError,
    DisbursementError,
    DomainException,
    InvalidLoanRequestError,
    InvalidStatusTransitionError,
    LoanNotFoundError,
    RequestedAmountExceedsMaxError,
)
from loan_gateway.infrastructure.observability.logging import setup_logging
from loan_gateway.config import settings

# Setup structured logging
setup_logging(settings.log_level)

# Status and error code for domain errors that reach the app unhandled
DOMAIN_ERRORS = {
    InvalidLoanRequestError: (400, "invalid_request"),
    RequestedAmountExceedsMaxError: (400, "requested_amount_exceeds_max"),
    ApplicationNotFoundError: (404, "application_not_found"),
    LoanNotFoundError: (404, "loan_not_found"),
    InvalidStatusTransitionError: (409, "invalid_status_transition"),
    DisbursementError: (503, "disbursement_failed"),
}


async def domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
    status_code, error = DOMAIN_ERRORS.get(type(exc), (400, "domain_error"))
    return JSONResponse(status_code=status_code, content={"detail": {"error": error, "reason": str(exc)}})


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Loan Gateway",
        description="Loan eligibility, amortization and origination service",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    app.add_exception_handler(DomainException, domain_exception_handler)

    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    app.include_router(loans.router, prefix="/v1", tags=["loans"])
    app.include_router(admin.router, prefix="/v1", tags=["admin"])

    return app


app = create_app()
