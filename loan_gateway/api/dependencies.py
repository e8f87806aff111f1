"""Dependency injection for FastAPI endpoints"""

from fastapi import Depends, Request
from sqlalchemy.orm import Session
from loan_gateway.infrastructure.database.session import SessionFactory, get_db, get_session_factory
from loan_gateway.services.disbursement import DisbursementService, NotificationService
from loan_gateway.services.origination import LoanOriginationService


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_origination_service(db: Session = Depends(get_db)) -> LoanOriginationService:
    """Provide origination service bound to the request session"""
    return LoanOriginationService(db)


def get_disbursement_service(
    session_factory: SessionFactory = Depends(get_session_factory),
) -> DisbursementService:
    """Provide disbursement service; it opens its own sessions"""
    return DisbursementService(session_factory)


def get_notification_service(
    session_factory: SessionFactory = Depends(get_session_factory),
) -> NotificationService:
    return NotificationService(session_factory)
