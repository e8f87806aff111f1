"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict
from pythonjsonlogger import jsonlogger
from loan_gateway.config import settings


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    # JSON handler for stdout
    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_application(
    request_id: str,
    user_id: int,
    outcome: str,
    requested_amount: float,
    max_principal: float,
    duration_ms: float,
) -> None:
    """Log structured apply outcome for analysis"""
    logging.info(
        "Loan application processed",
        extra={
            "request_id": request_id,
            "user_id": user_id,
            "step": "apply_complete",
            "application_outcome": outcome,
            "requested_amount": requested_amount,
            "max_principal": max_principal,
            "duration_ms": duration_ms,
        },
    )


def log_decision(request_id: str, application_id: int, decision: str, admin_id: int) -> None:
    """Log structured admin decision on an application"""
    logging.info(
        "Loan application decided",
        extra={
            "request_id": request_id,
            "application_id": application_id,
            "step": "decision_complete",
            "decision": decision,
            "admin_id": admin_id,
        },
    )
