"""Admin approval workflow: approve/deny applications, retry disbursements"""

import logging
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request

from loan_gateway.api.v1.schemas import DecisionRequest, DecisionResponse, DisbursementResponse
from loan_gateway.api.dependencies import (
    get_disbursement_service,
    get_notification_service,
    get_origination_service,
    get_request_id,
)
from loan_gateway.services.origination import LoanOriginationService
from loan_gateway.services.disbursement import FAILED, DisbursementService, NotificationService
from loan_gateway.domain.exceptions import DomainException
from loan_gateway.infrastructure.observability.metrics import decision_counter
from loan_gateway.infrastructure.observability.logging import log_decision

router = APIRouter()


@router.post("/admin/applications/{application_id}/approve", response_model=DecisionResponse)
def approve_application(
    application_id: int,
    request_body: DecisionRequest,
    background_tasks: BackgroundTasks,
    request: Request,
    service: LoanOriginationService = Depends(get_origination_service),
    disbursement: DisbursementService = Depends(get_disbursement_service),
    notifications: NotificationService = Depends(get_notification_service),
):
    """
    Approve a Pending application.

    Flow:
    1. Mark application Approved, create loan + payment schedule (one transaction)
    2. Schedule disbursement into the borrower's Loan account (best-effort)
    3. Schedule approval notification (best-effort)
    """
    request_id = get_request_id(request)

    try:
        loan = service.approve(application_id, request_body.admin_id, request_body.remarks)

    except DomainException:
        raise

    except Exception as e:
        logging.error(f"Unexpected error approving application: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail={"error": "server_error"})

    loan_id = loan.loan_id
    user_id = loan.user_id

    # Side effects run after commit; their failure never reverts the approval
    background_tasks.add_task(disbursement.disburse, loan_id)
    background_tasks.add_task(
        notifications.notify,
        user_id,
        "LOAN_APPROVED",
        f"Your loan application #{application_id} has been approved.",
    )

    decision_counter.labels(decision="approved").inc()
    log_decision(request_id, application_id, "approved", request_body.admin_id)

    return DecisionResponse(application_id=application_id, status="Approved", loan_id=loan_id)


@router.post("/admin/applications/{application_id}/deny", response_model=DecisionResponse)
def deny_application(
    application_id: int,
    request_body: DecisionRequest,
    background_tasks: BackgroundTasks,
    request: Request,
    service: LoanOriginationService = Depends(get_origination_service),
    notifications: NotificationService = Depends(get_notification_service),
):
    request_id = get_request_id(request)

    try:
        application = service.deny(application_id, request_body.admin_id, request_body.remarks)

    except DomainException:
        raise

    except Exception as e:
        logging.error(f"Unexpected error denying application: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail={"error": "server_error"})

    background_tasks.add_task(
        notifications.notify,
        application.user_id,
        "LOAN_DENIED",
        f"Your loan application #{application_id} has been denied.",
    )

    decision_counter.labels(decision="denied").inc()
    log_decision(request_id, application_id, "denied", request_body.admin_id)

    return DecisionResponse(application_id=application_id, status="Denied")


@router.post("/admin/loans/{loan_id}/disburse", response_model=DisbursementResponse)
def retry_disbursement(
    loan_id: int,
    service: LoanOriginationService = Depends(get_origination_service),
    disbursement: DisbursementService = Depends(get_disbursement_service),
):
    """
    Re-run disbursement for an approved loan. Safe to repeat: an already
    disbursed loan is reported as such and not credited twice.
    """
    service.get_loan(loan_id)

    outcome = disbursement.disburse(loan_id)
    if outcome == FAILED:
        raise HTTPException(status_code=503, detail={"error": "disbursement_failed"})

    return DisbursementResponse(loan_id=loan_id, outcome=outcome)
