"""Contact routes for storing portfolio contact form messages."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from portfolio_service.shared.contact.database import PortfolioMessage
from portfolio_service.shared.contact.rate_limit import enforce_rate_limit
from portfolio_service.shared.contact.schemas import (
    SubmissionRecord,
    SubmissionRequest,
    SubmissionResponse,
)
from portfolio_service.shared.database import ConnectionManager, get_connection_manager, get_db

router = APIRouter(tags=["contact"])


@router.post(
    "/adduser",
    response_model=SubmissionResponse,
    status_code=status.HTTP_200_OK,
    dependencies=[Depends(enforce_rate_limit)],
)
def add_submission(
    submission: SubmissionRequest,
    request: Request,
    db: Session = Depends(get_db),
    connection_manager: ConnectionManager = Depends(get_connection_manager),
):
    """
    Store a contact form message.

    The rate limit dependency runs before the body is validated, so a throttled
    client gets 429 without any validation. Validation failures are reported
    together as 400 by the application's validation handler. Nothing is written
    unless the database is ready.
    """
    if not connection_manager.is_ready():
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={"error": "Database temporarily unavailable. Please try again later."}
        )

    sanitized_data = submission.sanitized()

    try:
        row = PortfolioMessage(**sanitized_data)
        db.add(row)
        db.commit()
        db.refresh(row)
    except Exception as e:
        db.rollback()
        logging.error(f"Database error while saving message: {str(e)}", exc_info=True)
        detail = {"error": "Failed to save message. Please try again later."}
        if request.app.state.settings.is_development:
            detail["details"] = str(e)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)

    record = SubmissionRecord.model_validate(row)
    logging.info(f"Message stored successfully: id={record.id}")
    return SubmissionResponse(message="Message sent successfully!", data=record)
