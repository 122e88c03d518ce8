"""Health check and database diagnostic routes."""

import logging
import time
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from sqlalchemy import func, text
from sqlalchemy.orm import Session

from portfolio_service.shared.contact.database import PortfolioMessage
from portfolio_service.shared.database import ConnectionManager, get_connection_manager, get_db

router = APIRouter(tags=["diagnostics"])

PROCESS_STARTED_AT = time.monotonic()


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get("/health")
def health(
    request: Request,
    connection_manager: ConnectionManager = Depends(get_connection_manager),
):
    """Health check endpoint for monitoring and deployment platforms."""
    return {
        "status": "OK" if connection_manager.is_ready() else "Database connection issue",
        "timestamp": _utc_timestamp(),
        "uptime": time.monotonic() - PROCESS_STARTED_AT,
        "environment": request.app.state.settings.environment_label,
    }


@router.get("/test-db")
def test_db(
    db: Session = Depends(get_db),
    connection_manager: ConnectionManager = Depends(get_connection_manager),
):
    """Run a trivial query to check the database connection."""
    try:
        row = db.execute(text("SELECT CURRENT_TIMESTAMP AS now")).mappings().first()
    except Exception as e:
        logging.error(f"Database connection error: {str(e)}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": "Database connection failed",
                "details": str(e),
                "connection": connection_manager.is_ready(),
            },
        )
    return {
        "message": "Database connected successfully",
        "time": jsonable_encoder(dict(row)),
        "connection": connection_manager.is_ready(),
    }


@router.get("/api/stats")
def stats(
    db: Session = Depends(get_db),
    connection_manager: ConnectionManager = Depends(get_connection_manager),
):
    """Total number of stored messages."""
    if not connection_manager.is_ready():
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"error": "Database unavailable"},
        )
    try:
        count = db.query(func.count(PortfolioMessage.id)).scalar() or 0
    except Exception as e:
        logging.error(f"Failed to count messages: {str(e)}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Server error"},
        )
    return {"totalMessages": int(count), "timestamp": _utc_timestamp()}
