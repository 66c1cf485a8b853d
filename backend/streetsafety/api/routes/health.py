from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from sqlalchemy import text
from streetsafety.db.session import get_db

router = APIRouter(prefix="/health", tags=["Health"])


@router.get(
    "",
    summary="Health check",
    description="Checks the service and its database connection",
    response_description="Service and database status",
)
def health_check(db: Session = Depends(get_db)):
    """
    Health check endpoint.

    Tests the database connection and reports the service status.
    """
    try:
        db.execute(text("SELECT 1"))
        db_status = "ok"
    except Exception:
        db_status = "error"

    return {
        "status": "ok",
        "database": db_status
    }
