# app/routers/health.py
"""
System health check endpoint.
Returns status of backend + DB + a snapshot of space states.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from sqlalchemy import func, text
from app.database import get_db
from app.models.parking_space import ParkingSpace
from datetime import datetime

router = APIRouter()


@router.get("/health", summary="System health check")
def health_check(db: Session = Depends(get_db)):
    """
    Returns:
    - Backend status
    - Database connectivity
    - Space count per status (empty if the DB is unreachable)
    """
    result = {
        "status": "ok",
        "timestamp": datetime.utcnow().isoformat(),
        "backend": "ok",
        "database": "unknown",
        "spaces": {},
    }

    try:
        db.execute(text("SELECT 1"))
        result["database"] = "ok"
        rows = db.query(ParkingSpace.status, func.count(ParkingSpace.id)).group_by(ParkingSpace.status).all()
        result["spaces"] = {space_status: count for space_status, count in rows}
    except Exception as e:
        result["database"] = f"error: {str(e)}"
        result["status"] = "degraded"

    return result
