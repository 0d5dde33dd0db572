"""
FastAPI dependencies (DB session, current owner, summary service)
"""
from fastapi import Request, HTTPException, status

from pftrack.application.summary import DashboardSummaryService, SqlRecordSource
from pftrack.infrastructure.db.session import get_db as _get_db, get_session_factory


# Re-export get_db for routers
get_db = _get_db


def get_owner_id(request: Request) -> int:
    """
    Owner id of the logged-in user, taken from the signed session cookie

    Raises:
        HTTPException(401): no user in the session
    """
    user_id = request.session.get("user_id")
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated"
        )
    return int(user_id)


def get_summary_service() -> DashboardSummaryService:
    return DashboardSummaryService(SqlRecordSource(get_session_factory()))
