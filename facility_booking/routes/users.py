from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.engine import Engine

from facility_booking.config import POINTS_HISTORY_DEFAULT_LIMIT, POINTS_HISTORY_MAX_LIMIT
from facility_booking.dependencies import get_clock, get_db_engine
from facility_booking.routes._helpers import raise_http_error
from facility_booking.schemas.points import PointHistoryFilters, PointsAdjustPayload
from facility_booking.schemas.records import PointHistoryPage
from facility_booking.services.points import adjust_points, get_point_history
from facility_booking.utils.datetime import Clock

router = APIRouter()


@router.post("/users/{user_id}/points")
def adjust_user_points(
    user_id: int,
    payload: PointsAdjustPayload,
    engine: Engine = Depends(get_db_engine),
    clock: Clock = Depends(get_clock),
) -> dict[str, object]:
    """
    Adjust a user's points balance.

    Returns:
        dict: Confirmation message and the new balance
    """
    try:
        new_balance = adjust_points(
            engine,
            user_id=user_id,
            delta=payload.delta,
            reason=payload.reason,
            booking_ref=payload.booking_id,
            clock=clock,
        )
    except Exception as e:
        raise_http_error(e, "points_adjust_failed", user_id=user_id)

    return {"message": "Points adjusted successfully", "new_balance": new_balance}


@router.get("/users/{user_id}/points", response_model=PointHistoryPage)
def user_point_history(
    user_id: int,
    days: Optional[int] = Query(None, ge=1, description="Only entries from the last N days"),
    type: Optional[Literal["earned", "spent"]] = Query(None, description="earned or spent"),
    search: Optional[str] = Query(None, description="Search by reason"),
    page: int = Query(1, ge=1),
    limit: int = Query(POINTS_HISTORY_DEFAULT_LIMIT, ge=1, le=POINTS_HISTORY_MAX_LIMIT),
    engine: Engine = Depends(get_db_engine),
    clock: Clock = Depends(get_clock),
) -> PointHistoryPage:
    """Paginated points history, newest first."""
    filters = PointHistoryFilters(days=days, type=type, search=search, page=page, limit=limit)
    try:
        return get_point_history(engine, user_id, filters, clock=clock)
    except Exception as e:
        raise_http_error(e, "points_history_failed", user_id=user_id)
