from datetime import datetime

from fastapi import APIRouter, Depends, Query
from sqlalchemy.engine import Engine

from facility_booking.dependencies import get_db_engine
from facility_booking.routes._helpers import raise_http_error
from facility_booking.services.reservations import get_room_availability
from facility_booking.utils.interval import TimeInterval

router = APIRouter()


@router.get("/rooms/{room_id}/availability")
def room_availability(
    room_id: int,
    start: datetime = Query(..., description="Window start (ISO 8601)"),
    end: datetime = Query(..., description="Window end (ISO 8601)"),
    engine: Engine = Depends(get_db_engine),
) -> dict[str, object]:
    """
    Show which parts of a window are held on a room.

    Returns the active bookings overlapping ``[start, end)``. This read does
    not take the booking lock, so a slot shown free can still be taken before
    the caller books it; the booking call itself is authoritative.
    """
    try:
        window = TimeInterval(start, end)
        bookings = get_room_availability(engine, room_id, window)
    except Exception as e:
        raise_http_error(e, "room_availability_failed", room_id=room_id)

    return {
        "room_id": room_id,
        "start": window.start.isoformat(),
        "end": window.end.isoformat(),
        "available": not bookings,
        "busy": [b.model_dump(mode="json") for b in bookings],
    }
