from fastapi import APIRouter, Query

from booking.models import Offering, SearchServiceResult
from booking.routers.http_errors import raise_scheduling_http_error
from booking.services.errors import SchedulingError
from booking.services.schedule_store import schedule_store

router = APIRouter(tags=["services"])


@router.get("/search", response_model=list[SearchServiceResult])
def search_services(
    q: str = Query(..., min_length=1),
    top: bool = Query(default=False),
):
    return schedule_store.search_services(q, top=top)


@router.get("/{service_id}", response_model=list[Offering])
def offerings_by_service(service_id: int):
    try:
        return schedule_store.list_offerings_by_service(service_id)
    except SchedulingError as exc:
        raise_scheduling_http_error(exc)
