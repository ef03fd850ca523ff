from datetime import date, datetime, timedelta
from typing import Literal, Optional

from fastapi import APIRouter, Query, Response, status

from booking import config
from booking.models import (
    AppointmentCreateRequest,
    AppointmentStatusUpdateRequest,
    AppointmentView,
    AvailableTime,
    TimeAvailability,
)
from booking.routers.http_errors import raise_scheduling_http_error
from booking.services.availability import (
    get_available_dates,
    get_available_times,
    is_time_available,
    to_local_naive,
)
from booking.services.booking import BookingService
from booking.services.errors import NotFoundError, SchedulingError, SchedulingValidationError
from booking.services.schedule_store import schedule_store

router = APIRouter(tags=["appointments"])
booking_service = BookingService(store=schedule_store)

OFFERING_PATH = "/providers/{provider_id}/services/{service_id}"


@router.get(f"{OFFERING_PATH}/available-dates", response_model=list[date])
def available_dates(
    provider_id: int,
    service_id: int,
    start_date: Optional[date] = Query(default=None),
    days_to_show: int = Query(default=7, ge=0, le=config.MAX_DAYS_TO_SHOW),
):
    return get_available_dates(
        schedule_store,
        provider_id,
        service_id,
        start_date or date.today(),
        days_to_show,
    )


@router.get(f"{OFFERING_PATH}/available-slots", response_model=list[AvailableTime])
def available_slots(
    provider_id: int,
    service_id: int,
    slot_date: date = Query(..., alias="date"),
):
    if slot_date < date.today():
        raise_scheduling_http_error(SchedulingValidationError("Cannot retrieve slots for past dates"))
    return get_available_times(schedule_store, provider_id, service_id, slot_date)


@router.get(f"{OFFERING_PATH}/is-time-available", response_model=TimeAvailability)
def check_time_available(
    provider_id: int,
    service_id: int,
    start: datetime = Query(...),
    end: Optional[datetime] = Query(default=None),
):
    start_local = to_local_naive(start)
    if end is None:
        offering = schedule_store.get_offering(provider_id, service_id)
        if offering is None:
            raise_scheduling_http_error(NotFoundError("Service not found"))
        end_local = start_local + timedelta(minutes=offering.duration_minutes)
    else:
        end_local = to_local_naive(end)

    return TimeAvailability(
        provider_id=provider_id,
        service_id=service_id,
        start=start_local,
        end=end_local,
        available=is_time_available(schedule_store, provider_id, service_id, start_local, end_local),
    )


@router.post("/appointments", response_model=AppointmentView, status_code=status.HTTP_201_CREATED)
def create_appointment(request: AppointmentCreateRequest):
    try:
        created = booking_service.create_appointment(
            provider_id=request.provider_id,
            service_id=request.service_id,
            customer_id=request.customer_id,
            start_time=request.start_time,
            notes=request.notes,
        )
        return schedule_store.get_appointment_view(created.id)
    except SchedulingError as exc:
        raise_scheduling_http_error(exc)


@router.get("/appointments", response_model=list[AppointmentView])
def list_appointments(
    user_id: str = Query(..., min_length=1),
    role: Literal["customer", "provider"] = Query(default="customer"),
):
    try:
        return booking_service.list_appointments(user_id=user_id, role=role)
    except SchedulingError as exc:
        raise_scheduling_http_error(exc)


@router.put("/appointments/{appointment_id}/status", response_model=AppointmentView)
def update_appointment_status(appointment_id: int, request: AppointmentStatusUpdateRequest):
    try:
        return booking_service.update_status(
            appointment_id=appointment_id,
            actor_user_id=request.actor_user_id,
            status=request.status,
        )
    except SchedulingError as exc:
        raise_scheduling_http_error(exc)


@router.delete("/appointments/{appointment_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_appointment(appointment_id: int, actor_user_id: str = Query(...)):
    try:
        booking_service.delete_appointment(appointment_id=appointment_id, actor_user_id=actor_user_id)
    except SchedulingError as exc:
        raise_scheduling_http_error(exc)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
