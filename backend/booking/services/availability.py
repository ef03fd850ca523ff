"""
Availability Engine

Derives bookable time slots for a provider's service offering from:
- Business hours (one open/close window per weekday)
- Existing non-cancelled appointments
- The current time (slots already started today are hidden)

Every function here is read-only over an injected store and an optional
``now`` value, so the same code serves the HTTP layer, the booking
transaction and tests running against a fixed clock.
"""

import logging
from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List, Optional, Protocol

from booking.models import AvailableTime, BusinessHours, Offering, TimeRange
from booking.services.errors import ClosedOnDateError, ServiceUnavailableError

logger = logging.getLogger(__name__)


class ScheduleReader(Protocol):
    def get_offering(self, provider_id: int, service_id: int) -> Optional[Offering]:
        ...

    def get_open_hours(self, provider_id: int, day_of_week: int) -> Optional[BusinessHours]:
        ...

    def list_non_cancelled(self, provider_id: int, service_id: int, day: date) -> List[TimeRange]:
        ...


def day_of_week(day: date) -> int:
    """Weekday index used by business hours: 0=Sunday .. 6=Saturday."""
    return (day.weekday() + 1) % 7


def intervals_overlap(start_a: datetime, end_a: datetime, start_b: datetime, end_b: datetime) -> bool:
    """
    Half-open interval overlap: [start_a, end_a) and [start_b, end_b).

    Touching endpoints (end_a == start_b) do not overlap. Slot generation
    and the booking-time check both go through this predicate.
    """
    return start_a < end_b and end_a > start_b


def to_local_naive(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


def format_slot_label(start: datetime, end: datetime) -> str:
    return f"{_clock_label(start)} - {_clock_label(end)}"


def _clock_label(value: datetime) -> str:
    hour = value.hour % 12 or 12
    suffix = "AM" if value.hour < 12 else "PM"
    return f"{hour}:{value.minute:02d} {suffix}"


def _resolve_offering(store: ScheduleReader, provider_id: int, service_id: int) -> Offering:
    offering = store.get_offering(provider_id, service_id)
    if offering is None or not offering.is_available:
        raise ServiceUnavailableError("Service is not available for this provider")
    return offering


def _resolve_open_hours(store: ScheduleReader, provider_id: int, day: date) -> BusinessHours:
    hours = store.get_open_hours(provider_id, day_of_week(day))
    if hours is None or not hours.is_open:
        raise ClosedOnDateError(f"Provider is closed on {day.isoformat()}")
    return hours


def _has_conflict(start: datetime, end: datetime, booked: Iterable[TimeRange]) -> bool:
    return any(intervals_overlap(start, end, existing.start, existing.end) for existing in booked)


def _generate_slots(
    offering: Offering,
    hours: BusinessHours,
    day: date,
    booked: List[TimeRange],
    now: datetime,
) -> List[AvailableTime]:
    step = timedelta(minutes=offering.duration_minutes)
    if step <= timedelta(0):
        return []

    current = datetime.combine(day, hours.open_time)
    close = datetime.combine(day, hours.close_time)
    is_today = day == now.date()

    slots: List[AvailableTime] = []
    # The last slot must end on or before close; no partial trailing slot.
    while current + step <= close:
        slot_end = current + step
        if not _has_conflict(current, slot_end, booked) and not (is_today and current < now):
            slots.append(
                AvailableTime(start=current, end=slot_end, label=format_slot_label(current, slot_end))
            )
        current = slot_end
    return slots


def get_available_times(
    store: ScheduleReader,
    provider_id: int,
    service_id: int,
    day: date,
    now: Optional[datetime] = None,
) -> List[AvailableTime]:
    """
    Lists the bookable slots of one day in chronological order.

    Returns an empty list when the offering is missing or switched off, or
    when the provider is closed that weekday.
    """
    now = now or datetime.now()
    try:
        offering = _resolve_offering(store, provider_id, service_id)
        hours = _resolve_open_hours(store, provider_id, day)
    except (ServiceUnavailableError, ClosedOnDateError) as exc:
        logger.debug(
            "No slots for provider=%s service=%s on %s (%s)", provider_id, service_id, day, exc.reason
        )
        return []

    booked = store.list_non_cancelled(provider_id, service_id, day)
    return _generate_slots(offering, hours, day, booked, now)


def get_available_dates(
    store: ScheduleReader,
    provider_id: int,
    service_id: int,
    start_date: date,
    days_to_show: int,
    now: Optional[datetime] = None,
) -> List[date]:
    """
    Lists the days in [start_date, start_date + days_to_show] that still have
    at least one bookable slot.

    Past days and closed weekdays are skipped. Business hours are fetched
    once per weekday; slots are generated exactly as ``get_available_times``
    does, so every listed date is non-empty at query time.
    """
    now = now or datetime.now()
    today = now.date()

    offering = store.get_offering(provider_id, service_id)
    if offering is None or not offering.is_available:
        return []

    hours_by_weekday: Dict[int, Optional[BusinessHours]] = {}
    available_dates: List[date] = []
    for offset in range(days_to_show + 1):
        current = start_date + timedelta(days=offset)
        if current < today:
            continue

        weekday = day_of_week(current)
        if weekday not in hours_by_weekday:
            hours_by_weekday[weekday] = store.get_open_hours(provider_id, weekday)
        hours = hours_by_weekday[weekday]
        if hours is None or not hours.is_open:
            continue

        booked = store.list_non_cancelled(provider_id, service_id, current)
        if _generate_slots(offering, hours, current, booked, now):
            available_dates.append(current)

    return available_dates


def is_time_available(
    store: ScheduleReader,
    provider_id: int,
    service_id: int,
    start: datetime,
    end: datetime,
) -> bool:
    """
    Checks one candidate interval with the same guards as slot generation:
    available offering, inside business hours of start's weekday, and no
    overlap with a non-cancelled appointment.
    """
    start = to_local_naive(start)
    end = to_local_naive(end)
    if end <= start:
        return False

    try:
        _resolve_offering(store, provider_id, service_id)
        hours = _resolve_open_hours(store, provider_id, start.date())
    except (ServiceUnavailableError, ClosedOnDateError):
        return False

    business_start = datetime.combine(start.date(), hours.open_time)
    business_end = datetime.combine(start.date(), hours.close_time)
    if start < business_start or end > business_end:
        return False

    booked = store.list_non_cancelled(provider_id, service_id, start.date())
    return not _has_conflict(start, end, booked)
