import os
import sys
from datetime import date, datetime, time, timedelta

sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from booking.models import Appointment, BusinessHours, Offering
from booking.services.availability import (
    day_of_week,
    format_slot_label,
    get_available_dates,
    get_available_times,
    intervals_overlap,
    is_time_available,
)
from booking.services.memory_schedule_store import InMemoryScheduleStore

PROVIDER_ID = 1
SERVICE_ID = 10
MONDAY = date(2030, 1, 7)
SUNDAY_BEFORE = datetime(2030, 1, 6, 8, 0)


def _store(duration_minutes=60, is_available=True, open_days=(1,)):
    store = InMemoryScheduleStore()
    for weekday in open_days:
        store.set_business_hours(
            PROVIDER_ID,
            BusinessHours(day_of_week=weekday, open_time=time(9, 0), close_time=time(12, 0)),
        )
    store.set_offering(
        Offering(
            provider_id=PROVIDER_ID,
            service_id=SERVICE_ID,
            name="Haircut",
            duration_minutes=duration_minutes,
            price=25.0,
            is_available=is_available,
        )
    )
    return store


def _booked(store, start_hour, start_minute, end_hour, end_minute, status="Requested", day=MONDAY):
    return store.add_appointment(
        Appointment(
            provider_id=PROVIDER_ID,
            service_id=SERVICE_ID,
            customer_id="customer_1",
            start_time=datetime.combine(day, time(start_hour, start_minute)),
            end_time=datetime.combine(day, time(end_hour, end_minute)),
            status=status,
        )
    )


def _monday_at(hour, minute=0):
    return datetime.combine(MONDAY, time(hour, minute))


def _starts(slots):
    return [slot.start.strftime("%H:%M") for slot in slots]


def test_day_of_week_starts_on_sunday():
    assert day_of_week(date(2030, 1, 6)) == 0
    assert day_of_week(MONDAY) == 1
    assert day_of_week(date(2030, 1, 12)) == 6


def test_intervals_touching_at_endpoint_do_not_overlap():
    nine = datetime(2030, 1, 7, 9)
    ten = datetime(2030, 1, 7, 10)
    eleven = datetime(2030, 1, 7, 11)
    assert not intervals_overlap(nine, ten, ten, eleven)
    assert intervals_overlap(nine, eleven, ten, eleven)


def test_open_morning_yields_three_hour_slots():
    slots = get_available_times(_store(), PROVIDER_ID, SERVICE_ID, MONDAY, now=SUNDAY_BEFORE)
    assert _starts(slots) == ["09:00", "10:00", "11:00"]
    assert slots[0].label == "9:00 AM - 10:00 AM"
    assert slots[-1].label == "11:00 AM - 12:00 PM"
    assert slots[-1].end == datetime(2030, 1, 7, 12, 0)


def test_existing_appointment_removes_its_slot():
    store = _store()
    _booked(store, 10, 0, 11, 0)
    slots = get_available_times(store, PROVIDER_ID, SERVICE_ID, MONDAY, now=SUNDAY_BEFORE)
    assert _starts(slots) == ["09:00", "11:00"]


def test_cancelled_appointment_does_not_block():
    store = _store()
    _booked(store, 10, 0, 11, 0, status="Cancelled")
    slots = get_available_times(store, PROVIDER_ID, SERVICE_ID, MONDAY, now=SUNDAY_BEFORE)
    assert _starts(slots) == ["09:00", "10:00", "11:00"]


def test_back_to_back_appointments_leave_neighbours_free():
    store = _store(duration_minutes=30)
    _booked(store, 10, 0, 10, 30)
    slots = get_available_times(store, PROVIDER_ID, SERVICE_ID, MONDAY, now=SUNDAY_BEFORE)
    assert _starts(slots) == ["09:00", "09:30", "10:30", "11:00", "11:30"]


def test_no_partial_slot_past_closing_time():
    slots = get_available_times(_store(duration_minutes=50), PROVIDER_ID, SERVICE_ID, MONDAY, now=SUNDAY_BEFORE)
    assert _starts(slots) == ["09:00", "09:50", "10:40"]
    assert all(slot.end <= datetime(2030, 1, 7, 12, 0) for slot in slots)


def test_duration_longer_than_window_yields_nothing():
    store = _store(duration_minutes=240)
    assert get_available_times(store, PROVIDER_ID, SERVICE_ID, MONDAY, now=SUNDAY_BEFORE) == []
    assert get_available_dates(store, PROVIDER_ID, SERVICE_ID, MONDAY, 14, now=SUNDAY_BEFORE) == []


def test_slots_already_started_today_are_skipped():
    now = datetime(2030, 1, 7, 10, 15)
    slots = get_available_times(_store(), PROVIDER_ID, SERVICE_ID, MONDAY, now=now)
    assert _starts(slots) == ["11:00"]


def test_unavailable_offering_or_closed_day_yields_nothing():
    assert get_available_times(_store(is_available=False), PROVIDER_ID, SERVICE_ID, MONDAY, now=SUNDAY_BEFORE) == []
    tuesday = date(2030, 1, 8)
    assert get_available_times(_store(), PROVIDER_ID, SERVICE_ID, tuesday, now=SUNDAY_BEFORE) == []
    assert get_available_times(_store(), PROVIDER_ID, 999, MONDAY, now=SUNDAY_BEFORE) == []


def test_legacy_appointment_outside_hours_still_conflicts():
    store = _store()
    _booked(store, 8, 30, 9, 30)
    slots = get_available_times(store, PROVIDER_ID, SERVICE_ID, MONDAY, now=SUNDAY_BEFORE)
    assert _starts(slots) == ["10:00", "11:00"]


def test_repeated_queries_return_same_slots():
    store = _store()
    _booked(store, 9, 0, 10, 0)
    first = get_available_times(store, PROVIDER_ID, SERVICE_ID, MONDAY, now=SUNDAY_BEFORE)
    second = get_available_times(store, PROVIDER_ID, SERVICE_ID, MONDAY, now=SUNDAY_BEFORE)
    assert first == second


def test_available_dates_empty_when_closed_all_week():
    store = _store(open_days=())
    assert get_available_dates(store, PROVIDER_ID, SERVICE_ID, MONDAY, 7, now=SUNDAY_BEFORE) == []


def test_available_dates_window_is_inclusive():
    dates = get_available_dates(_store(), PROVIDER_ID, SERVICE_ID, MONDAY, 7, now=SUNDAY_BEFORE)
    assert dates == [MONDAY, date(2030, 1, 14)]


def test_available_dates_skip_fully_booked_and_past_days():
    store = _store()
    _booked(store, 9, 0, 12, 0, day=date(2030, 1, 14))
    now = datetime(2030, 1, 8, 8, 0)
    dates = get_available_dates(store, PROVIDER_ID, SERVICE_ID, date(2030, 1, 6), 15, now=now)
    assert dates == [date(2030, 1, 21)]


def test_available_dates_match_slot_listing():
    store = _store(open_days=(1, 2, 3))
    _booked(store, 9, 0, 12, 0, day=date(2030, 1, 8))
    dates = get_available_dates(store, PROVIDER_ID, SERVICE_ID, MONDAY, 6, now=SUNDAY_BEFORE)
    assert dates == [MONDAY, date(2030, 1, 9)]
    for day in dates:
        assert get_available_times(store, PROVIDER_ID, SERVICE_ID, day, now=SUNDAY_BEFORE)


def test_is_time_available_checks_hours_and_conflicts():
    store = _store()
    _booked(store, 10, 0, 11, 0)

    assert is_time_available(store, PROVIDER_ID, SERVICE_ID, _monday_at(9), _monday_at(10))
    assert is_time_available(store, PROVIDER_ID, SERVICE_ID, _monday_at(11), _monday_at(12))
    assert not is_time_available(store, PROVIDER_ID, SERVICE_ID, _monday_at(9, 30), _monday_at(10, 30))
    assert not is_time_available(store, PROVIDER_ID, SERVICE_ID, _monday_at(11, 30), _monday_at(12, 30))
    assert not is_time_available(store, PROVIDER_ID, SERVICE_ID, _monday_at(8), _monday_at(9))
    assert not is_time_available(store, PROVIDER_ID, SERVICE_ID, _monday_at(11), _monday_at(11))


def test_is_time_available_false_for_closed_day_or_unavailable_offering():
    tuesday_nine = datetime(2030, 1, 8, 9, 0)
    tuesday_ten = datetime(2030, 1, 8, 10, 0)
    assert not is_time_available(_store(), PROVIDER_ID, SERVICE_ID, tuesday_nine, tuesday_ten)

    monday_nine = datetime(2030, 1, 7, 9, 0)
    monday_ten = datetime(2030, 1, 7, 10, 0)
    assert not is_time_available(_store(is_available=False), PROVIDER_ID, SERVICE_ID, monday_nine, monday_ten)


def test_every_generated_slot_passes_the_booking_check():
    store = _store(duration_minutes=45)
    _booked(store, 9, 45, 10, 30)
    for slot in get_available_times(store, PROVIDER_ID, SERVICE_ID, MONDAY, now=SUNDAY_BEFORE):
        assert is_time_available(store, PROVIDER_ID, SERVICE_ID, slot.start, slot.end)


def test_slot_label_formats_noon_and_midnight():
    assert format_slot_label(datetime(2030, 1, 7, 0, 0), datetime(2030, 1, 7, 0, 30)) == "12:00 AM - 12:30 AM"
    assert format_slot_label(datetime(2030, 1, 7, 12, 0), datetime(2030, 1, 7, 13, 15)) == "12:00 PM - 1:15 PM"


def test_every_slot_spans_exactly_the_service_duration():
    for duration in (45, 50):
        store = _store(duration_minutes=duration)
        _booked(store, 10, 0, 10, 20)
        slots = get_available_times(store, PROVIDER_ID, SERVICE_ID, MONDAY, now=SUNDAY_BEFORE)
        assert slots
        assert all(slot.end - slot.start == timedelta(minutes=duration) for slot in slots)
