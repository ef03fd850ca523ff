import logging
import os
import sys
from datetime import datetime, timedelta

sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from booking.models import Appointment
from booking.services.cleanup import AppointmentCleanupSweeper
from booking.services.memory_schedule_store import InMemoryScheduleStore

NOW = datetime(2030, 1, 7, 12, 0)


def _appointment(start, minutes=60):
    return Appointment(
        provider_id=1,
        service_id=10,
        customer_id="customer_1",
        start_time=start,
        end_time=start + timedelta(minutes=minutes),
    )


class _BrokenStore:
    def delete_expired(self, now):
        raise RuntimeError("database is locked")


def test_run_once_removes_only_ended_appointments():
    store = InMemoryScheduleStore()
    store.add_appointment(_appointment(NOW - timedelta(hours=3)))
    store.add_appointment(_appointment(NOW - timedelta(minutes=30)))
    store.add_appointment(_appointment(NOW + timedelta(hours=1)))

    sweeper = AppointmentCleanupSweeper(store, clock=lambda: NOW)
    assert sweeper.run_once() == 1

    remaining = store.list_appointments()
    assert len(remaining) == 2
    assert all(appt.end_time >= NOW for appt in remaining)


def test_run_once_with_nothing_expired_logs_and_returns_zero(caplog):
    store = InMemoryScheduleStore()
    store.add_appointment(_appointment(NOW + timedelta(days=1)))
    sweeper = AppointmentCleanupSweeper(store, clock=lambda: NOW)

    with caplog.at_level(logging.INFO, logger="booking.services.cleanup"):
        assert sweeper.run_once() == 0
    assert "No expired appointments to delete" in caplog.text


def test_run_once_survives_store_errors(caplog):
    sweeper = AppointmentCleanupSweeper(_BrokenStore(), clock=lambda: NOW)
    with caplog.at_level(logging.ERROR, logger="booking.services.cleanup"):
        assert sweeper.run_once() == 0
    assert "An error occurred while cleaning up expired appointments" in caplog.text


def test_disabled_sweeper_does_not_start():
    sweeper = AppointmentCleanupSweeper(InMemoryScheduleStore(), enabled=False)
    sweeper.start()
    assert not sweeper.is_running
    sweeper.shutdown()


def test_start_and_shutdown_are_idempotent():
    sweeper = AppointmentCleanupSweeper(InMemoryScheduleStore(), interval_minutes=60)
    sweeper.start()
    try:
        assert sweeper.is_running
        sweeper.start()
        assert sweeper.is_running
    finally:
        sweeper.shutdown()
    assert not sweeper.is_running
    sweeper.shutdown()
