from datetime import date, datetime, time, timedelta
from threading import Lock
from typing import Dict, List, Optional, Tuple

from booking.models import Appointment, BusinessHours, Offering, TimeRange
from booking.services.availability import intervals_overlap
from booking.services.errors import SlotConstraintViolation


class InMemoryScheduleStore:
    """
    Single-process implementation of the scheduling store contract.

    The overlap check in ``insert_appointment`` runs under the store lock,
    which stands in for the SQLite trigger when everything lives in one
    process (tests, demos).
    """

    def __init__(self) -> None:
        self._lock = Lock()
        self._hours: Dict[Tuple[int, int], BusinessHours] = {}
        self._offerings: Dict[Tuple[int, int], Offering] = {}
        self._appointments: List[Appointment] = []
        self._next_id = 1

    def set_business_hours(self, provider_id: int, hours: BusinessHours) -> None:
        with self._lock:
            self._hours[(provider_id, hours.day_of_week)] = hours

    def set_offering(self, offering: Offering) -> None:
        with self._lock:
            self._offerings[(offering.provider_id, offering.service_id)] = offering

    def add_appointment(self, appointment: Appointment) -> Appointment:
        """Seeds an appointment without the overlap check (legacy data)."""
        with self._lock:
            stored = appointment.model_copy(update={"id": self._next_id})
            self._next_id += 1
            self._appointments.append(stored)
            return stored

    def list_appointments(self) -> List[Appointment]:
        with self._lock:
            return list(self._appointments)

    def get_offering(self, provider_id: int, service_id: int) -> Optional[Offering]:
        with self._lock:
            return self._offerings.get((provider_id, service_id))

    def get_open_hours(self, provider_id: int, day_of_week: int) -> Optional[BusinessHours]:
        with self._lock:
            hours = self._hours.get((provider_id, day_of_week))
        if hours is None or not hours.is_open:
            return None
        return hours

    def list_non_cancelled(self, provider_id: int, service_id: int, day: date) -> List[TimeRange]:
        day_start = datetime.combine(day, time.min)
        day_end = day_start + timedelta(days=1)
        with self._lock:
            rows = [
                TimeRange(start=appt.start_time, end=appt.end_time)
                for appt in self._appointments
                if appt.provider_id == provider_id
                and appt.service_id == service_id
                and appt.status != "Cancelled"
                and intervals_overlap(appt.start_time, appt.end_time, day_start, day_end)
            ]
        rows.sort(key=lambda r: r.start)
        return rows

    def insert_appointment(self, appointment: Appointment) -> Appointment:
        with self._lock:
            if appointment.status != "Cancelled":
                for existing in self._appointments:
                    if (
                        existing.provider_id == appointment.provider_id
                        and existing.service_id == appointment.service_id
                        and existing.status != "Cancelled"
                        and intervals_overlap(
                            appointment.start_time, appointment.end_time, existing.start_time, existing.end_time
                        )
                    ):
                        raise SlotConstraintViolation(f"overlaps appointment {existing.id}")
            stored = appointment.model_copy(update={"id": self._next_id})
            self._next_id += 1
            self._appointments.append(stored)
            return stored

    def delete_expired(self, now: datetime) -> int:
        with self._lock:
            kept = [appt for appt in self._appointments if appt.end_time >= now]
            removed = len(self._appointments) - len(kept)
            self._appointments = kept
        return removed
