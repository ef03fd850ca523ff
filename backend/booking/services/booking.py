"""
Booking Transaction

Creates appointments and moves them through their status lifecycle:

    (none) -> Requested -> Confirmed | Cancelled

The availability check and the insert are two separate store calls. A
competing booking that commits in between is rejected by the store's
overlap constraint and reported as a slot conflict, never as a generic
failure. Nothing is retried here; callers re-fetch slots and resubmit.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Set

from booking.models import Appointment, AppointmentView
from booking.services.availability import is_time_available, to_local_naive
from booking.services.errors import (
    ConflictError,
    InThePastError,
    NotFoundError,
    PermissionDeniedError,
    SchedulingValidationError,
    ServiceUnavailableError,
    SlotConflictError,
    SlotConstraintViolation,
)

logger = logging.getLogger(__name__)

APPOINTMENT_TRANSITIONS: Dict[str, Set[str]] = {
    "Requested": {"Confirmed", "Cancelled"},
}


@dataclass
class BookingService:
    store: Any
    clock: Callable[[], datetime] = datetime.now

    def create_appointment(
        self,
        *,
        provider_id: int,
        service_id: int,
        customer_id: str,
        start_time: datetime,
        notes: str = "",
    ) -> Appointment:
        offering = self.store.get_offering(provider_id, service_id)
        if offering is None:
            raise NotFoundError("Service not found")
        if not offering.is_available:
            raise ServiceUnavailableError("This service is currently unavailable")

        start = to_local_naive(start_time).replace(microsecond=0)
        end = start + timedelta(minutes=offering.duration_minutes)

        if start <= self.clock():
            raise InThePastError("Cannot book appointments in the past")

        if not is_time_available(self.store, provider_id, service_id, start, end):
            logger.info(
                "Rejected booking provider=%s service=%s start=%s: slot not available",
                provider_id,
                service_id,
                start.isoformat(),
            )
            raise SlotConflictError("The requested time slot is not available. Please choose a different time.")

        appointment = Appointment(
            provider_id=provider_id,
            service_id=service_id,
            customer_id=customer_id,
            start_time=start,
            end_time=end,
            status="Requested",
            notes=notes,
        )
        try:
            created = self.store.insert_appointment(appointment)
        except SlotConstraintViolation:
            logger.warning(
                "Slot provider=%s service=%s start=%s was taken between check and commit",
                provider_id,
                service_id,
                start.isoformat(),
            )
            raise SlotConflictError("The requested time slot is no longer available. Please try again.") from None

        logger.info(
            "Appointment %s requested by %s for provider=%s service=%s at %s",
            created.id,
            customer_id,
            provider_id,
            service_id,
            start.isoformat(),
        )
        return created

    def update_status(self, *, appointment_id: int, actor_user_id: str, status: str) -> AppointmentView:
        appointment = self._require_appointment(appointment_id)
        provider = self.store.get_provider(appointment.provider_id)

        current_status = appointment.status
        if status not in APPOINTMENT_TRANSITIONS.get(current_status, set()):
            raise SchedulingValidationError(f"Invalid status transition: {current_status} -> {status}")

        if status == "Confirmed" and actor_user_id != provider.owner_id:
            raise PermissionDeniedError("Only the provider can confirm an appointment")
        if status == "Cancelled" and actor_user_id not in {provider.owner_id, appointment.customer_id}:
            raise PermissionDeniedError("Only the provider or the customer can cancel an appointment")

        if not self.store.set_appointment_status(appointment_id, current_status, status):
            raise ConflictError("Appointment status changed concurrently; reload and retry")

        logger.info("Appointment %s: %s -> %s by %s", appointment_id, current_status, status, actor_user_id)
        return self.store.get_appointment_view(appointment_id)

    def delete_appointment(self, *, appointment_id: int, actor_user_id: str) -> None:
        appointment = self._require_appointment(appointment_id)
        provider = self.store.get_provider(appointment.provider_id)
        if actor_user_id not in {provider.owner_id, appointment.customer_id}:
            raise PermissionDeniedError("Only the provider or the customer can delete an appointment")
        if not self.store.delete_appointment(appointment_id):
            raise NotFoundError("Appointment not found")
        logger.info("Appointment %s deleted by %s", appointment_id, actor_user_id)

    def list_appointments(self, *, user_id: str, role: str = "customer") -> List[AppointmentView]:
        return self.store.list_appointment_views(user_id=user_id, role=role)

    def _require_appointment(self, appointment_id: int) -> Appointment:
        appointment = self.store.get_appointment(appointment_id)
        if appointment is None:
            raise NotFoundError("Appointment not found")
        return appointment
