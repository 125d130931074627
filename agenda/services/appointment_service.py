import logging
from typing import Any, Dict, List, Optional

from agenda.core.exceptions import Conflict, InvalidTransition, NotFound, ValidationError
from agenda.models.appointment import AppointmentStatus
from agenda.services.appointment_store import AppointmentStore
from agenda.services.availability import SlotAvailabilityChecker
from agenda.services.mirror_sync import MirrorSynchronizer
from agenda.services.normalization import normalize_date, normalize_email, normalize_slot

logger = logging.getLogger(__name__)

PENDING = AppointmentStatus.PENDING.value
CONFIRMED = AppointmentStatus.CONFIRMED.value
CANCELLED = AppointmentStatus.CANCELLED.value


def _missing(fields: Dict[str, Optional[str]]) -> List[str]:
    return [name for name, value in fields.items() if value is None or not str(value).strip()]


class AppointmentService:
    """
    Appointment lifecycle for a single, already-authorized tenant.

    pending -> confirmed, pending|confirmed -> cancelled; reschedule moves a
    live appointment to another slot without touching its status. Every
    successful write is then reflected into the tenant's mirror, whose
    failures are never propagated.
    """
    def __init__(
        self,
        store: AppointmentStore,
        availability: SlotAvailabilityChecker,
        mirror: MirrorSynchronizer,
        timezone: str = "UTC",
    ):
        self.store = store
        self.availability = availability
        self.mirror = mirror
        self.timezone = timezone

    async def list_appointments(self, tenant_id: str) -> List[Dict[str, Any]]:
        """Live appointments ordered by date, then slot label."""
        appointments = self.store.list_live(tenant_id)
        logger.debug(f"Found {len(appointments)} live appointment(s) for tenant {tenant_id}")
        return appointments

    async def book(
        self,
        tenant_id: str,
        name: Optional[str],
        email: Optional[str],
        phone: Optional[str],
        date: Optional[str],
        time: Optional[str],
    ) -> Dict[str, Any]:
        missing = _missing({"name": name, "email": email, "phone": phone, "date": date, "time": time})
        if missing:
            raise ValidationError("All fields are required", missing=missing)

        slot_date = normalize_date(date, self.timezone)
        slot_time = normalize_slot(time)

        # 1. Reclaim the slot from cancelled bookings
        self.store.purge_cancelled(tenant_id, slot_date, slot_time)

        # 2. Insert; a live booking already in the slot trips the unique index
        appointment = self.store.insert({
            "tenant_id": tenant_id,
            "customer_name": name.strip(),
            "customer_email": normalize_email(email),
            "customer_phone": phone.strip(),
            "date": slot_date,
            "time": slot_time,
            "status": PENDING,
            "confirmed": False,
        })
        logger.info(f"Appointment {appointment['id']} booked for tenant {tenant_id} at {slot_date} {slot_time}")

        await self._reflect(tenant_id, appointment)
        return appointment

    async def confirm(self, tenant_id: str, appointment_id: str) -> Dict[str, Any]:
        current = self._get(tenant_id, appointment_id)

        if current["status"] == CONFIRMED:
            logger.info(f"Appointment {appointment_id} is already confirmed")
            return current
        if current["status"] == CANCELLED:
            raise InvalidTransition("Cannot confirm a cancelled appointment")

        appointment = self._transition(
            tenant_id, appointment_id, {"status": CONFIRMED, "confirmed": True}, current["status"]
        )
        logger.info(f"Appointment {appointment_id} confirmed for tenant {tenant_id}")

        await self._reflect(tenant_id, appointment)
        return appointment

    async def cancel(self, tenant_id: str, appointment_id: str) -> Dict[str, Any]:
        current = self._get(tenant_id, appointment_id)

        if current["status"] == CANCELLED:
            logger.info(f"Appointment {appointment_id} is already cancelled")
            return current

        appointment = self._transition(
            tenant_id, appointment_id, {"status": CANCELLED, "confirmed": False}, current["status"]
        )
        logger.info(f"Appointment {appointment_id} cancelled for tenant {tenant_id}")

        await self._reflect(tenant_id, appointment)
        return appointment

    async def reschedule(
        self,
        tenant_id: str,
        appointment_id: str,
        new_date: Optional[str],
        new_time: Optional[str],
    ) -> Dict[str, Any]:
        missing = _missing({"newDate": new_date, "newTime": new_time})
        if missing:
            raise ValidationError("Date and time are required", missing=missing)

        current = self._get(tenant_id, appointment_id)
        if current["status"] == CANCELLED:
            raise InvalidTransition("Cannot reschedule a cancelled appointment")

        slot_date = normalize_date(new_date, self.timezone)
        slot_time = normalize_slot(new_time)

        is_free = await self.availability.is_available(
            tenant_id, slot_date, slot_time, exclude_appointment_id=appointment_id
        )
        if not is_free:
            raise Conflict("Slot is not available")

        # Guard only against a concurrent cancel; status is otherwise left alone
        appointment = self.store.update(
            tenant_id, appointment_id, {"date": slot_date, "time": slot_time}, live_only=True
        )
        if not appointment:
            raise Conflict("Appointment was cancelled concurrently")
        logger.info(f"Appointment {appointment_id} rescheduled to {slot_date} {slot_time} for tenant {tenant_id}")

        await self._reflect(tenant_id, appointment)
        return appointment

    def _get(self, tenant_id: str, appointment_id: str) -> Dict[str, Any]:
        appointment = self.store.get(tenant_id, appointment_id)
        if not appointment:
            raise NotFound("Appointment not found")
        return appointment

    def _transition(
        self, tenant_id: str, appointment_id: str, changes: Dict[str, Any], expected_status: str
    ) -> Dict[str, Any]:
        appointment = self.store.update(tenant_id, appointment_id, changes, expected_status=expected_status)
        if not appointment:
            raise Conflict("Appointment was modified concurrently")
        return appointment

    async def _reflect(self, tenant_id: str, appointment: Dict[str, Any]) -> None:
        await self.mirror.reflect(tenant_id, appointment["id"], appointment)
