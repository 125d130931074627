import logging
from typing import Optional

from agenda.services.appointment_store import AppointmentStore

logger = logging.getLogger(__name__)


class SlotAvailabilityChecker:
    """A slot holds exactly one live appointment; there is no capacity count."""

    def __init__(self, store: AppointmentStore):
        self.store = store

    async def is_available(
        self, tenant_id: str, date: str, time: str, exclude_appointment_id: Optional[str] = None
    ) -> bool:
        occupants = self.store.find_live_in_slot(tenant_id, date, time, exclude_id=exclude_appointment_id)
        if occupants:
            logger.info(f"Slot {date} {time} for tenant {tenant_id} is taken by {occupants[0]['id']}")
            return False
        return True
