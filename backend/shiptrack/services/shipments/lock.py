"""Edit/delete lock for shipments.

A shipment is locked once its ``shipped_at`` lies in the past. The state is
derived from the clock at the moment of the check and is never stored, so a
record can become locked without any write to it.
"""

import datetime as dt
from typing import Literal

from shiptrack.utils.datetime import as_utc, utcnow

LockAction = Literal["edit", "delete"]

_LOCK_MESSAGES: dict[str, str] = {
    "edit": "Shipped shipments can no longer be edited",
    "delete": "Shipped shipments can no longer be deleted",
}


class ShipmentLocked(Exception):
    def __init__(self, action: LockAction):
        self.action = action
        super().__init__(lock_message(action))


def is_shipment_locked(shipped_at: dt.datetime | None, now: dt.datetime | None = None) -> bool:
    if shipped_at is None:
        return False
    return as_utc(shipped_at) < as_utc(now or utcnow())


def lock_message(action: LockAction) -> str:
    return _LOCK_MESSAGES[action]


def ensure_unlocked(shipment, action: LockAction, now: dt.datetime | None = None) -> None:
    if is_shipment_locked(shipment.shipped_at, now=now):
        raise ShipmentLocked(action)
