"""Row validation for shipment imports.

Every decoded row is resolved against departments, items and users and turned
into either a :class:`ShipmentDraft` or a :class:`RowError`. Nothing is
written here: the importer decides afterwards whether the whole batch is
committed.
"""

from __future__ import annotations

import datetime as dt
import re
from dataclasses import dataclass, field
from typing import Mapping, Union

import pandas as pd
from sqlalchemy.orm import Session

from shiptrack.crud.departments import get_department, get_department_by_name
from shiptrack.crud.items import get_item_by_name
from shiptrack.crud.users import get_user_by_name_in_department
from shiptrack.services.access import (
    UserContext,
    can_override_shipment_department,
    is_scoped_to_own_department,
)
from shiptrack.utils.datetime import localize

REQUIRED_COLUMNS = ("item_name", "quantity", "destination_department_name")
TEMPLATE_COLUMNS = (
    "item_name",
    "quantity",
    "destination_department_name",
    "shipment_user_name",
    "shipment_department_name",
    "tracking_number",
    "notes",
    "shipped_at",
)
# header row is row 1, first data row is row 2
FIRST_DATA_ROW = 2
# shipment.quantity is a 32-bit INTEGER
MAX_QUANTITY = 2**31 - 1
_QUANTITY_RE = re.compile(r"^(\d{1,3}(?:,\d{3})+|\d+)(?:\.0+)?$")


@dataclass(frozen=True)
class ShipmentDraft:
    item_id: int
    quantity: int
    destination_department_id: int
    shipment_department_id: int
    shipment_user_id: int | None = None
    tracking_number: str | None = None
    notes: str | None = None
    shipped_at: dt.datetime | None = None


@dataclass(frozen=True)
class RowError:
    row_number: int
    message: str
    row_data: Mapping[str, str] = field(default_factory=dict)


RowResult = Union[ShipmentDraft, RowError]


@dataclass
class ValidationOutcome:
    drafts: list[ShipmentDraft] = field(default_factory=list)
    errors: list[RowError] = field(default_factory=list)


def _text(row: Mapping[str, str], key: str) -> str | None:
    v = row.get(key)
    if v is None:
        return None
    s = str(v).strip()
    return s or None


def parse_quantity(raw: str) -> int | None:
    """Positive integer or None.

    Plain digits with optional thousands separators; spreadsheet integers like
    ``"3.0"`` are accepted. Exponents, underscores and values beyond the
    INTEGER column are rejected.
    """
    m = _QUANTITY_RE.match(raw.strip())
    if m is None:
        return None
    q = int(m.group(1).replace(",", ""))
    return q if 0 < q <= MAX_QUANTITY else None


def parse_shipped_at(raw: str) -> dt.datetime | None:
    try:
        ts = pd.to_datetime(raw.strip())
    except (ValueError, TypeError, OverflowError):
        return None
    if ts is pd.NaT or pd.isna(ts):
        return None
    return localize(ts.to_pydatetime())


def validate_row(db: Session, ctx: UserContext, row: Mapping[str, str], row_number: int) -> RowResult:
    def fail(message: str) -> RowError:
        return RowError(row_number=row_number, message=message, row_data=dict(row))

    item_name = _text(row, "item_name")
    raw_qty = _text(row, "quantity")
    dest_name = _text(row, "destination_department_name")
    if not item_name or not raw_qty or not dest_name:
        return fail("Required fields missing (item_name, quantity, destination_department_name)")

    item = get_item_by_name(
        db,
        item_name,
        department_id=ctx.department_id if is_scoped_to_own_department(ctx.role) else None,
    )
    if item is None:
        return fail(f"Item '{item_name}' not found")

    quantity = parse_quantity(raw_qty)
    if quantity is None:
        return fail("Quantity must be a positive integer")

    destination = get_department_by_name(db, dest_name)
    if destination is None:
        return fail(f"Destination department '{dest_name}' not found")

    source_name = _text(row, "shipment_department_name")
    if source_name:
        if not can_override_shipment_department(ctx.role):
            return fail("Regular users cannot specify a shipment department")
        source = get_department_by_name(db, source_name)
        if source is None:
            return fail(f"Shipment department '{source_name}' not found")
    else:
        source = get_department(db, ctx.department_id)
        if source is None:
            return fail("Uploader's department no longer exists")

    shipment_user_id = None
    recipient_name = _text(row, "shipment_user_name")
    if recipient_name:
        # recipients belong to the receiving side
        recipient = get_user_by_name_in_department(db, recipient_name, destination.id)
        if recipient is None:
            return fail(f"User '{recipient_name}' not found in destination department '{destination.name}'")
        shipment_user_id = recipient.id

    shipped_at = None
    raw_shipped = _text(row, "shipped_at")
    if raw_shipped:
        shipped_at = parse_shipped_at(raw_shipped)
        if shipped_at is None:
            return fail(f"Invalid shipped_at date '{raw_shipped}'")

    return ShipmentDraft(
        item_id=item.id,
        quantity=quantity,
        destination_department_id=destination.id,
        shipment_department_id=source.id,
        shipment_user_id=shipment_user_id,
        tracking_number=_text(row, "tracking_number"),
        notes=_text(row, "notes"),
        shipped_at=shipped_at,
    )


def validate_rows(db: Session, ctx: UserContext, rows: list[Mapping[str, str]]) -> ValidationOutcome:
    out = ValidationOutcome()
    for i, row in enumerate(rows):
        result = validate_row(db, ctx, row, i + FIRST_DATA_ROW)
        if isinstance(result, RowError):
            out.errors.append(result)
        else:
            out.drafts.append(result)
    return out
