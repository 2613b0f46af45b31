"""Role-scoped shipment queries for the list and dashboard views.

Filters are built as a flat list of clauses that are ANDed together. The
shipped/unshipped date predicate and the free-text predicate are each a single
OR group inside that list, so equality filters always constrain the whole
group rather than one branch of it.
"""

from __future__ import annotations

import datetime as dt
import math
from dataclasses import dataclass

from sqlalchemy import and_, func, or_
from sqlalchemy.orm import Session, joinedload

from shiptrack.core.config import settings
from shiptrack.db.models.item import Item
from shiptrack.db.models.shipment import Shipment
from shiptrack.services.access import UserContext, can_filter_by_department, is_scoped_to_own_department
from shiptrack.utils.datetime import day_bounds, today_local


@dataclass
class ShipmentFilters:
    search: str | None = None
    item_id: int | None = None
    destination_department_id: int | None = None
    source_department_id: int | None = None
    shipped_from: dt.date | None = None
    shipped_to: dt.date | None = None


@dataclass
class ShipmentPage:
    items: list[Shipment]
    page: int
    limit: int
    total: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0


def clamp_page(page: int | None, limit: int | None) -> tuple[int, int]:
    page = max(1, page or 1)
    limit = limit or settings.PAGE_SIZE_DEFAULT
    return page, min(max(1, limit), settings.PAGE_SIZE_MAX)


def visibility_clause(ctx: UserContext):
    if is_scoped_to_own_department(ctx.role):
        return Shipment.shipment_department_id == ctx.department_id
    return None


def shipped_or_registered_between(start: dt.datetime | None, end: dt.datetime | None):
    """Shipped rows match on ``shipped_at``; unshipped rows on ``created_at``."""

    def _bounds(col):
        conds = []
        if start is not None:
            conds.append(col >= start)
        if end is not None:
            conds.append(col <= end)
        return conds

    shipped = and_(Shipment.shipped_at.isnot(None), *_bounds(Shipment.shipped_at))
    unshipped = and_(Shipment.shipped_at.is_(None), *_bounds(Shipment.created_at))
    return or_(shipped, unshipped)


def text_search_clause(term: str):
    like = f"%{term.strip()}%"
    return or_(
        Shipment.tracking_number.ilike(like),
        Shipment.notes.ilike(like),
        Shipment.item.has(Item.name.ilike(like)),
    )


def build_shipment_filters(ctx: UserContext, filters: ShipmentFilters) -> list:
    clauses = []
    scope = visibility_clause(ctx)
    if scope is not None:
        clauses.append(scope)

    if filters.item_id is not None:
        clauses.append(Shipment.item_id == filters.item_id)
    if filters.destination_department_id is not None:
        clauses.append(Shipment.destination_department_id == filters.destination_department_id)
    if filters.source_department_id is not None and can_filter_by_department(ctx.role):
        clauses.append(Shipment.shipment_department_id == filters.source_department_id)

    if filters.shipped_from is not None or filters.shipped_to is not None:
        start = day_bounds(filters.shipped_from, filters.shipped_from)[0] if filters.shipped_from else None
        end = day_bounds(filters.shipped_to, filters.shipped_to)[1] if filters.shipped_to else None
        clauses.append(shipped_or_registered_between(start, end))

    if filters.search and filters.search.strip():
        clauses.append(text_search_clause(filters.search))
    return clauses


def _ordered(q):
    return q.order_by(Shipment.shipped_at.desc().nullslast(), Shipment.created_at.desc())


def _with_relations(q):
    return q.options(
        joinedload(Shipment.item),
        joinedload(Shipment.sender),
        joinedload(Shipment.shipment_department),
        joinedload(Shipment.destination_department),
        joinedload(Shipment.shipment_user),
    )


def list_shipments(
    db: Session,
    ctx: UserContext,
    filters: ShipmentFilters,
    page: int | None = None,
    limit: int | None = None,
) -> ShipmentPage:
    page, limit = clamp_page(page, limit)
    clauses = build_shipment_filters(ctx, filters)

    total = db.query(func.count(Shipment.id)).filter(*clauses).scalar() or 0
    items = (
        _ordered(_with_relations(db.query(Shipment).filter(*clauses)))
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return ShipmentPage(items=items, page=page, limit=limit, total=total)


def recent_window(
    start_date: dt.date | None = None,
    end_date: dt.date | None = None,
    today: dt.date | None = None,
) -> tuple[dt.datetime, dt.datetime]:
    """Dashboard window, defaulting to today +/- RECENT_WINDOW_DAYS (whole days)."""
    today = today or today_local()
    span = dt.timedelta(days=settings.RECENT_WINDOW_DAYS)
    return day_bounds(start_date or today - span, end_date or today + span)


def recent_shipments(
    db: Session,
    ctx: UserContext,
    start_date: dt.date | None = None,
    end_date: dt.date | None = None,
    department_id: int | None = None,
    destination_department_id: int | None = None,
    today: dt.date | None = None,
) -> list[Shipment]:
    start, end = recent_window(start_date, end_date, today)
    clauses = [shipped_or_registered_between(start, end)]

    scope = visibility_clause(ctx)
    if scope is not None:
        # department users always see their own department only
        clauses.append(scope)
    elif can_filter_by_department(ctx.role):
        if department_id is not None:
            clauses.append(Shipment.shipment_department_id == department_id)
        if destination_department_id is not None:
            clauses.append(Shipment.destination_department_id == destination_department_id)

    return _ordered(_with_relations(db.query(Shipment).filter(*clauses))).all()


def get_visible_shipment(db: Session, ctx: UserContext, shipment_id: int) -> Shipment | None:
    q = db.query(Shipment).filter(Shipment.id == shipment_id)
    scope = visibility_clause(ctx)
    if scope is not None:
        q = q.filter(scope)
    return _with_relations(q).one_or_none()
