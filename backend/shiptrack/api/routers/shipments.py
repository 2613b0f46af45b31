import io

import pandas as pd
from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile
from fastapi.responses import Response
from sqlalchemy.orm import Session
import datetime as dt

from shiptrack.core.config import settings
from shiptrack.core.deps import get_db, get_user_context
from shiptrack.crud.departments import get_department
from shiptrack.crud.items import get_item
from shiptrack.crud.shipments import create_shipment, delete_shipment, update_shipment
from shiptrack.crud.users import get_user
from shiptrack.schemas.imports import ImportRunOut
from shiptrack.schemas.shipments import PaginationOut, ShipmentIn, ShipmentListOut, ShipmentOut
from shiptrack.services.access import UserContext, can_override_shipment_department, is_scoped_to_own_department
from shiptrack.services.etl.decoder import FileTooLarge, ImportFormatError
from shiptrack.services.etl.importer import run_import
from shiptrack.services.etl.validators import TEMPLATE_COLUMNS
from shiptrack.services.shipments.lock import ShipmentLocked, ensure_unlocked
from shiptrack.services.shipments.query import ShipmentFilters, get_visible_shipment, list_shipments

router = APIRouter()


def _check_references(db: Session, ctx: UserContext, data: ShipmentIn, current_item_id: int | None = None):
    item = get_item(db, data.item_id)
    if is_scoped_to_own_department(ctx.role) and data.item_id != current_item_id:
        if not item or item.department_id != ctx.department_id:
            raise HTTPException(status_code=403, detail="Item not found or access denied")
    if not item:
        raise HTTPException(status_code=400, detail=f"Item {data.item_id} not found")

    if data.shipment_department_id != ctx.department_id and not can_override_shipment_department(ctx.role):
        raise HTTPException(status_code=403, detail="Regular users cannot specify a shipment department")
    for dep_id in (data.shipment_department_id, data.destination_department_id):
        if not get_department(db, dep_id):
            raise HTTPException(status_code=400, detail=f"Department {dep_id} not found")
    if data.shipment_user_id is not None and not get_user(db, data.shipment_user_id):
        raise HTTPException(status_code=400, detail=f"User {data.shipment_user_id} not found")


def _get_or_404(db: Session, ctx: UserContext, shipment_id: int):
    s = get_visible_shipment(db, ctx, shipment_id)
    if not s:
        raise HTTPException(status_code=404, detail="Shipment not found or access denied")
    return s


@router.get("", response_model=ShipmentListOut)
def get_shipments(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.PAGE_SIZE_DEFAULT, ge=1, le=settings.PAGE_SIZE_MAX),
    search: str | None = Query(None, max_length=100),
    item_id: int | None = Query(None, alias="itemId"),
    destination: int | None = Query(None),
    source_department_id: int | None = Query(None, alias="sourceDepartmentId"),
    shipped_from: dt.date | None = Query(None, alias="shippedFromDate"),
    shipped_to: dt.date | None = Query(None, alias="shippedToDate"),
    db: Session = Depends(get_db),
    ctx: UserContext = Depends(get_user_context),
):
    filters = ShipmentFilters(
        search=search,
        item_id=item_id,
        destination_department_id=destination,
        source_department_id=source_department_id,
        shipped_from=shipped_from,
        shipped_to=shipped_to,
    )
    result = list_shipments(db, ctx, filters, page=page, limit=limit)
    return ShipmentListOut(
        data=[ShipmentOut.model_validate(s) for s in result.items],
        pagination=PaginationOut(page=result.page, limit=result.limit, total=result.total, total_pages=result.total_pages),
    )


@router.post("", response_model=ShipmentOut, status_code=201)
def post_shipment(data: ShipmentIn, db: Session = Depends(get_db), ctx: UserContext = Depends(get_user_context)):
    _check_references(db, ctx, data)
    s = create_shipment(db, data, ctx.user_id)
    return get_visible_shipment(db, ctx, s.id) or s


@router.post("/bulk", response_model=ImportRunOut)
def upload_shipments(
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    ctx: UserContext = Depends(get_user_context),
):
    if not file.filename:
        raise HTTPException(status_code=400, detail="No file selected")
    content = file.file.read(settings.MAX_UPLOAD_BYTES + 1)
    try:
        if len(content) > settings.MAX_UPLOAD_BYTES:
            raise FileTooLarge(f"File exceeds {settings.MAX_UPLOAD_BYTES} bytes")
        return run_import(db, ctx, file.filename, content)
    except ImportFormatError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/bulk/template")
def download_template(
    format: str = Query("csv", pattern="^(csv|xlsx)$"),
    _ctx: UserContext = Depends(get_user_context),
):
    df = pd.DataFrame(columns=list(TEMPLATE_COLUMNS))
    if format == "csv":
        # BOM so Excel opens the file as UTF-8
        body = df.to_csv(index=False).encode("utf-8-sig")
        media_type = "text/csv"
    else:
        buf = io.BytesIO()
        with pd.ExcelWriter(buf, engine="xlsxwriter") as w:
            df.to_excel(w, index=False, sheet_name="shipments")
        body = buf.getvalue()
        media_type = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    return Response(
        content=body,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="shipments_template.{format}"'},
    )


@router.get("/{shipment_id}", response_model=ShipmentOut)
def get_shipment(shipment_id: int, db: Session = Depends(get_db), ctx: UserContext = Depends(get_user_context)):
    return _get_or_404(db, ctx, shipment_id)


@router.put("/{shipment_id}", response_model=ShipmentOut)
def put_shipment(
    shipment_id: int,
    data: ShipmentIn,
    db: Session = Depends(get_db),
    ctx: UserContext = Depends(get_user_context),
):
    s = _get_or_404(db, ctx, shipment_id)
    try:
        ensure_unlocked(s, "edit")
    except ShipmentLocked as e:
        raise HTTPException(status_code=409, detail=str(e))
    _check_references(db, ctx, data, current_item_id=s.item_id)
    update_shipment(db, s, data, ctx.user_id)
    return get_visible_shipment(db, ctx, s.id) or s


@router.delete("/{shipment_id}")
def delete_shipment_endpoint(shipment_id: int, db: Session = Depends(get_db), ctx: UserContext = Depends(get_user_context)):
    s = _get_or_404(db, ctx, shipment_id)
    try:
        ensure_unlocked(s, "delete")
    except ShipmentLocked as e:
        raise HTTPException(status_code=409, detail=str(e))
    delete_shipment(db, s)
    return {"status": "ok"}
