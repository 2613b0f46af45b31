import datetime as dt

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from shiptrack.core.deps import get_db, get_user_context
from shiptrack.schemas.shipments import ShipmentOut
from shiptrack.services.access import UserContext
from shiptrack.services.shipments.query import recent_shipments

router = APIRouter()


def _department_filter(raw: str | None, name: str) -> int | None:
    if raw is None or raw == "" or raw == "all":
        return None
    try:
        return int(raw)
    except ValueError:
        raise HTTPException(status_code=422, detail=f"{name} must be an integer or 'all'")


@router.get("/recent-shipments", response_model=list[ShipmentOut])
def get_recent_shipments(
    start_date: dt.date | None = Query(None, alias="startDate"),
    end_date: dt.date | None = Query(None, alias="endDate"),
    department_id: str | None = Query(None, alias="departmentId"),
    destination_department_id: str | None = Query(None, alias="destinationDepartmentId"),
    db: Session = Depends(get_db),
    ctx: UserContext = Depends(get_user_context),
):
    return recent_shipments(
        db,
        ctx,
        start_date=start_date,
        end_date=end_date,
        department_id=_department_filter(department_id, "departmentId"),
        destination_department_id=_department_filter(destination_department_id, "destinationDepartmentId"),
    )
