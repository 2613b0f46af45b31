from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from shiptrack.core.deps import get_db, get_user_context
from shiptrack.crud.imports import get_import_run, list_imports, list_import_errors
from shiptrack.schemas.imports import ImportRunOut, ImportRowErrorOut
from shiptrack.services.access import UserContext, can_read_import_errors

router = APIRouter()


def _get_readable_run(db: Session, ctx: UserContext, import_run_id: int):
    run = get_import_run(db, import_run_id)
    if not run:
        raise HTTPException(status_code=404, detail="Bulk import not found")
    if not can_read_import_errors(ctx, run.uploaded_by):
        raise HTTPException(status_code=403, detail="Access denied")
    return run


@router.get("", response_model=list[ImportRunOut])
def get_imports(db: Session = Depends(get_db), ctx: UserContext = Depends(get_user_context)):
    return list_imports(db, ctx)


@router.get("/{import_run_id}", response_model=ImportRunOut)
def get_import(import_run_id: int, db: Session = Depends(get_db), ctx: UserContext = Depends(get_user_context)):
    return _get_readable_run(db, ctx, import_run_id)


@router.get("/{import_run_id}/errors", response_model=list[ImportRowErrorOut])
def get_errors(import_run_id: int, db: Session = Depends(get_db), ctx: UserContext = Depends(get_user_context)):
    _get_readable_run(db, ctx, import_run_id)
    return list_import_errors(db, import_run_id)
