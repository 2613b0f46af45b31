from sqlalchemy.orm import Session
from shiptrack.db.models.import_run import ImportRun, ImportStatus
from shiptrack.db.models.import_error import ImportRowError
from shiptrack.services.access import UserContext
from shiptrack.services.etl.validators import RowError


class ImportRunFinalized(Exception):
    """Raised when a run that already reached COMPLETED/FAILED is written again."""


def get_import_run(db: Session, import_run_id: int) -> ImportRun | None:
    return db.get(ImportRun, import_run_id)

def create_import_run(db: Session, file_name: str, total_records: int, uploaded_by: int) -> ImportRun:
    run = ImportRun(
        file_name=file_name,
        total_records=total_records,
        success_records=0,
        error_records=0,
        uploaded_by=uploaded_by,
        status=ImportStatus.processing.value,
    )
    db.add(run)
    db.commit()
    db.refresh(run)
    return run

def finish_import_run(db: Session, import_run_id: int, status: ImportStatus, success_records: int, error_records: int) -> ImportRun:
    if status == ImportStatus.processing:
        raise ValueError("finish_import_run needs a terminal status")
    run = db.query(ImportRun).filter(ImportRun.id == import_run_id).one()
    if run.status != ImportStatus.processing.value:
        raise ImportRunFinalized(f"import run {import_run_id} is already {run.status}")
    run.status = status.value
    run.success_records = success_records
    run.error_records = error_records
    db.commit()
    db.refresh(run)
    return run

def list_imports(db: Session, ctx: UserContext):
    q = db.query(ImportRun)
    if not ctx.is_management:
        q = q.filter(ImportRun.uploaded_by == ctx.user_id)
    return q.order_by(ImportRun.created_at.desc(), ImportRun.id.desc()).all()

def list_import_errors(db: Session, import_run_id: int):
    return (
        db.query(ImportRowError)
        .filter(ImportRowError.import_run_id == import_run_id)
        .order_by(ImportRowError.row_number, ImportRowError.id)
        .all()
    )

def add_import_errors(db: Session, import_run_id: int, errors: list[RowError]):
    db.add_all(
        ImportRowError(
            import_run_id=import_run_id,
            row_number=er.row_number,
            error_message=er.message,
            row_data=dict(er.row_data),
        )
        for er in errors
    )
    db.commit()
