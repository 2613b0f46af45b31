"""Bulk shipment import.

decode -> ledger (PROCESSING) -> validate -> either record row errors
(FAILED) or commit every draft in one transaction (COMPLETED / FAILED).
A run never partially succeeds.
"""

from __future__ import annotations

import structlog
from sqlalchemy.orm import Session

from shiptrack.core.logging import logger
from shiptrack.crud.imports import add_import_errors, create_import_run, finish_import_run, get_import_run
from shiptrack.crud.shipments import add_shipment
from shiptrack.db.models.import_run import ImportRun, ImportStatus
from shiptrack.services.access import UserContext
from shiptrack.services.etl.decoder import decode_table
from shiptrack.services.etl.validators import FIRST_DATA_ROW, RowError, ShipmentDraft, validate_rows

COMMIT_FAILED_MESSAGE = "The batch could not be saved; no rows were imported"


def commit_drafts(db: Session, ctx: UserContext, drafts: list[ShipmentDraft]) -> bool:
    """Insert all drafts atomically. Returns False (and leaves nothing behind) on failure."""
    try:
        for d in drafts:
            add_shipment(
                db,
                item_id=d.item_id,
                quantity=d.quantity,
                sender_id=ctx.user_id,
                shipment_department_id=d.shipment_department_id,
                destination_department_id=d.destination_department_id,
                shipment_user_id=d.shipment_user_id,
                tracking_number=d.tracking_number,
                notes=d.notes,
                shipped_at=d.shipped_at,
                created_by=ctx.user_id,
                updated_by=ctx.user_id,
            )
        db.commit()
    except Exception as e:
        logger.exception("import_commit_failed", drafts=len(drafts), error=str(e))
        db.rollback()
        return False
    return True


def run_import(db: Session, ctx: UserContext, file_name: str, content: bytes) -> ImportRun:
    # format errors propagate from here, before any run exists
    rows = decode_table(content, file_name)

    run = create_import_run(db, file_name=file_name, total_records=len(rows), uploaded_by=ctx.user_id)
    structlog.contextvars.bind_contextvars(import_run_id=run.id)
    try:
        logger.info("import_started", file_name=file_name, rows=len(rows), user_id=ctx.user_id)

        outcome = validate_rows(db, ctx, rows)
        if outcome.errors:
            add_import_errors(db, run.id, outcome.errors)
            run = finish_import_run(
                db, run.id, ImportStatus.failed, success_records=0, error_records=len(outcome.errors)
            )
        elif commit_drafts(db, ctx, outcome.drafts):
            run = finish_import_run(
                db, run.id, ImportStatus.completed, success_records=len(outcome.drafts), error_records=0
            )
        else:
            # the transaction is all-or-nothing, so every row counts as failed
            add_import_errors(db, run.id, [
                RowError(row_number=i + FIRST_DATA_ROW, message=COMMIT_FAILED_MESSAGE, row_data=row)
                for i, row in enumerate(rows)
            ])
            run = finish_import_run(db, run.id, ImportStatus.failed, success_records=0, error_records=len(rows))

        logger.info(
            "import_finished",
            status=run.status,
            success=run.success_records,
            errors=run.error_records,
        )
        return run
    except Exception as e:
        logger.exception("import_failed", error=str(e))
        db.rollback()
        # leave the ledger terminal even when the pipeline itself broke
        if get_import_run(db, run.id).status == ImportStatus.processing.value:
            finish_import_run(db, run.id, ImportStatus.failed, success_records=0, error_records=len(rows))
        raise
    finally:
        structlog.contextvars.unbind_contextvars("import_run_id")
