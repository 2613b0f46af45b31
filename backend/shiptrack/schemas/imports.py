import datetime as dt
from typing import Any
from pydantic import Field

from shiptrack.schemas.base import CamelModel

class ImportRunOut(CamelModel):
    id: int
    file_name: str
    total_records: int
    success_records: int
    error_records: int
    uploaded_by: int
    status: str
    created_at: dt.datetime
    updated_at: dt.datetime

class ImportRowErrorOut(CamelModel):
    id: int
    import_run_id: int = Field(serialization_alias="bulkImportId")
    row_number: int
    error_message: str
    row_data: dict[str, Any]
    created_at: dt.datetime
