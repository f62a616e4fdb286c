import logging
from typing import List, Optional

from pydantic import BaseModel, Field

from ..db.db_client import AsyncPostgresClient, DuplicateRecordError
from ..models.db_models import NewStudent, Strand, VALID_STRANDS
from ..modules.csv_tools import StudentImportRow, parse_csv, resolve_student_row
from ..modules.validators import validate_email, validate_student_id
from .errors import ValidationError

logger = logging.getLogger(__name__)

MAX_REPORTED_ERRORS = 10


class RowRejected(Exception):
    """A single CSV row failed validation; the batch goes on."""
    pass


class ImportResult(BaseModel):
    """Outcome of one bulk import. Row-level failures are data, not request errors."""
    imported_count: int = 0
    total_rows: int = 0
    errors: List[str] = Field(default_factory=list, description="At most MAX_REPORTED_ERRORS messages.")
    has_more_errors: bool = False

    @property
    def message(self) -> str:
        return f"Import completed. {self.imported_count} students imported successfully."


def _validate_row(row: StudentImportRow, row_number: int) -> NewStudent:
    """Turns a resolved row into an insertable student or raises RowRejected."""
    required = [row.student_id, row.first_name, row.last_name, row.strand, row.year_level, row.section]
    if not all(required):
        raise RowRejected(f"Row {row_number}: Missing required fields")

    if not validate_student_id(row.student_id):
        raise RowRejected(f"Row {row_number}: Invalid student ID format")

    strand = row.strand.upper()
    if strand not in VALID_STRANDS:
        raise RowRejected(f"Row {row_number}: Invalid strand '{strand}'. Must be one of: {', '.join(VALID_STRANDS)}")

    if row.email and not validate_email(row.email):
        raise RowRejected(f"Row {row_number}: Invalid email format")

    return NewStudent(
        student_id=row.student_id, first_name=row.first_name, last_name=row.last_name,
        strand=Strand(strand), year_level=row.year_level, section=row.section,
        email=row.email or None, phone=row.phone or None
    )


class ImportService:
    """
    Bulk student import from CSV text.

    Best effort and not transactional: every row is validated and inserted on
    its own, rows that already went in stay in even if later rows fail.
    """
    def __init__(self, db_client: AsyncPostgresClient):
        self.db_client = db_client

    async def import_students(self, csv_content: Optional[str]) -> ImportResult:
        if not csv_content:
            raise ValidationError("CSV content is required")

        rows = parse_csv(csv_content)
        if not rows:
            raise ValidationError("No valid data found in CSV")

        logger.info(f"Student import started with {len(rows)} rows.")
        imported = 0
        errors: List[str] = []

        # Row 1 is the header line, so data rows are numbered from 2.
        for row_number, raw_row in enumerate(rows, start=2):
            resolved = resolve_student_row(raw_row)
            try:
                new_student = _validate_row(resolved, row_number)
                await self.db_client.add_student(new_student)
                imported += 1
            except RowRejected as e:
                errors.append(str(e))
            except DuplicateRecordError:
                errors.append(f"Row {row_number}: Student ID '{resolved.student_id}' already exists")
            except Exception as e:
                logger.error(f"Database error while importing row {row_number}.", exc_info=True)
                errors.append(f"Row {row_number}: Database error - {e}")

        logger.info(f"Student import finished: {imported}/{len(rows)} imported, {len(errors)} errors.")
        return ImportResult(
            imported_count=imported,
            total_rows=len(rows),
            errors=errors[:MAX_REPORTED_ERRORS],
            has_more_errors=len(errors) > MAX_REPORTED_ERRORS,
        )
