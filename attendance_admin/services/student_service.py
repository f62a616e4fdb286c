import logging
from datetime import date
from typing import List, Optional, Tuple

from ..db.db_client import AsyncPostgresClient, DuplicateRecordError
from ..models.db_models import Student, NewStudent, Strand, MAX_ROW_ID, VALID_STRANDS
from ..modules.csv_tools import STUDENT_EXPORT_COLUMNS, to_csv
from ..modules.validators import validate_email, validate_student_id
from .errors import ConflictError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)


class StudentService:
    """
    Service layer for student records: listing, creation, deletion and CSV export.
    Bulk CSV import lives in ImportService.
    """
    def __init__(self, db_client: AsyncPostgresClient):
        self.db_client = db_client

    async def list_students(self) -> List[Student]:
        return await self.db_client.get_students()

    async def create_student(self, student_id: Optional[str], first_name: Optional[str], last_name: Optional[str],
                             strand: Optional[str], year_level: Optional[str], section: Optional[str],
                             email: Optional[str] = None, phone: Optional[str] = None) -> int:
        """Validates and inserts a student, returning the generated numeric id."""
        if not all([student_id, first_name, last_name, strand, year_level, section]):
            raise ValidationError("Student ID, name, strand, year level, and section are required")
        if not validate_student_id(student_id):
            raise ValidationError("Invalid student ID format")
        if email and not validate_email(email):
            raise ValidationError("Invalid email format")
        if strand not in VALID_STRANDS:
            raise ValidationError(f"Invalid strand. Must be one of: {', '.join(VALID_STRANDS)}")

        new_student = NewStudent(
            student_id=student_id, first_name=first_name, last_name=last_name,
            strand=Strand(strand), year_level=year_level, section=section,
            email=email or None, phone=phone or None
        )
        try:
            new_id = await self.db_client.add_student(new_student)
        except DuplicateRecordError:
            logger.warning(f"Student ID '{student_id}' already exists.")
            raise ConflictError("Student ID already exists")

        logger.info(f"Student '{student_id}' added with id {new_id}.")
        return new_id

    async def delete_student(self, raw_id: str) -> None:
        """Deletes one student and everything that references it."""
        try:
            student_pk = int(raw_id)
        except (TypeError, ValueError):
            raise ValidationError("Invalid student ID")

        # The INTEGER key column only holds 1..MAX_ROW_ID.
        if not 1 <= student_pk <= MAX_ROW_ID:
            raise NotFoundError("Student not found")

        student = await self.db_client.get_student(student_pk)
        if student is None:
            raise NotFoundError("Student not found")

        await self.db_client.delete_student(student_pk)
        logger.info(f"Student {student_pk} ('{student.student_id}') deleted with its attendance, QR and face data.")

    async def clear_students(self) -> int:
        deleted = await self.db_client.clear_students()
        logger.warning(f"All students cleared ({deleted} rows).")
        return deleted

    async def export_students(self, today: Optional[date] = None) -> Tuple[str, str]:
        """Returns (filename, csv_text) for every student under the canonical header set."""
        students = await self.db_client.get_students()
        rows = []
        for student in students:
            row = {}
            for header, attribute in STUDENT_EXPORT_COLUMNS.items():
                value = getattr(student, attribute)
                row[header] = value.value if isinstance(value, Strand) else value
            rows.append(row)

        filename = f"students-{(today or date.today()).isoformat()}.csv"
        return filename, to_csv(rows, list(STUDENT_EXPORT_COLUMNS.keys()))
