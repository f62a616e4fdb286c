import logging
from datetime import date
from typing import Dict, List, Optional, Tuple

from ..db.db_client import AsyncPostgresClient, DuplicateRecordError
from ..models.db_models import AttendanceEntry, AttendanceStatus, MAX_ROW_ID, NewAttendanceEntry, User
from ..modules.validators import calculate_attendance_stats, determine_attendance_status, parse_clock
from .errors import ConflictError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)


class AttendanceService:
    """
    Daily attendance marking. One row per student per day.
    """
    def __init__(self, db_client: AsyncPostgresClient, late_threshold: str = "08:30"):
        self.db_client = db_client
        self.late_threshold = late_threshold

    async def record_attendance(self, student_pk: int, recorded_by: User, day: Optional[date] = None,
                                time_in: Optional[str] = None, time_out: Optional[str] = None,
                                status: Optional[str] = None, remarks: Optional[str] = None) -> Tuple[int, AttendanceStatus]:
        """
        Stores one attendance row. Without an explicit status it is derived
        from time_in against the late threshold.
        """
        try:
            parsed_in = parse_clock(time_in) if time_in else None
            parsed_out = parse_clock(time_out) if time_out else None
        except ValueError:
            raise ValidationError("Invalid time format. Use HH:MM or HH:MM:SS")

        if status:
            try:
                final_status = AttendanceStatus(status)
            except ValueError:
                valid = ", ".join(s.value for s in AttendanceStatus)
                raise ValidationError(f"Invalid status. Must be one of: {valid}")
        else:
            final_status = determine_attendance_status(parsed_in, self.late_threshold)

        student = None
        if 1 <= student_pk <= MAX_ROW_ID:
            student = await self.db_client.get_student(student_pk)
        if student is None:
            raise NotFoundError("Student not found")

        entry = NewAttendanceEntry(
            student_id=student_pk, date=day or date.today(), time_in=parsed_in, time_out=parsed_out,
            status=final_status, remarks=remarks or None, created_by=recorded_by.id
        )
        try:
            new_id = await self.db_client.add_attendance(entry)
        except DuplicateRecordError:
            raise ConflictError("Attendance for this student on this date already exists")

        logger.info(f"Attendance {final_status.value} recorded for student {student_pk} on {entry.date} by '{recorded_by.username}'.")
        return new_id, final_status

    async def get_attendance_for_date(self, day: Optional[date] = None) -> Tuple[List[AttendanceEntry], Dict[str, int]]:
        entries = await self.db_client.get_attendance_by_date(day or date.today())
        return entries, calculate_attendance_stats(entry.status for entry in entries)
