import re
from datetime import time
from typing import Dict, Iterable, Optional, Union

from ..models.db_models import AttendanceStatus

EMAIL_REGEX = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")
STUDENT_ID_REGEX = re.compile(r"[A-Za-z0-9-]+")

STUDENT_ID_MIN_LENGTH = 5
STUDENT_ID_MAX_LENGTH = 20


def validate_email(email: Optional[str]) -> bool:
    """Basic local@domain.tld shape check."""
    if not email:
        return False
    # fullmatch, so a trailing newline cannot slip past the pattern
    return EMAIL_REGEX.fullmatch(email) is not None


def validate_student_id(student_id: Optional[str]) -> bool:
    """Letters, digits and hyphens only, 5 to 20 characters long."""
    if not student_id:
        return False
    if not STUDENT_ID_MIN_LENGTH <= len(student_id) <= STUDENT_ID_MAX_LENGTH:
        return False
    return STUDENT_ID_REGEX.fullmatch(student_id) is not None


def parse_clock(value: Union[str, time]) -> time:
    """Parses 'HH:MM' or 'HH:MM:SS' into a time object."""
    if isinstance(value, time):
        return value
    parts = [int(part) for part in value.strip().split(":")]
    if len(parts) < 2 or len(parts) > 3:
        raise ValueError(f"Invalid time '{value}'. Expected HH:MM or HH:MM:SS.")
    return time(*parts)


def determine_attendance_status(time_in: Optional[Union[str, time]], late_threshold: str = "08:30") -> AttendanceStatus:
    """
    Derives the status of an attendance row from its time-in.
    No time-in means Absent; arriving after the threshold minute means Late.
    """
    if not time_in:
        return AttendanceStatus.ABSENT

    arrival = parse_clock(time_in)
    threshold = parse_clock(late_threshold)
    # Compared at minute precision, seconds are ignored.
    if arrival.hour * 60 + arrival.minute > threshold.hour * 60 + threshold.minute:
        return AttendanceStatus.LATE
    return AttendanceStatus.PRESENT


def calculate_attendance_stats(statuses: Iterable[Union[str, AttendanceStatus]]) -> Dict[str, int]:
    """Counts and rounded percentages of Present/Late/Absent rows."""
    values = [AttendanceStatus(status) for status in statuses]
    total = len(values)
    present = values.count(AttendanceStatus.PRESENT)
    late = values.count(AttendanceStatus.LATE)
    absent = values.count(AttendanceStatus.ABSENT)

    def percentage(count: int) -> int:
        # Half rounds up, like the dashboard widgets expect.
        return int(count * 100 / total + 0.5) if total > 0 else 0

    return {
        "total": total,
        "present": present,
        "late": late,
        "absent": absent,
        "present_percentage": percentage(present),
        "late_percentage": percentage(late),
        "absent_percentage": percentage(absent),
    }
