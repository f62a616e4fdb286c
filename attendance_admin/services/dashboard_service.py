import logging
from datetime import date
from typing import Any, Dict, Optional

from ..db.db_client import AsyncPostgresClient
from ..models.db_models import AttendanceStatus, VALID_STRANDS

logger = logging.getLogger(__name__)


class DashboardService:
    def __init__(self, db_client: AsyncPostgresClient):
        self.db_client = db_client

    async def get_stats(self, today: Optional[date] = None) -> Dict[str, Any]:
        """Head counts, students per strand and today's attendance tally."""
        total_students = await self.db_client.count_students()
        total_teachers = await self.db_client.count_teachers()

        # Every strand is reported, even with no students.
        strand_counts = {strand: 0 for strand in VALID_STRANDS}
        for strand, count in (await self.db_client.count_students_by_strand()).items():
            if strand in strand_counts:
                strand_counts[strand] = count

        by_status = await self.db_client.count_attendance_by_status(today or date.today())
        today_attendance = {
            "present": by_status.get(AttendanceStatus.PRESENT.value, 0),
            "late": by_status.get(AttendanceStatus.LATE.value, 0),
            "absent": by_status.get(AttendanceStatus.ABSENT.value, 0),
        }

        return {
            "total_students": total_students,
            "total_teachers": total_teachers,
            "strand_counts": strand_counts,
            "today_attendance": today_attendance,
        }
