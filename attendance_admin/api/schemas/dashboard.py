from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from typing import Dict


class TodayAttendance(BaseModel):
    present: int = 0
    late: int = 0
    absent: int = 0

class DashboardStatsResponse(BaseModel):
    """Serialized with camelCase keys: totalStudents, strandCounts, ..."""
    total_students: int
    total_teachers: int
    strand_counts: Dict[str, int]
    today_attendance: TodayAttendance

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
