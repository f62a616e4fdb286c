from pydantic import BaseModel, Field
from datetime import date as date_type
from typing import Dict, List, Optional

from ...models.db_models import AttendanceEntry, AttendanceStatus


class AttendanceCreateRequest(BaseModel):
    """Request model for marking one student's attendance."""
    student_id: int = Field(..., description="Numeric id of the student (students.id).")
    date: Optional[date_type] = Field(None, description="Defaults to today.")
    time_in: Optional[str] = Field(None, description="HH:MM or HH:MM:SS")
    time_out: Optional[str] = Field(None, description="HH:MM or HH:MM:SS")
    status: Optional[str] = Field(None, description="Present, Late or Absent. Derived from time_in when omitted.")
    remarks: Optional[str] = None

class AttendanceCreateResponse(BaseModel):
    message: str
    id: int
    status: AttendanceStatus

class AttendanceListResponse(BaseModel):
    date: date_type
    records: List[AttendanceEntry]
    stats: Dict[str, int]
