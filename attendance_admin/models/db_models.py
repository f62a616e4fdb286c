# attendance_admin/models/db_models.py

from pydantic import BaseModel, Field
from datetime import date as date_type, datetime, time
from enum import Enum
from typing import Optional


class Role(str, Enum):
    ADMIN = "admin"
    TEACHER = "teacher"


class Strand(str, Enum):
    HUMSS = "HUMSS"
    ABM = "ABM"
    CSS = "CSS"
    SMAW = "SMAW"
    AUTO = "AUTO"
    EIM = "EIM"


class AttendanceStatus(str, Enum):
    PRESENT = "Present"
    LATE = "Late"
    ABSENT = "Absent"


VALID_STRANDS = [strand.value for strand in Strand]
VALID_ROLES = [role.value for role in Role]

# SERIAL primary keys are PostgreSQL INTEGER (int4).
MAX_ROW_ID = 2**31 - 1


class User(BaseModel):
    """
    Represents an account, mapping to the 'users' table.
    The password hash never leaves the storage layer through this model.
    """
    id: int
    username: str
    email: str
    role: Role
    full_name: str


class UserCredentials(User):
    """User row together with its bcrypt hash, used only while logging in."""
    password: str = Field(..., description="bcrypt hash, never the clear text password")


class Student(BaseModel):
    """
    Represents a student, mapping to the 'students' table.
    """
    id: int
    student_id: str = Field(..., description="Unique, external-facing student code")
    first_name: str
    last_name: str
    strand: Strand
    year_level: str
    section: str
    email: Optional[str] = None
    phone: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class NewStudent(BaseModel):
    """A validated student that is ready to be inserted."""
    student_id: str
    first_name: str
    last_name: str
    strand: Strand
    year_level: str
    section: str
    email: Optional[str] = None
    phone: Optional[str] = None


class Teacher(BaseModel):
    """
    Represents a teacher, mapping to the 'teachers' table.
    """
    id: int
    teacher_id: str
    first_name: str
    last_name: str
    position: str
    department: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class NewTeacher(BaseModel):
    teacher_id: str
    first_name: str
    last_name: str
    position: str
    department: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None


class AttendanceEntry(BaseModel):
    """
    A single attendance row, mapping to the 'attendance' table.
    At most one row exists per (student_id, date).
    """
    id: int
    student_id: int = Field(..., description="FK to students.id")
    date: date_type
    time_in: Optional[time] = None
    time_out: Optional[time] = None
    status: AttendanceStatus = AttendanceStatus.ABSENT
    remarks: Optional[str] = None
    created_by: Optional[int] = Field(None, description="FK to users.id")
    student_code: Optional[str] = Field(None, description="students.student_id, filled by joined queries")
    student_name: Optional[str] = None


class NewAttendanceEntry(BaseModel):
    student_id: int
    date: date_type
    time_in: Optional[time] = None
    time_out: Optional[time] = None
    status: AttendanceStatus
    remarks: Optional[str] = None
    created_by: Optional[int] = None


class SearchHit(BaseModel):
    """A row returned by the global search, either a student or a teacher."""
    id: int
    name: str
    type: str
    strand: Optional[str] = None
    position: Optional[str] = None
