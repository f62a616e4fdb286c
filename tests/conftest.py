# tests/conftest.py
import asyncio
import itertools
import os
import sys
from datetime import date
from typing import Dict, List, Optional

import asyncpg
import bcrypt
import pytest
from fastapi.testclient import TestClient

# This is the crucial fix for Windows asyncio issues with pytest.
if sys.platform == "win32":
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

# Settings are read at import time, so this must run before the app is imported.
os.environ.setdefault("SECRET_KEY", "test-secret-key")

from attendance_admin.main import app
from attendance_admin.api.dependencies import get_db_client
from attendance_admin.api.utilities.limiter import limiter
from attendance_admin.db.db_client import DuplicateRecordError
from attendance_admin.models.db_models import (
    User, UserCredentials, Student, NewStudent, Teacher, NewTeacher,
    AttendanceEntry, NewAttendanceEntry, SearchHit
)

ADMIN_EMAIL = "admin@attendance.com"
TEACHER_EMAIL = "teacher@attendance.com"
PASSWORD = "secret123"


class FakeDbClient:
    """
    In-memory stand-in for AsyncPostgresClient with the same method surface.
    Unique columns raise DuplicateRecordError like the real client does.
    """
    def __init__(self):
        self._ids = itertools.count(1)
        self.users: Dict[int, UserCredentials] = {}
        self.students: Dict[int, Student] = {}
        self.teachers: Dict[int, Teacher] = {}
        self.attendance: Dict[int, AttendanceEntry] = {}
        # Auxiliary per-student rows: list of student pks
        self.qr_codes: List[int] = []
        self.face_recognition: List[int] = []
        self.search_calls = 0

    # ===== Users =====
    async def add_user(self, username, email, password_hash, role, full_name) -> User:
        if any(u.username == username or u.email == email for u in self.users.values()):
            raise DuplicateRecordError("duplicate key value violates unique constraint", "users_email_key")
        user_id = next(self._ids)
        self.users[user_id] = UserCredentials(
            id=user_id, username=username, email=email, password=password_hash, role=role, full_name=full_name
        )
        return User(**self.users[user_id].model_dump(exclude={"password"}))

    async def get_user_by_id(self, user_id: int) -> Optional[User]:
        creds = self.users.get(user_id)
        return User(**creds.model_dump(exclude={"password"})) if creds else None

    async def get_user_credentials_by_email(self, email: str) -> Optional[UserCredentials]:
        return next((u for u in self.users.values() if u.email == email), None)

    # ===== Students =====
    async def get_students(self) -> List[Student]:
        return sorted(self.students.values(), key=lambda s: (s.first_name, s.last_name))

    async def get_student(self, student_pk: int) -> Optional[Student]:
        if not -2**31 <= student_pk < 2**31:
            # asyncpg refuses to encode such a value for an INTEGER parameter.
            raise asyncpg.DataError(f"invalid input for query argument $1: {student_pk} (value out of int32 range)")
        return self.students.get(student_pk)

    async def add_student(self, student: NewStudent) -> int:
        if any(s.student_id == student.student_id for s in self.students.values()):
            raise DuplicateRecordError("duplicate key value violates unique constraint", "students_student_id_key")
        student_pk = next(self._ids)
        self.students[student_pk] = Student(id=student_pk, **student.model_dump())
        return student_pk

    async def delete_student(self, student_pk: int) -> int:
        self.attendance = {k: a for k, a in self.attendance.items() if a.student_id != student_pk}
        self.qr_codes = [pk for pk in self.qr_codes if pk != student_pk]
        self.face_recognition = [pk for pk in self.face_recognition if pk != student_pk]
        return 1 if self.students.pop(student_pk, None) else 0

    async def clear_students(self) -> int:
        deleted = len(self.students)
        self.attendance.clear()
        self.qr_codes.clear()
        self.face_recognition.clear()
        self.students.clear()
        return deleted

    async def count_students(self) -> int:
        return len(self.students)

    async def count_students_by_strand(self) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for s in self.students.values():
            counts[s.strand.value] = counts.get(s.strand.value, 0) + 1
        return counts

    async def search_students(self, term: str, limit: int = 10) -> List[SearchHit]:
        self.search_calls += 1
        needle = term.lower()
        hits = []
        for s in self.students.values():
            full = f"{s.first_name} {s.last_name}"
            if any(needle in value.lower() for value in (s.first_name, s.last_name, full, s.strand.value)):
                hits.append(SearchHit(id=s.id, name=full, strand=s.strand.value, type="student"))
        return hits[:limit]

    # ===== Teachers =====
    async def get_teachers(self) -> List[Teacher]:
        return sorted(self.teachers.values(), key=lambda t: (t.first_name, t.last_name))

    async def add_teacher(self, teacher: NewTeacher) -> int:
        if any(t.teacher_id == teacher.teacher_id for t in self.teachers.values()):
            raise DuplicateRecordError("duplicate key value violates unique constraint", "teachers_teacher_id_key")
        teacher_pk = next(self._ids)
        self.teachers[teacher_pk] = Teacher(id=teacher_pk, **teacher.model_dump())
        return teacher_pk

    async def count_teachers(self) -> int:
        return len(self.teachers)

    async def search_teachers(self, term: str, limit: int = 10) -> List[SearchHit]:
        self.search_calls += 1
        needle = term.lower()
        hits = []
        for t in self.teachers.values():
            full = f"{t.first_name} {t.last_name}"
            if any(needle in value.lower() for value in (t.first_name, t.last_name, full, t.position)):
                hits.append(SearchHit(id=t.id, name=full, position=t.position, type="teacher"))
        return hits[:limit]

    # ===== Attendance =====
    async def add_attendance(self, entry: NewAttendanceEntry) -> int:
        if any(a.student_id == entry.student_id and a.date == entry.date for a in self.attendance.values()):
            raise DuplicateRecordError("duplicate key value violates unique constraint", "unique_student_date")
        entry_id = next(self._ids)
        self.attendance[entry_id] = AttendanceEntry(id=entry_id, **entry.model_dump())
        return entry_id

    async def get_attendance_by_date(self, day: date) -> List[AttendanceEntry]:
        return [a for a in self.attendance.values() if a.date == day]

    async def count_attendance_by_status(self, day: date) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for a in self.attendance.values():
            if a.date == day:
                counts[a.status.value] = counts.get(a.status.value, 0) + 1
        return counts


def _seed_user(db: FakeDbClient, username: str, email: str, role: str, full_name: str) -> int:
    # Low cost factor keeps the suite fast; checkpw reads the rounds from the hash.
    password_hash = bcrypt.hashpw(PASSWORD.encode("utf-8"), bcrypt.gensalt(rounds=4)).decode("utf-8")
    user_id = next(db._ids)
    db.users[user_id] = UserCredentials(
        id=user_id, username=username, email=email, password=password_hash, role=role, full_name=full_name
    )
    return user_id


@pytest.fixture
def fake_db() -> FakeDbClient:
    db = FakeDbClient()
    _seed_user(db, "admin", ADMIN_EMAIL, "admin", "System Administrator")
    _seed_user(db, "teacher1", TEACHER_EMAIL, "teacher", "Maria Santos")
    return db


@pytest.fixture
def client(fake_db):
    """
    TestClient wired to the in-memory database.
    Used without a `with` block, so the lifespan (and its real pool) never runs.
    """
    app.dependency_overrides[get_db_client] = lambda: fake_db
    limiter.enabled = False
    test_client = TestClient(app, raise_server_exceptions=False)
    yield test_client
    app.dependency_overrides.clear()
    limiter.enabled = True


def login(client: TestClient, email: str, password: str = PASSWORD):
    response = client.post("/api/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return response


@pytest.fixture
def admin_client(client):
    login(client, ADMIN_EMAIL)
    return client


@pytest.fixture
def teacher_client(client):
    login(client, TEACHER_EMAIL)
    return client
