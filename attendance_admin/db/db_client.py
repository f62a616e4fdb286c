import logging
from datetime import date
from typing import Dict, List, Optional
import asyncpg

from ..models.db_models import (
    User, UserCredentials, Student, NewStudent, Teacher, NewTeacher,
    AttendanceEntry, NewAttendanceEntry, SearchHit
)

logger = logging.getLogger(__name__)


class DuplicateRecordError(Exception):
    """Raised when an insert collides with a UNIQUE constraint."""
    def __init__(self, message: str, constraint_name: Optional[str] = None):
        super().__init__(message)
        self.constraint_name = constraint_name


def _affected_rows(status: str) -> int:
    """Turns asyncpg's command tag ('DELETE 3') into the row count."""
    try:
        return int(status.split()[-1])
    except (AttributeError, IndexError, ValueError):
        return 0


class AsyncPostgresClient:
    """
    PostgreSQL client that owns every SQL statement of the application.
    Each method borrows a connection from the shared pool for one round trip.
    """
    def __init__(self, pool: asyncpg.Pool):
        self._pool = pool

    # ===== Users =====

    async def add_user(self, username: str, email: str, password_hash: str, role: str, full_name: str) -> User:
        """Creates an account. A taken username or email raises DuplicateRecordError."""
        query = """
            INSERT INTO users (username, email, password, role, full_name)
            VALUES ($1, $2, $3, $4, $5)
            RETURNING id, username, email, role, full_name;
        """
        try:
            async with self._pool.acquire() as connection:
                record = await connection.fetchrow(query, username, email, password_hash, role, full_name)
        except asyncpg.UniqueViolationError as e:
            raise DuplicateRecordError(str(e), e.constraint_name) from e
        return User(**record)

    async def get_user_by_id(self, user_id: int) -> Optional[User]:
        query = "SELECT id, username, email, role, full_name FROM users WHERE id = $1;"
        async with self._pool.acquire() as connection:
            record = await connection.fetchrow(query, user_id)
            return User(**record) if record else None

    async def get_user_credentials_by_email(self, email: str) -> Optional[UserCredentials]:
        """Returns the user with its password hash, for login only."""
        query = "SELECT id, username, email, password, role, full_name FROM users WHERE email = $1;"
        async with self._pool.acquire() as connection:
            record = await connection.fetchrow(query, email)
            return UserCredentials(**record) if record else None

    # ===== Students =====

    async def get_students(self) -> List[Student]:
        query = "SELECT * FROM students ORDER BY first_name, last_name;"
        async with self._pool.acquire() as connection:
            records = await connection.fetch(query)
            return [Student(**record) for record in records]

    async def get_student(self, student_pk: int) -> Optional[Student]:
        query = "SELECT * FROM students WHERE id = $1;"
        async with self._pool.acquire() as connection:
            record = await connection.fetchrow(query, student_pk)
            return Student(**record) if record else None

    async def add_student(self, student: NewStudent) -> int:
        """Inserts a student and returns its generated numeric id."""
        query = """
            INSERT INTO students (student_id, first_name, last_name, strand, year_level, section, email, phone)
            VALUES ($1, $2, $3, $4, $5, $6, $7, $8)
            RETURNING id;
        """
        try:
            async with self._pool.acquire() as connection:
                return await connection.fetchval(
                    query, student.student_id, student.first_name, student.last_name,
                    student.strand.value, student.year_level, student.section,
                    student.email or None, student.phone or None
                )
        except asyncpg.UniqueViolationError as e:
            raise DuplicateRecordError(str(e), e.constraint_name) from e

    async def delete_student(self, student_pk: int) -> int:
        """
        Deletes a student after its attendance, qr_codes and face_recognition rows.
        The statements run one by one, without a surrounding transaction.
        """
        async with self._pool.acquire() as connection:
            await connection.execute("DELETE FROM attendance WHERE student_id = $1;", student_pk)
            await connection.execute("DELETE FROM qr_codes WHERE student_id = $1;", student_pk)
            await connection.execute("DELETE FROM face_recognition WHERE student_id = $1;", student_pk)
            status = await connection.execute("DELETE FROM students WHERE id = $1;", student_pk)
        return _affected_rows(status)

    async def clear_students(self) -> int:
        """Deletes every student, dependent rows first. Returns the number of students removed."""
        async with self._pool.acquire() as connection:
            await connection.execute("DELETE FROM attendance WHERE student_id IN (SELECT id FROM students);")
            await connection.execute("DELETE FROM qr_codes WHERE student_id IN (SELECT id FROM students);")
            await connection.execute("DELETE FROM face_recognition WHERE student_id IN (SELECT id FROM students);")
            status = await connection.execute("DELETE FROM students;")
        return _affected_rows(status)

    async def count_students(self) -> int:
        async with self._pool.acquire() as connection:
            return await connection.fetchval("SELECT COUNT(*) FROM students;")

    async def count_students_by_strand(self) -> Dict[str, int]:
        query = "SELECT strand, COUNT(*) AS count FROM students GROUP BY strand;"
        async with self._pool.acquire() as connection:
            records = await connection.fetch(query)
            return {record["strand"]: record["count"] for record in records}

    async def search_students(self, term: str, limit: int = 10) -> List[SearchHit]:
        """Wildcard match on first name, last name, full name or strand."""
        query = """
            SELECT id, first_name || ' ' || last_name AS name, strand, 'student' AS type
            FROM students
            WHERE first_name ILIKE $1
               OR last_name ILIKE $1
               OR (first_name || ' ' || last_name) ILIKE $1
               OR strand ILIKE $1
            LIMIT $2;
        """
        async with self._pool.acquire() as connection:
            records = await connection.fetch(query, f"%{term}%", limit)
            return [SearchHit(**record) for record in records]

    # ===== Teachers =====

    async def get_teachers(self) -> List[Teacher]:
        query = "SELECT * FROM teachers ORDER BY first_name, last_name;"
        async with self._pool.acquire() as connection:
            records = await connection.fetch(query)
            return [Teacher(**record) for record in records]

    async def add_teacher(self, teacher: NewTeacher) -> int:
        query = """
            INSERT INTO teachers (teacher_id, first_name, last_name, position, department, email, phone)
            VALUES ($1, $2, $3, $4, $5, $6, $7)
            RETURNING id;
        """
        try:
            async with self._pool.acquire() as connection:
                return await connection.fetchval(
                    query, teacher.teacher_id, teacher.first_name, teacher.last_name, teacher.position,
                    teacher.department or None, teacher.email or None, teacher.phone or None
                )
        except asyncpg.UniqueViolationError as e:
            raise DuplicateRecordError(str(e), e.constraint_name) from e

    async def count_teachers(self) -> int:
        async with self._pool.acquire() as connection:
            return await connection.fetchval("SELECT COUNT(*) FROM teachers;")

    async def search_teachers(self, term: str, limit: int = 10) -> List[SearchHit]:
        """Wildcard match on first name, last name, full name or position."""
        query = """
            SELECT id, first_name || ' ' || last_name AS name, position, 'teacher' AS type
            FROM teachers
            WHERE first_name ILIKE $1
               OR last_name ILIKE $1
               OR (first_name || ' ' || last_name) ILIKE $1
               OR position ILIKE $1
            LIMIT $2;
        """
        async with self._pool.acquire() as connection:
            records = await connection.fetch(query, f"%{term}%", limit)
            return [SearchHit(**record) for record in records]

    # ===== Attendance =====

    async def add_attendance(self, entry: NewAttendanceEntry) -> int:
        """Records attendance; a second row for the same student and date raises DuplicateRecordError."""
        query = """
            INSERT INTO attendance (student_id, date, time_in, time_out, status, remarks, created_by)
            VALUES ($1, $2, $3, $4, $5, $6, $7)
            RETURNING id;
        """
        try:
            async with self._pool.acquire() as connection:
                return await connection.fetchval(
                    query, entry.student_id, entry.date, entry.time_in, entry.time_out,
                    entry.status.value, entry.remarks or None, entry.created_by
                )
        except asyncpg.UniqueViolationError as e:
            raise DuplicateRecordError(str(e), e.constraint_name) from e

    async def get_attendance_by_date(self, day: date) -> List[AttendanceEntry]:
        query = """
            SELECT a.id, a.student_id, a.date, a.time_in, a.time_out, a.status, a.remarks, a.created_by,
                   s.student_id AS student_code, s.first_name || ' ' || s.last_name AS student_name
            FROM attendance a
            JOIN students s ON s.id = a.student_id
            WHERE a.date = $1
            ORDER BY s.first_name, s.last_name;
        """
        async with self._pool.acquire() as connection:
            records = await connection.fetch(query, day)
            return [AttendanceEntry(**record) for record in records]

    async def count_attendance_by_status(self, day: date) -> Dict[str, int]:
        query = "SELECT status, COUNT(*) AS count FROM attendance WHERE date = $1 GROUP BY status;"
        async with self._pool.acquire() as connection:
            records = await connection.fetch(query, day)
            return {record["status"]: record["count"] for record in records}
