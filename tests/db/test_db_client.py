import os
from datetime import date, time

import asyncpg
import pytest
import pytest_asyncio

from attendance_admin.db.db_client import AsyncPostgresClient, DuplicateRecordError
from attendance_admin.db.migrate import apply_schema, ensure_default_admin
from attendance_admin.models.db_models import AttendanceStatus, NewAttendanceEntry, NewStudent, NewTeacher, Strand

# ----- Test database connection -----
# These tests need a disposable PostgreSQL database; every table in it is emptied.
TEST_DATABASE_URL = os.environ.get("TEST_DATABASE_URL")

pytestmark = pytest.mark.skipif(not TEST_DATABASE_URL, reason="TEST_DATABASE_URL is not set")


@pytest_asyncio.fixture(scope="function")
async def db_pool():
    """Creates a connection pool for each test function."""
    pool = None
    try:
        pool = await asyncpg.create_pool(TEST_DATABASE_URL)
        yield pool
    finally:
        if pool:
            await pool.close()


@pytest_asyncio.fixture(autouse=True)
async def clear_tables(db_pool):
    """Applies the schema and empties every table so tests stay isolated."""
    async with db_pool.acquire() as connection:
        await apply_schema(connection)
        await connection.execute(
            "TRUNCATE face_recognition, qr_codes, attendance, teachers, students, users RESTART IDENTITY CASCADE;"
        )


# ===== Sample data =====

def sample_student(student_id: str = "S-12345", first_name: str = "Juan", strand: Strand = Strand.HUMSS) -> NewStudent:
    return NewStudent(
        student_id=student_id, first_name=first_name, last_name="Dela Cruz",
        strand=strand, year_level="11", section="A"
    )


# ===== Scenarios =====

@pytest.mark.asyncio
async def test_user_round_trip_and_duplicate(db_pool: asyncpg.Pool):
    client = AsyncPostgresClient(pool=db_pool)

    user = await client.add_user("teacher1", "teacher@attendance.com", "$2b$04$hash", "teacher", "Maria Santos")

    assert (await client.get_user_by_id(user.id)).username == "teacher1"
    credentials = await client.get_user_credentials_by_email("teacher@attendance.com")
    assert credentials.password == "$2b$04$hash"

    with pytest.raises(DuplicateRecordError) as exc_info:
        await client.add_user("other", "teacher@attendance.com", "$2b$04$hash", "teacher", "Other")
    assert exc_info.value.constraint_name == "users_email_key"


@pytest.mark.asyncio
async def test_student_insert_list_and_duplicate(db_pool: asyncpg.Pool):
    client = AsyncPostgresClient(pool=db_pool)

    student_pk = await client.add_student(sample_student())

    students = await client.get_students()
    assert [s.id for s in students] == [student_pk]
    assert students[0].strand == Strand.HUMSS
    assert students[0].email is None

    with pytest.raises(DuplicateRecordError):
        await client.add_student(sample_student())
    assert await client.count_students() == 1


@pytest.mark.asyncio
async def test_delete_student_removes_dependent_rows(db_pool: asyncpg.Pool):
    """Scenario: a student with attendance, QR and face rows is deleted."""
    client = AsyncPostgresClient(pool=db_pool)
    student_pk = await client.add_student(sample_student())
    other_pk = await client.add_student(sample_student("S-67890", "Ana"))
    await client.add_attendance(NewAttendanceEntry(
        student_id=student_pk, date=date(2026, 6, 1), time_in=time(8, 0), status=AttendanceStatus.PRESENT
    ))
    async with db_pool.acquire() as connection:
        await connection.execute("INSERT INTO qr_codes (student_id, qr_code_data) VALUES ($1, 'qr');", student_pk)
        await connection.execute("INSERT INTO face_recognition (student_id, face_encoding) VALUES ($1, 'enc');", student_pk)

    assert await client.delete_student(student_pk) == 1
    assert await client.delete_student(student_pk) == 0

    async with db_pool.acquire() as connection:
        assert await connection.fetchval("SELECT COUNT(*) FROM attendance;") == 0
        assert await connection.fetchval("SELECT COUNT(*) FROM qr_codes;") == 0
        assert await connection.fetchval("SELECT COUNT(*) FROM face_recognition;") == 0
    assert [s.id for s in await client.get_students()] == [other_pk]


@pytest.mark.asyncio
async def test_clear_students_and_counts(db_pool: asyncpg.Pool):
    client = AsyncPostgresClient(pool=db_pool)
    await client.add_student(sample_student("S-00001", strand=Strand.ABM))
    await client.add_student(sample_student("S-00002", strand=Strand.ABM))
    await client.add_student(sample_student("S-00003", strand=Strand.EIM))

    assert await client.count_students_by_strand() == {"ABM": 2, "EIM": 1}
    assert await client.clear_students() == 3
    assert await client.count_students() == 0


@pytest.mark.asyncio
async def test_attendance_unique_per_day_and_joined_listing(db_pool: asyncpg.Pool):
    client = AsyncPostgresClient(pool=db_pool)
    student_pk = await client.add_student(sample_student())
    entry = NewAttendanceEntry(
        student_id=student_pk, date=date(2026, 6, 1), time_in=time(8, 45), status=AttendanceStatus.LATE
    )

    await client.add_attendance(entry)
    with pytest.raises(DuplicateRecordError) as exc_info:
        await client.add_attendance(entry)
    assert exc_info.value.constraint_name == "unique_student_date"

    rows = await client.get_attendance_by_date(date(2026, 6, 1))
    assert len(rows) == 1
    assert rows[0].student_code == "S-12345"
    assert rows[0].student_name == "Juan Dela Cruz"
    assert await client.count_attendance_by_status(date(2026, 6, 1)) == {"Late": 1}


@pytest.mark.asyncio
async def test_search_is_case_insensitive(db_pool: asyncpg.Pool):
    client = AsyncPostgresClient(pool=db_pool)
    await client.add_student(sample_student())
    await client.add_teacher(NewTeacher(teacher_id="T-0001", first_name="Bea", last_name="Alonzo", position="Cruz Campus Head"))

    students = await client.search_students("dela cruz")
    teachers = await client.search_teachers("CRUZ")

    assert [hit.name for hit in students] == ["Juan Dela Cruz"]
    assert students[0].type == "student"
    assert teachers[0].position == "Cruz Campus Head"
    assert await client.count_teachers() == 1


@pytest.mark.asyncio
async def test_default_admin_is_seeded_once(db_pool: asyncpg.Pool):
    async with db_pool.acquire() as connection:
        assert await ensure_default_admin(connection) is True
        assert await ensure_default_admin(connection) is False
        assert await connection.fetchval("SELECT role FROM users;") == "admin"
