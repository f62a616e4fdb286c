"""
Explicit, idempotent schema migration.

Run once per deployment, before the API starts serving:

    python -m attendance_admin.db.migrate

Every statement is safe to re-run. Request handlers never create schema.
"""
import asyncio
import logging
import asyncpg

from ..config.config import settings
from ..logging.logging_config import setup_logging
from ..services.auth_service import hash_password

logger = logging.getLogger(__name__)

SCHEMA_STATEMENTS = [
    """
    CREATE TABLE IF NOT EXISTS users (
        id SERIAL PRIMARY KEY,
        username VARCHAR(50) UNIQUE NOT NULL,
        email VARCHAR(100) UNIQUE NOT NULL,
        password VARCHAR(255) NOT NULL,
        role VARCHAR(10) NOT NULL DEFAULT 'teacher' CHECK (role IN ('admin', 'teacher')),
        full_name VARCHAR(100) NOT NULL,
        created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
        updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS students (
        id SERIAL PRIMARY KEY,
        student_id VARCHAR(50) UNIQUE NOT NULL,
        first_name VARCHAR(50) NOT NULL,
        last_name VARCHAR(50) NOT NULL,
        strand VARCHAR(10) NOT NULL CHECK (strand IN ('HUMSS', 'ABM', 'CSS', 'SMAW', 'AUTO', 'EIM')),
        year_level VARCHAR(10) NOT NULL,
        section VARCHAR(10) NOT NULL,
        email VARCHAR(100),
        phone VARCHAR(20),
        created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
        updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS teachers (
        id SERIAL PRIMARY KEY,
        teacher_id VARCHAR(50) UNIQUE NOT NULL,
        first_name VARCHAR(50) NOT NULL,
        last_name VARCHAR(50) NOT NULL,
        position VARCHAR(100) NOT NULL,
        department VARCHAR(100),
        email VARCHAR(100),
        phone VARCHAR(20),
        created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
        updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS attendance (
        id SERIAL PRIMARY KEY,
        student_id INTEGER NOT NULL REFERENCES students(id) ON DELETE CASCADE,
        date DATE NOT NULL,
        time_in TIME,
        time_out TIME,
        status VARCHAR(10) NOT NULL DEFAULT 'Absent' CHECK (status IN ('Present', 'Late', 'Absent')),
        remarks TEXT,
        created_by INTEGER REFERENCES users(id) ON DELETE SET NULL,
        created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
        updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
        CONSTRAINT unique_student_date UNIQUE (student_id, date)
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS qr_codes (
        id SERIAL PRIMARY KEY,
        student_id INTEGER NOT NULL REFERENCES students(id) ON DELETE CASCADE,
        qr_code_data TEXT NOT NULL,
        qr_code_url VARCHAR(255),
        is_active BOOLEAN NOT NULL DEFAULT TRUE,
        created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
        updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS face_recognition (
        id SERIAL PRIMARY KEY,
        student_id INTEGER NOT NULL REFERENCES students(id) ON DELETE CASCADE,
        face_encoding TEXT NOT NULL,
        image_url VARCHAR(255),
        is_active BOOLEAN NOT NULL DEFAULT TRUE,
        created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
        updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
    );
    """,
]


async def apply_schema(connection: asyncpg.Connection):
    """Creates every table that does not exist yet."""
    for statement in SCHEMA_STATEMENTS:
        await connection.execute(statement)
    logger.info(f"Schema ready ({len(SCHEMA_STATEMENTS)} tables checked).")


async def ensure_default_admin(connection: asyncpg.Connection) -> bool:
    """Seeds the default admin account unless its username or email is already taken."""
    existing = await connection.fetchval(
        "SELECT id FROM users WHERE username = $1 OR email = $2;",
        settings.DEFAULT_ADMIN_USERNAME, settings.DEFAULT_ADMIN_EMAIL
    )
    if existing:
        return False

    await connection.execute(
        """
        INSERT INTO users (username, email, password, role, full_name)
        VALUES ($1, $2, $3, 'admin', 'System Administrator');
        """,
        settings.DEFAULT_ADMIN_USERNAME, settings.DEFAULT_ADMIN_EMAIL,
        hash_password(settings.DEFAULT_ADMIN_PASSWORD)
    )
    logger.info(f"Default admin user created: {settings.DEFAULT_ADMIN_EMAIL}")
    return True


async def migrate(dsn: str = settings.DATABASE_URL):
    connection = await asyncpg.connect(dsn=dsn)
    try:
        await apply_schema(connection)
        await ensure_default_admin(connection)
    finally:
        await connection.close()


def main():
    setup_logging()
    asyncio.run(migrate())


if __name__ == "__main__":
    main()
