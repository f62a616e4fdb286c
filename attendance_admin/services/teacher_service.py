import logging
from typing import List, Optional

from ..db.db_client import AsyncPostgresClient, DuplicateRecordError
from ..models.db_models import Teacher, NewTeacher
from ..modules.validators import validate_email
from .errors import ConflictError, ValidationError

logger = logging.getLogger(__name__)


class TeacherService:
    """
    Service layer for teacher records.
    """
    def __init__(self, db_client: AsyncPostgresClient):
        self.db_client = db_client

    async def list_teachers(self) -> List[Teacher]:
        return await self.db_client.get_teachers()

    async def create_teacher(self, teacher_id: Optional[str], first_name: Optional[str], last_name: Optional[str],
                             position: Optional[str], department: Optional[str] = None,
                             email: Optional[str] = None, phone: Optional[str] = None) -> int:
        if not all([teacher_id, first_name, last_name, position]):
            raise ValidationError("Teacher ID, name, and position are required")
        if email and not validate_email(email):
            raise ValidationError("Invalid email format")

        new_teacher = NewTeacher(
            teacher_id=teacher_id, first_name=first_name, last_name=last_name, position=position,
            department=department or None, email=email or None, phone=phone or None
        )
        try:
            new_id = await self.db_client.add_teacher(new_teacher)
        except DuplicateRecordError:
            logger.warning(f"Teacher ID '{teacher_id}' already exists.")
            raise ConflictError("Teacher ID already exists")

        logger.info(f"Teacher '{teacher_id}' added with id {new_id}.")
        return new_id
