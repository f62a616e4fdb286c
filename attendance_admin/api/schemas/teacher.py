from pydantic import BaseModel, Field
from typing import List, Optional

from ...models.db_models import Teacher


class TeacherCreateRequest(BaseModel):
    teacher_id: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    position: Optional[str] = None
    department: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None

class TeacherCreateResponse(BaseModel):
    message: str
    id: int = Field(description="Generated numeric id of the new teacher.")

class TeacherListResponse(BaseModel):
    teachers: List[Teacher]
    total: int
