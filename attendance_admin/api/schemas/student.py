from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import List, Optional

from ...models.db_models import Student


class StudentCreateRequest(BaseModel):
    """Request model for adding a single student. Validation happens in StudentService."""
    student_id: Optional[str] = Field(None, description="External student code, 5-20 letters, digits or hyphens.")
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    strand: Optional[str] = Field(None, description="One of HUMSS, ABM, CSS, SMAW, AUTO, EIM.")
    year_level: Optional[str] = None
    section: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None

class StudentCreateResponse(BaseModel):
    message: str
    id: int = Field(description="Generated numeric id of the new student.")

class StudentListResponse(BaseModel):
    students: List[Student]
    total: int

class StudentImportRequest(BaseModel):
    """Raw CSV text embedded in JSON, not a multipart upload."""
    csv_content: Optional[str] = Field(None, alias="csvContent")

class StudentImportResponse(BaseModel):
    """Serialized with camelCase keys: importedCount, totalRows, hasMoreErrors."""
    message: str
    imported_count: int
    total_rows: int
    errors: List[str]
    has_more_errors: bool

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

class MessageResponse(BaseModel):
    message: str
