# attendance_admin/api/schemas/user.py
from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from typing import Optional

from ...models.db_models import Role

# Request fields are optional on purpose: missing values are reported by the
# service layer with a 400 and a specific message.

class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None

class SignupRequest(BaseModel):
    username: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    full_name: Optional[str] = Field(None, validation_alias=AliasChoices("full_name", "fullName"))
    role: Optional[str] = "teacher"

class UserResponse(BaseModel):
    id: int
    username: str
    email: str
    role: Role
    full_name: str

    model_config = ConfigDict(from_attributes=True)

class AuthResponse(BaseModel):
    message: str
    user: UserResponse

class MeResponse(BaseModel):
    user: UserResponse

# Internal representation of JWT data
class TokenData(BaseModel):
    user_id: int = Field(..., alias="userId")
    username: Optional[str] = None
    email: Optional[str] = None
    role: Optional[Role] = None
    full_name: Optional[str] = None
