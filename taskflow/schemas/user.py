from pydantic import BaseModel, EmailStr, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError
from datetime import datetime
from typing import Optional

class CamelModel(BaseModel):
    # JSON en camelCase, attributs Python en snake_case
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

class RegisterRequest(CamelModel):
    username: str
    email: EmailStr
    password: str
    display_name: Optional[str] = None

    @field_validator("username")
    @classmethod
    def check_username(cls, value: str) -> str:
        if len(value) < 3:
            raise PydanticCustomError("username_length", "Username must be at least 3 characters")
        if len(value) > 30:
            raise PydanticCustomError("username_length", "Username must be 30 characters or less")
        return value

    @field_validator("password")
    @classmethod
    def check_password(cls, value: str) -> str:
        if len(value) < 6:
            raise PydanticCustomError("password_length", "Password must be at least 6 characters")
        return value

    @field_validator("display_name")
    @classmethod
    def check_display_name(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not 1 <= len(value) <= 50:
            raise PydanticCustomError("display_name_length", "Display name must be 1 to 50 characters")
        return value

class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(min_length=1)

class ProfileUpdate(CamelModel):
    username: Optional[str] = None
    display_name: Optional[str] = None

    @field_validator("username")
    @classmethod
    def check_username(cls, value: Optional[str]) -> str:
        if value is None or not 3 <= len(value) <= 30:
            raise PydanticCustomError("username_length", "Username must be 3 to 30 characters")
        return value

    @field_validator("display_name")
    @classmethod
    def check_display_name(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not 1 <= len(value) <= 50:
            raise PydanticCustomError("display_name_length", "Display name must be 1 to 50 characters")
        return value

class UserPublic(CamelModel):
    """Projection publique, jamais de hash de mot de passe"""
    id: str
    username: str
    email: str
    display_name: Optional[str] = None
    created_at: datetime

class UserEnvelope(BaseModel):
    user: UserPublic

class MessageResponse(BaseModel):
    message: str
