from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional
from decimal import Decimal
from datetime import datetime

from app.core.constants import DifficultyLevelEnum

class ProgramBase(BaseModel):
    name: str
    description: Optional[str] = None
    price: Decimal = Field(default=Decimal("0"))
    duration: int = Field(..., description="Program length in days")
    difficulty_level: DifficultyLevelEnum = Field(default=DifficultyLevelEnum.BEGINNER)
    category: Optional[str] = None
    location: Optional[str] = None

    model_config = ConfigDict(use_enum_values=True)

class ProgramCreate(ProgramBase):
    instructor_id: Optional[int] = Field(None, description="Admins may create a program on behalf of an instructor")

    @field_validator("name")
    def name_not_empty(cls, v):
        if not v or not v.strip():
            raise ValueError("Program name cannot be empty")
        return v.strip()

class ProgramUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[Decimal] = None
    duration: Optional[int] = None
    difficulty_level: Optional[DifficultyLevelEnum] = None
    category: Optional[str] = None
    location: Optional[str] = None
    is_active: Optional[bool] = None

    model_config = ConfigDict(use_enum_values=True)

class Program(ProgramBase):
    id: int
    instructor_id: int
    instructor_name: Optional[str] = None
    is_active: bool
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True, use_enum_values=True)
