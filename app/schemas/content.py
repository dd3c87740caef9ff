from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional
from decimal import Decimal
from datetime import datetime


class ModuleBase(BaseModel):
    title: str
    description: Optional[str] = None

class ModuleCreate(ModuleBase):
    order_index: Optional[int] = Field(None, ge=0)
    is_published: bool = False

class ModuleUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    order_index: Optional[int] = Field(None, ge=0)
    is_published: Optional[bool] = None


class LessonBase(BaseModel):
    title: str
    description: Optional[str] = None
    content: Optional[str] = None
    video_url: Optional[str] = None
    duration_minutes: Optional[int] = Field(None, ge=0)

class LessonCreate(LessonBase):
    order_index: Optional[int] = Field(None, ge=0)
    is_published: bool = False
    is_preview: bool = False

class LessonUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    content: Optional[str] = None
    video_url: Optional[str] = None
    duration_minutes: Optional[int] = Field(None, ge=0)
    order_index: Optional[int] = Field(None, ge=0)
    is_published: Optional[bool] = None
    is_preview: Optional[bool] = None


class ResourceCreate(BaseModel):
    title: str
    description: Optional[str] = None
    file_url: Optional[str] = None
    file_type: Optional[str] = None
    file_size_bytes: Optional[int] = Field(None, ge=0)
    order_index: Optional[int] = Field(None, ge=0)

class ResourceUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    file_url: Optional[str] = None
    file_type: Optional[str] = None
    file_size_bytes: Optional[int] = Field(None, ge=0)
    order_index: Optional[int] = Field(None, ge=0)


class ReorderRequest(BaseModel):
    ordered_ids: List[int] = Field(..., description="Sibling ids in their new display order")


class Resource(BaseModel):
    id: int
    lesson_id: int
    title: str
    description: Optional[str] = None
    file_url: str
    file_type: str
    file_size_bytes: Optional[int] = None
    order_index: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class Lesson(LessonBase):
    id: int
    module_id: int
    order_index: int
    is_published: bool
    is_preview: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    resources: List[Resource] = []

    model_config = ConfigDict(from_attributes=True)

class Module(ModuleBase):
    id: int
    program_id: int
    order_index: int
    is_published: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    lessons: List[Lesson] = []

    model_config = ConfigDict(from_attributes=True)


class ProgramLearningContent(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    difficulty_level: str
    duration: int
    price: Decimal
    instructor_id: int
    instructor_name: Optional[str] = None
    instructor_avatar_url: Optional[str] = None
    category: Optional[str] = None
    location: Optional[str] = None
    created_at: Optional[datetime] = None
    modules: List[Module] = []
    total_lessons: int = 0
    total_duration_minutes: int = 0
    completed_lessons: int = 0
    progress_percentage: float = 0.0
