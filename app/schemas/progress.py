from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional
from datetime import datetime


class MarkLessonCompleteRequest(BaseModel):
    lesson_id: int
    watch_time_seconds: Optional[int] = Field(None, ge=0)


class LessonProgress(BaseModel):
    """Per-lesson progress view; ``id`` is None when no record exists yet."""
    id: Optional[int] = None
    user_id: int
    program_id: int
    lesson_id: int
    lesson_title: str
    module_title: str
    is_completed: bool = False
    completed_at: Optional[datetime] = None
    watch_time_seconds: int = 0
    last_watched_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class LessonProgressItem(BaseModel):
    lesson_id: int
    lesson_title: str
    module_title: str
    is_completed: bool
    watch_time_seconds: int
    duration_minutes: Optional[int] = None
    is_preview: bool


class ProgramLearningProgress(BaseModel):
    program_id: int
    program_name: str
    total_lessons: int
    completed_lessons: int
    progress_percentage: float
    total_watch_time_seconds: int
    is_program_completed: bool
    lesson_progress: List[LessonProgressItem] = []


class ProgramProgress(BaseModel):
    id: int
    user_id: int
    program_id: int
    program_name: str
    total_lessons: int
    completed_lessons: int
    progress_percentage: float
    total_watch_time_seconds: int
    is_program_completed: bool
    started_at: Optional[datetime] = None
    last_accessed_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class UserProgressStats(BaseModel):
    total_programs_enrolled: int
    completed_programs: int
    in_progress_programs: int
    average_progress_percentage: float
    total_lessons_completed: int
    total_watch_time_hours: int
