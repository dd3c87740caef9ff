from typing import List
from fastapi import APIRouter, BackgroundTasks, Depends, Query
from sqlalchemy.orm import Session

from app.models.user import User
from app.schemas.progress import (
    LessonProgress,
    MarkLessonCompleteRequest,
    ProgramLearningProgress,
    ProgramProgress,
    UserProgressStats,
)
from app.schemas.response import APIResponse
from app.services.progress import progress_service
from app.utils import deps

router = APIRouter()


@router.post("/lessons/complete", response_model=APIResponse[LessonProgress])
def mark_lesson_complete(
    *,
    db: Session = Depends(deps.get_db),
    request: MarkLessonCompleteRequest,
    background_tasks: BackgroundTasks,
    current_user: User = Depends(deps.get_current_user)
):
    progress = progress_service.mark_lesson_complete(
        db,
        lesson_id=request.lesson_id,
        current_user=current_user,
        watch_time_seconds=request.watch_time_seconds,
        background_tasks=background_tasks,
    )
    return APIResponse(message="Lesson marked as complete", data=progress)


@router.post("/lessons/{lesson_id}/incomplete", response_model=APIResponse[LessonProgress])
def mark_lesson_incomplete(
    *,
    db: Session = Depends(deps.get_db),
    lesson_id: int,
    current_user: User = Depends(deps.get_current_user)
):
    progress = progress_service.mark_lesson_incomplete(db, lesson_id=lesson_id, current_user=current_user)
    return APIResponse(message="Lesson marked as incomplete", data=progress)


@router.put("/lessons/{lesson_id}/watch-time", response_model=APIResponse[LessonProgress])
def update_watch_time(
    *,
    db: Session = Depends(deps.get_db),
    lesson_id: int,
    watch_time_seconds: int = Query(..., alias="watchTimeSeconds"),
    current_user: User = Depends(deps.get_current_user)
):
    progress = progress_service.update_watch_time(
        db, lesson_id=lesson_id, watch_time_seconds=watch_time_seconds, current_user=current_user
    )
    return APIResponse(message="Watch time updated", data=progress)


@router.get("/lessons/{lesson_id}", response_model=APIResponse[LessonProgress])
def get_lesson_progress(
    *,
    db: Session = Depends(deps.get_db),
    lesson_id: int,
    current_user: User = Depends(deps.get_current_user)
):
    progress = progress_service.get_lesson_progress(db, lesson_id=lesson_id, current_user=current_user)
    return APIResponse(message="Lesson progress retrieved successfully", data=progress)


@router.get("/lessons/{lesson_id}/completed", response_model=APIResponse[bool])
def is_lesson_completed(
    *,
    db: Session = Depends(deps.get_db),
    lesson_id: int,
    current_user: User = Depends(deps.get_current_user)
):
    completed = progress_service.is_lesson_completed(db, lesson_id=lesson_id, current_user=current_user)
    return APIResponse(message="Lesson completion status retrieved", data=completed)


@router.get("/programs/{program_id}", response_model=APIResponse[ProgramLearningProgress])
def get_program_progress(
    *,
    db: Session = Depends(deps.get_db),
    program_id: int,
    current_user: User = Depends(deps.get_current_user)
):
    progress = progress_service.get_program_progress(db, program_id=program_id, current_user=current_user)
    return APIResponse(message="Program progress retrieved successfully", data=progress)


@router.get("/programs", response_model=APIResponse[List[ProgramProgress]])
def get_all_user_progress(
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_user)
):
    progress = progress_service.get_all_user_progress(db, current_user=current_user)
    return APIResponse(message="Progress retrieved successfully", data=progress)


@router.get("/stats", response_model=APIResponse[UserProgressStats])
def get_user_progress_stats(
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_user)
):
    stats = progress_service.get_user_progress_stats(db, current_user=current_user)
    return APIResponse(message="Progress stats retrieved successfully", data=stats)


@router.post("/programs/{program_id}/initialize", response_model=APIResponse[ProgramProgress])
def initialize_program_progress(
    *,
    db: Session = Depends(deps.get_db),
    program_id: int,
    current_user: User = Depends(deps.get_current_user)
):
    progress = progress_service.initialize_program_progress(db, program_id=program_id, current_user=current_user)
    return APIResponse(message="Program progress initialized", data=progress)
