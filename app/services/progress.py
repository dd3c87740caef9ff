import logging
from datetime import datetime
from typing import List, Optional, Tuple
from fastapi import BackgroundTasks
from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundError, ValidationError
from app.crud.lesson_progress import lesson_progress as crud_lesson_progress
from app.crud.program import program as crud_program
from app.crud.program_lesson import program_lesson as crud_program_lesson
from app.crud.program_progress import program_progress as crud_program_progress
from app.models.lesson_progress import LessonProgress as LessonProgressModel
from app.models.program import Program as ProgramModel
from app.models.program_lesson import ProgramLesson
from app.models.program_progress import ProgramProgress as ProgramProgressModel
from app.models.user import User
from app.schemas.progress import (
    LessonProgress,
    LessonProgressItem,
    ProgramLearningProgress,
    ProgramProgress,
    UserProgressStats,
)
from app.services.email import EmailService
from app.utils.permission import PermissionHelper as permission_helper

logger = logging.getLogger(__name__)


class ProgressService:
    """Per-lesson progress ledger and the per-program rollup derived from it."""

    def _now(self) -> datetime:
        return datetime.utcnow()

    def _get_lesson_with_access(self, db: Session, lesson_id: int, current_user: User) -> ProgramLesson:
        lesson = crud_program_lesson.get(db, id=lesson_id)
        if not lesson:
            raise NotFoundError("Lesson not found.")
        permission_helper.require_program_view_permission(db, current_user, lesson.module.program)
        return lesson

    def _get_program_with_access(self, db: Session, program_id: int, current_user: User) -> ProgramModel:
        program = crud_program.get(db, id=program_id)
        if not program:
            raise NotFoundError("Program not found.")
        permission_helper.require_program_view_permission(db, current_user, program)
        return program

    def _to_lesson_progress(
        self, lesson: ProgramLesson, user_id: int, record: Optional[LessonProgressModel]
    ) -> LessonProgress:
        view = LessonProgress(
            user_id=user_id,
            program_id=lesson.module.program_id,
            lesson_id=lesson.id,
            lesson_title=lesson.title,
            module_title=lesson.module.title,
        )
        if record is not None:
            view.id = record.id
            view.is_completed = record.is_completed
            view.completed_at = record.completed_at
            view.watch_time_seconds = record.watch_time_seconds or 0
            view.last_watched_at = record.last_watched_at
            view.created_at = record.created_at
            view.updated_at = record.updated_at
        return view

    def _to_program_progress(self, record: ProgramProgressModel) -> ProgramProgress:
        return ProgramProgress(
            id=record.id,
            user_id=record.user_id,
            program_id=record.program_id,
            program_name=record.program.name,
            total_lessons=record.total_lessons,
            completed_lessons=record.completed_lessons,
            progress_percentage=record.progress_percentage,
            total_watch_time_seconds=record.total_watch_time_seconds,
            is_program_completed=record.is_program_completed,
            started_at=record.started_at,
            last_accessed_at=record.last_accessed_at,
            completed_at=record.completed_at,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )

    def recompute_program_progress(
        self, db: Session, user_id: int, program_id: int, now: datetime
    ) -> Tuple[ProgramProgressModel, bool]:
        """Full rescan of the published lessons of a program. Returns the rollup and whether it just completed."""
        published_ids = [l.id for l in crud_program_lesson.get_published_by_program(db, program_id=program_id)]
        completed = crud_lesson_progress.count_completed(db, user_id=user_id, lesson_ids=published_ids)
        watch_time = crud_lesson_progress.sum_watch_time(db, user_id=user_id, program_id=program_id)

        record = crud_program_progress.get_or_create(db, user_id=user_id, program_id=program_id, now=now)
        completed_now = record.apply_counts(len(published_ids), completed, watch_time, now)
        db.flush()
        logger.debug(
            f"Progress for user {user_id} on program {program_id}: {completed}/{len(published_ids)} lessons"
        )
        return record, completed_now

    def _notify_completion(self, background_tasks: Optional[BackgroundTasks], user: User, program: ProgramModel):
        logger.info(f"User {user.id} completed program {program.id}")
        if background_tasks is None:
            return
        background_tasks.add_task(
            EmailService.send_program_completed_email,
            to_email=user.email,
            user_name=user.display_name,
            program_name=program.name,
        )

    def _commit_mutation(
        self,
        db: Session,
        lesson: ProgramLesson,
        record: LessonProgressModel,
        current_user: User,
        now: datetime,
        background_tasks: Optional[BackgroundTasks],
    ) -> LessonProgress:
        db.flush()
        _, completed_now = self.recompute_program_progress(db, current_user.id, lesson.module.program_id, now)
        db.commit()
        db.refresh(record)
        if completed_now:
            self._notify_completion(background_tasks, current_user, lesson.module.program)
        return self._to_lesson_progress(lesson, current_user.id, record)

    def mark_lesson_complete(
        self,
        db: Session,
        lesson_id: int,
        current_user: User,
        watch_time_seconds: Optional[int] = None,
        background_tasks: Optional[BackgroundTasks] = None,
    ) -> LessonProgress:
        if watch_time_seconds is not None and watch_time_seconds < 0:
            raise ValidationError("Watch time cannot be negative.")
        lesson = self._get_lesson_with_access(db, lesson_id, current_user)
        now = self._now()

        record = crud_lesson_progress.get_or_create(
            db, user_id=current_user.id, lesson_id=lesson.id, program_id=lesson.module.program_id
        )
        record.mark_completed(now)
        if watch_time_seconds:
            record.add_watch_time(watch_time_seconds, now)
        return self._commit_mutation(db, lesson, record, current_user, now, background_tasks)

    def mark_lesson_incomplete(self, db: Session, lesson_id: int, current_user: User) -> LessonProgress:
        lesson = self._get_lesson_with_access(db, lesson_id, current_user)
        record = crud_lesson_progress.get_by_user_and_lesson(db, user_id=current_user.id, lesson_id=lesson.id)
        if record is None:
            # Nothing to undo; report the default state without creating a record.
            return self._to_lesson_progress(lesson, current_user.id, None)

        now = self._now()
        record.mark_incomplete(now)
        return self._commit_mutation(db, lesson, record, current_user, now, None)

    def update_watch_time(self, db: Session, lesson_id: int, watch_time_seconds: int, current_user: User) -> LessonProgress:
        if watch_time_seconds is None or watch_time_seconds < 0:
            raise ValidationError("Watch time cannot be negative.")
        lesson = self._get_lesson_with_access(db, lesson_id, current_user)
        now = self._now()

        record = crud_lesson_progress.get_or_create(
            db, user_id=current_user.id, lesson_id=lesson.id, program_id=lesson.module.program_id
        )
        record.add_watch_time(watch_time_seconds, now)
        return self._commit_mutation(db, lesson, record, current_user, now, None)

    def get_lesson_progress(self, db: Session, lesson_id: int, current_user: User) -> LessonProgress:
        lesson = self._get_lesson_with_access(db, lesson_id, current_user)
        record = crud_lesson_progress.get_by_user_and_lesson(db, user_id=current_user.id, lesson_id=lesson.id)
        return self._to_lesson_progress(lesson, current_user.id, record)

    def is_lesson_completed(self, db: Session, lesson_id: int, current_user: User) -> bool:
        lesson = self._get_lesson_with_access(db, lesson_id, current_user)
        return crud_lesson_progress.is_completed(db, user_id=current_user.id, lesson_id=lesson.id)

    def get_program_progress(self, db: Session, program_id: int, current_user: User) -> ProgramLearningProgress:
        program = self._get_program_with_access(db, program_id, current_user)

        lessons = crud_program_lesson.get_published_by_program(db, program_id=program.id)
        records = crud_lesson_progress.get_by_user_and_program(db, user_id=current_user.id, program_id=program.id)
        by_lesson = {r.lesson_id: r for r in records}

        items: List[LessonProgressItem] = []
        completed = 0
        for lesson in lessons:
            record = by_lesson.get(lesson.id)
            is_completed = bool(record and record.is_completed)
            if is_completed:
                completed += 1
            items.append(LessonProgressItem(
                lesson_id=lesson.id,
                lesson_title=lesson.title,
                module_title=lesson.module.title,
                is_completed=is_completed,
                watch_time_seconds=record.watch_time_seconds if record else 0,
                duration_minutes=lesson.duration_minutes,
                is_preview=bool(lesson.is_preview),
            ))

        total = len(lessons)
        return ProgramLearningProgress(
            program_id=program.id,
            program_name=program.name,
            total_lessons=total,
            completed_lessons=completed,
            progress_percentage=completed / total * 100.0 if total > 0 else 0.0,
            total_watch_time_seconds=sum(r.watch_time_seconds or 0 for r in records),
            is_program_completed=total > 0 and completed == total,
            lesson_progress=items,
        )

    def get_all_user_progress(self, db: Session, current_user: User) -> List[ProgramProgress]:
        records = crud_program_progress.get_by_user(db, user_id=current_user.id)
        return [self._to_program_progress(r) for r in records]

    def get_user_progress_stats(self, db: Session, current_user: User) -> UserProgressStats:
        records = crud_program_progress.get_by_user(db, user_id=current_user.id)

        completed_programs = sum(1 for r in records if r.is_program_completed)
        in_progress = sum(1 for r in records if not r.is_program_completed and r.completed_lessons > 0)
        average = sum(r.progress_percentage for r in records) / len(records) if records else 0.0
        total_watch_time = sum(r.total_watch_time_seconds for r in records)

        return UserProgressStats(
            total_programs_enrolled=len(records),
            completed_programs=completed_programs,
            in_progress_programs=in_progress,
            average_progress_percentage=average,
            total_lessons_completed=sum(r.completed_lessons for r in records),
            total_watch_time_hours=total_watch_time // 3600,
        )

    def initialize_progress(self, db: Session, user_id: int, program_id: int) -> ProgramProgressModel:
        """Idempotent. Existing rollups are returned untouched; new ones start from a full scan."""
        existing = crud_program_progress.get_by_user_and_program(db, user_id=user_id, program_id=program_id)
        if existing:
            return existing
        record, _ = self.recompute_program_progress(db, user_id, program_id, self._now())
        return record

    def initialize_program_progress(self, db: Session, program_id: int, current_user: User) -> ProgramProgress:
        program = self._get_program_with_access(db, program_id, current_user)
        record = self.initialize_progress(db, current_user.id, program.id)
        db.commit()
        db.refresh(record)
        return self._to_program_progress(record)

progress_service = ProgressService()
