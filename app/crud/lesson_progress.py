from typing import List, Optional
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from app.crud.base import CRUDBase
from app.models.lesson_progress import LessonProgress
from app.models.program_lesson import ProgramLesson
from pydantic import BaseModel

class CRUDLessonProgress(CRUDBase[LessonProgress, BaseModel, BaseModel]):

    def _query_with_relationships(self, db: Session):
        return db.query(LessonProgress).options(
            selectinload(LessonProgress.lesson).selectinload(ProgramLesson.module)
        )

    def get_by_user_and_lesson(self, db: Session, *, user_id: int, lesson_id: int) -> Optional[LessonProgress]:
        return (
            self._query_with_relationships(db)
            .filter(LessonProgress.user_id == user_id)
            .filter(LessonProgress.lesson_id == lesson_id)
            .first()
        )

    def get_by_user_and_program(self, db: Session, *, user_id: int, program_id: int) -> List[LessonProgress]:
        return (
            self._query_with_relationships(db)
            .filter(LessonProgress.user_id == user_id)
            .filter(LessonProgress.program_id == program_id)
            .all()
        )

    def get_or_create(self, db: Session, *, user_id: int, lesson_id: int, program_id: int) -> LessonProgress:
        """Upsert by (user, lesson). A concurrent first touch loses the insert and re-reads the winner."""
        existing = self.get_by_user_and_lesson(db, user_id=user_id, lesson_id=lesson_id)
        if existing:
            return existing
        try:
            with db.begin_nested():
                db_obj = LessonProgress(
                    user_id=user_id,
                    lesson_id=lesson_id,
                    program_id=program_id,
                    is_completed=False,
                    watch_time_seconds=0,
                )
                db.add(db_obj)
        except IntegrityError:
            return self.get_by_user_and_lesson(db, user_id=user_id, lesson_id=lesson_id)
        return db_obj

    def count_completed(self, db: Session, *, user_id: int, lesson_ids: List[int]) -> int:
        if not lesson_ids:
            return 0
        return (
            db.query(func.count(LessonProgress.id))
            .filter(LessonProgress.user_id == user_id)
            .filter(LessonProgress.lesson_id.in_(lesson_ids))
            .filter(LessonProgress.is_completed == True)
            .scalar()
        ) or 0

    def sum_watch_time(self, db: Session, *, user_id: int, program_id: int) -> int:
        return (
            db.query(func.coalesce(func.sum(LessonProgress.watch_time_seconds), 0))
            .filter(LessonProgress.user_id == user_id)
            .filter(LessonProgress.program_id == program_id)
            .scalar()
        ) or 0

    def is_completed(self, db: Session, *, user_id: int, lesson_id: int) -> bool:
        return db.query(
            db.query(LessonProgress)
            .filter(
                LessonProgress.user_id == user_id,
                LessonProgress.lesson_id == lesson_id,
                LessonProgress.is_completed == True,
            )
            .exists()
        ).scalar()


lesson_progress = CRUDLessonProgress(LessonProgress)
