from datetime import datetime
from typing import List, Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from app.crud.base import CRUDBase
from app.core.constants import EnrollmentStatusEnum
from app.models.enrollment import Enrollment
from app.models.program_progress import ProgramProgress
from pydantic import BaseModel

class CRUDProgramProgress(CRUDBase[ProgramProgress, BaseModel, BaseModel]):
    def get_by_user_and_program(self, db: Session, *, user_id: int, program_id: int) -> Optional[ProgramProgress]:
        return (
            db.query(ProgramProgress)
            .filter(ProgramProgress.user_id == user_id, ProgramProgress.program_id == program_id)
            .first()
        )

    def get_by_user(self, db: Session, *, user_id: int) -> List[ProgramProgress]:
        return (
            db.query(ProgramProgress)
            .options(selectinload(ProgramProgress.program))
            .join(
                Enrollment,
                (Enrollment.user_id == ProgramProgress.user_id) & (Enrollment.program_id == ProgramProgress.program_id),
            )
            .filter(ProgramProgress.user_id == user_id, Enrollment.status == EnrollmentStatusEnum.ACTIVE)
            .order_by(ProgramProgress.last_accessed_at.desc(), ProgramProgress.id.desc())
            .all()
        )

    def get_or_create(self, db: Session, *, user_id: int, program_id: int, now: datetime) -> ProgramProgress:
        existing = self.get_by_user_and_program(db, user_id=user_id, program_id=program_id)
        if existing:
            return existing
        try:
            with db.begin_nested():
                db_obj = ProgramProgress(
                    user_id=user_id,
                    program_id=program_id,
                    total_lessons=0,
                    completed_lessons=0,
                    progress_percentage=0.0,
                    total_watch_time_seconds=0,
                    is_program_completed=False,
                    started_at=now,
                    last_accessed_at=now,
                )
                db.add(db_obj)
        except IntegrityError:
            return self.get_by_user_and_program(db, user_id=user_id, program_id=program_id)
        return db_obj

program_progress = CRUDProgramProgress(ProgramProgress)
