from typing import List, Optional
from sqlalchemy.orm import Session, selectinload

from app.crud.base import CRUDBase
from app.core.constants import EnrollmentStatusEnum
from app.models.enrollment import Enrollment
from pydantic import BaseModel

class CRUDEnrollment(CRUDBase[Enrollment, BaseModel, BaseModel]):
    def get_by_user_and_program(self, db: Session, *, user_id: int, program_id: int) -> Optional[Enrollment]:
        return (
            db.query(Enrollment)
            .filter(Enrollment.user_id == user_id, Enrollment.program_id == program_id)
            .first()
        )

    def exists(self, db: Session, *, user_id: int, program_id: int) -> bool:
        return db.query(
            db.query(Enrollment)
            .filter(
                Enrollment.user_id == user_id,
                Enrollment.program_id == program_id,
                Enrollment.status == EnrollmentStatusEnum.ACTIVE,
            )
            .exists()
        ).scalar()

    def get_by_user(self, db: Session, *, user_id: int) -> List[Enrollment]:
        return (
            db.query(Enrollment)
            .options(selectinload(Enrollment.program))
            .filter(Enrollment.user_id == user_id)
            .order_by(Enrollment.enrolled_at.desc(), Enrollment.id.desc())
            .all()
        )

enrollment = CRUDEnrollment(Enrollment)
