from typing import List, Optional
from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from app.crud.base import CRUDBase
from app.models.program import Program
from app.schemas.program import ProgramCreate, ProgramUpdate

class CRUDProgram(CRUDBase[Program, ProgramCreate, ProgramUpdate]):
    def get(self, db: Session, id: int) -> Optional[Program]:
        return (
            db.query(Program)
            .options(selectinload(Program.instructor))
            .filter(Program.id == id)
            .first()
        )

    def get_by_name(self, db: Session, *, name: str) -> Optional[Program]:
        return db.query(Program).filter(func.lower(Program.name) == name.strip().lower()).first()

    def _filtered(self, db: Session, *, instructor_id: Optional[int], active_only: bool):
        query = db.query(Program)
        if instructor_id is not None:
            query = query.filter(Program.instructor_id == instructor_id)
        if active_only:
            query = query.filter(Program.is_active == True)
        return query

    def get_filtered(
        self,
        db: Session,
        *,
        skip: int = 0,
        limit: int = 100,
        instructor_id: Optional[int] = None,
        active_only: bool = True,
    ) -> List[Program]:
        return (
            self._filtered(db, instructor_id=instructor_id, active_only=active_only)
            .options(selectinload(Program.instructor))
            .order_by(Program.created_at.desc(), Program.id.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    def count_filtered(self, db: Session, *, instructor_id: Optional[int] = None, active_only: bool = True) -> int:
        return self._filtered(db, instructor_id=instructor_id, active_only=active_only).count()

program = CRUDProgram(Program)
