from typing import List, Optional
from sqlalchemy.orm import Session, selectinload

from app.crud.base import CRUDBase, OrderedCRUDMixin
from app.models.program_lesson import ProgramLesson
from app.models.program_module import ProgramModule
from app.schemas.content import LessonCreate, LessonUpdate

class CRUDProgramLesson(OrderedCRUDMixin, CRUDBase[ProgramLesson, LessonCreate, LessonUpdate]):
    parent_field = "module_id"

    def get(self, db: Session, id: int) -> Optional[ProgramLesson]:
        return (
            db.query(ProgramLesson)
            .options(selectinload(ProgramLesson.module).selectinload(ProgramModule.program))
            .filter(ProgramLesson.id == id)
            .first()
        )

    def get_by_module(self, db: Session, *, module_id: int) -> List[ProgramLesson]:
        return (
            db.query(ProgramLesson)
            .options(selectinload(ProgramLesson.resources))
            .filter(ProgramLesson.module_id == module_id)
            .order_by(ProgramLesson.order_index, ProgramLesson.id)
            .all()
        )

    def get_by_ids_with_resources(self, db: Session, *, lesson_ids: List[int]) -> List[ProgramLesson]:
        """Secondary keyed fetch so resources never share a join with lessons."""
        if not lesson_ids:
            return []
        return (
            db.query(ProgramLesson)
            .options(selectinload(ProgramLesson.resources))
            .filter(ProgramLesson.id.in_(lesson_ids))
            .all()
        )

    def get_published_by_program(self, db: Session, *, program_id: int) -> List[ProgramLesson]:
        """Published lessons under published modules, in display order."""
        return (
            db.query(ProgramLesson)
            .join(ProgramModule, ProgramModule.id == ProgramLesson.module_id)
            .options(selectinload(ProgramLesson.module))
            .filter(
                ProgramModule.program_id == program_id,
                ProgramModule.is_published == True,
                ProgramLesson.is_published == True,
            )
            .order_by(ProgramModule.order_index, ProgramModule.id, ProgramLesson.order_index, ProgramLesson.id)
            .all()
        )

program_lesson = CRUDProgramLesson(ProgramLesson)
