from typing import List, Optional
from sqlalchemy.orm import Session, selectinload

from app.crud.base import CRUDBase, OrderedCRUDMixin
from app.models.program_module import ProgramModule
from app.models.program_lesson import ProgramLesson
from app.schemas.content import ModuleCreate, ModuleUpdate

class CRUDProgramModule(OrderedCRUDMixin, CRUDBase[ProgramModule, ModuleCreate, ModuleUpdate]):
    parent_field = "program_id"

    def get(self, db: Session, id: int) -> Optional[ProgramModule]:
        return (
            db.query(ProgramModule)
            .options(selectinload(ProgramModule.program))
            .filter(ProgramModule.id == id)
            .first()
        )

    def get_published_with_lessons(self, db: Session, *, program_id: int) -> List[ProgramModule]:
        """First pass of the learning-content fetch: modules plus their lessons only."""
        return (
            db.query(ProgramModule)
            .options(selectinload(ProgramModule.lessons))
            .filter(ProgramModule.program_id == program_id, ProgramModule.is_published == True)
            .order_by(ProgramModule.order_index, ProgramModule.id)
            .all()
        )

    def get_with_lessons(self, db: Session, *, program_id: int) -> List[ProgramModule]:
        return (
            db.query(ProgramModule)
            .options(selectinload(ProgramModule.lessons).selectinload(ProgramLesson.resources))
            .filter(ProgramModule.program_id == program_id)
            .order_by(ProgramModule.order_index, ProgramModule.id)
            .all()
        )

program_module = CRUDProgramModule(ProgramModule)
