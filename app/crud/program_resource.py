from typing import Optional
from sqlalchemy.orm import Session, selectinload

from app.crud.base import CRUDBase, OrderedCRUDMixin
from app.models.program_resource import ProgramResource
from app.models.program_lesson import ProgramLesson
from app.models.program_module import ProgramModule
from app.schemas.content import ResourceCreate, ResourceUpdate

class CRUDProgramResource(OrderedCRUDMixin, CRUDBase[ProgramResource, ResourceCreate, ResourceUpdate]):
    parent_field = "lesson_id"

    def get(self, db: Session, id: int) -> Optional[ProgramResource]:
        return (
            db.query(ProgramResource)
            .options(
                selectinload(ProgramResource.lesson)
                .selectinload(ProgramLesson.module)
                .selectinload(ProgramModule.program)
            )
            .filter(ProgramResource.id == id)
            .first()
        )

program_resource = CRUDProgramResource(ProgramResource)
