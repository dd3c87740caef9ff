import logging
from decimal import Decimal
from typing import Optional
from sqlalchemy.orm import Session

from app.core.constants import RoleEnum
from app.core.exceptions import AlreadyExistsError, NotFoundError, ValidationError
from app.crud.program import program as crud_program
from app.crud.user import user as crud_user
from app.models.program import Program as ProgramModel
from app.models.user import User
from app.schemas.program import ProgramCreate, ProgramUpdate, Program as ProgramSchema
from app.schemas.response import PaginatedData
from app.services.audit_log import AuditLogService, audit_log_service
from app.utils.permission import PermissionHelper as permission_helper

logger = logging.getLogger(__name__)


class ProgramService:
    def __init__(self, audit_log: AuditLogService):
        self.audit_log = audit_log

    def _validate_fields(self, price: Optional[Decimal], duration: Optional[int]):
        if price is not None and price < 0:
            raise ValidationError("Price cannot be negative.")
        if duration is not None and duration <= 0:
            raise ValidationError("Duration must be greater than zero.")

    def get_program_or_404(self, db: Session, program_id: int) -> ProgramModel:
        program = crud_program.get(db, id=program_id)
        if not program:
            raise NotFoundError("Program not found.")
        return program

    def _resolve_instructor_id(self, db: Session, program_in: ProgramCreate, current_user: User) -> int:
        if program_in.instructor_id is None or program_in.instructor_id == current_user.id:
            return current_user.id
        if not permission_helper.is_admin(current_user):
            raise ValidationError("Only admins can create programs for another instructor.")
        instructor = crud_user.get(db, id=program_in.instructor_id)
        if not instructor:
            raise NotFoundError("Instructor not found.")
        if instructor.role != RoleEnum.INSTRUCTOR:
            raise ValidationError("Programs can only be assigned to instructors.")
        return instructor.id

    def create_program(self, db: Session, program_in: ProgramCreate, current_user: User) -> ProgramSchema:
        permission_helper.require_not_learner(current_user, "Learners cannot create programs.")
        self._validate_fields(program_in.price, program_in.duration)

        if crud_program.get_by_name(db, name=program_in.name):
            raise AlreadyExistsError(f"Program with name '{program_in.name}' already exists.")

        program_data = program_in.model_dump(exclude={"instructor_id"})
        program_data["instructor_id"] = self._resolve_instructor_id(db, program_in, current_user)
        new_program = crud_program.create(db, obj_in=program_data, commit=False)

        self.audit_log.record(db, current_user, f"Created program: {new_program.name}")
        db.commit()
        db.refresh(new_program)
        logger.info(f"Program {new_program.id} created by user {current_user.id}")
        return ProgramSchema.model_validate(new_program)

    def get_program(self, db: Session, program_id: int, current_user: User) -> ProgramSchema:
        program = self.get_program_or_404(db, program_id)
        if not program.is_active and not permission_helper.can_manage(current_user, program.instructor_id):
            raise NotFoundError("Program not found.")
        return ProgramSchema.model_validate(program)

    def list_programs(
        self,
        db: Session,
        current_user: User,
        skip: int = 0,
        limit: int = 100,
        instructor_id: Optional[int] = None,
    ) -> PaginatedData[ProgramSchema]:
        # Inactive programs are only listed for admins or an instructor's own catalogue.
        active_only = not (
            permission_helper.is_admin(current_user)
            or (instructor_id is not None and permission_helper.can_manage(current_user, instructor_id))
        )
        programs = crud_program.get_filtered(
            db, skip=skip, limit=limit, instructor_id=instructor_id, active_only=active_only
        )
        total = crud_program.count_filtered(db, instructor_id=instructor_id, active_only=active_only)
        return PaginatedData[ProgramSchema](
            items=[ProgramSchema.model_validate(p) for p in programs],
            total=total,
            skip=skip,
            limit=limit,
        )

    def update_program(self, db: Session, program_id: int, program_in: ProgramUpdate, current_user: User) -> ProgramSchema:
        program = self.get_program_or_404(db, program_id)
        permission_helper.require_program_management_permission(current_user, program)

        update_data = program_in.model_dump(exclude_unset=True)
        self._validate_fields(update_data.get("price"), update_data.get("duration"))

        if "name" in update_data:
            name = (update_data["name"] or "").strip()
            if not name:
                raise ValidationError("Program name cannot be empty.")
            existing = crud_program.get_by_name(db, name=name)
            if existing and existing.id != program.id:
                raise AlreadyExistsError(f"Program with name '{name}' already exists.")
            update_data["name"] = name

        updated_program = crud_program.update(db, db_obj=program, obj_in=update_data, commit=False)
        self.audit_log.record(db, current_user, f"Updated program: {updated_program.name}")
        db.commit()
        db.refresh(updated_program)
        return ProgramSchema.model_validate(updated_program)

    def delete_program(self, db: Session, program_id: int, current_user: User) -> ProgramSchema:
        program = self.get_program_or_404(db, program_id)
        permission_helper.require_program_management_permission(current_user, program)

        deleted = ProgramSchema.model_validate(program)
        crud_program.delete(db, id=program_id, commit=False)
        self.audit_log.record(db, current_user, f"Deleted program: {deleted.name}")
        db.commit()
        logger.info(f"Program {program_id} deleted by user {current_user.id}")
        return deleted

program_service = ProgramService(audit_log=audit_log_service)
