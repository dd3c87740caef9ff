import logging
from typing import List
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.constants import EnrollmentStatusEnum
from app.core.exceptions import ConflictError, NotFoundError, UnauthorizedError
from app.crud.enrollment import enrollment as crud_enrollment
from app.crud.program import program as crud_program
from app.models.enrollment import Enrollment as EnrollmentModel
from app.models.user import User
from app.schemas.enrollment import Enrollment as EnrollmentSchema
from app.services.audit_log import AuditLogService, audit_log_service
from app.services.progress import ProgressService, progress_service
from app.utils.permission import PermissionHelper as permission_helper

logger = logging.getLogger(__name__)


class EnrollmentService:
    def __init__(self, audit_log: AuditLogService, progress: ProgressService):
        self.audit_log = audit_log
        self.progress = progress

    def _to_schema(self, enrollment: EnrollmentModel) -> EnrollmentSchema:
        return EnrollmentSchema(
            id=enrollment.id,
            user_id=enrollment.user_id,
            program_id=enrollment.program_id,
            program_name=enrollment.program.name,
            status=enrollment.status,
            enrolled_at=enrollment.enrolled_at,
        )

    def enroll(self, db: Session, program_id: int, current_user: User) -> EnrollmentSchema:
        if not permission_helper.is_learner(current_user):
            raise UnauthorizedError("Only learner accounts can enroll in programs.")

        program = crud_program.get(db, id=program_id)
        if not program or not program.is_active:
            raise NotFoundError("Program not found.")

        if crud_enrollment.exists(db, user_id=current_user.id, program_id=program.id):
            raise ConflictError("You are already enrolled in this program.")

        try:
            new_enrollment = crud_enrollment.create(
                db,
                obj_in={
                    "user_id": current_user.id,
                    "program_id": program.id,
                    "status": EnrollmentStatusEnum.ACTIVE,
                },
                commit=False,
            )
        except IntegrityError:
            db.rollback()
            raise ConflictError("You are already enrolled in this program.")

        self.progress.initialize_progress(db, current_user.id, program.id)
        self.audit_log.record(db, current_user, f"Enrolled in program: {program.name}")
        db.commit()
        db.refresh(new_enrollment)
        logger.info(f"User {current_user.id} enrolled in program {program.id}")
        return self._to_schema(new_enrollment)

    def unenroll(self, db: Session, program_id: int, current_user: User) -> EnrollmentSchema:
        enrollment = crud_enrollment.get_by_user_and_program(db, user_id=current_user.id, program_id=program_id)
        if not enrollment:
            raise NotFoundError("Enrollment not found.")

        removed = self._to_schema(enrollment)
        crud_enrollment.delete(db, id=enrollment.id, commit=False)
        self.audit_log.record(db, current_user, f"Unenrolled from program: {removed.program_name}")
        db.commit()
        return removed

    def list_my_enrollments(self, db: Session, current_user: User) -> List[EnrollmentSchema]:
        return [self._to_schema(e) for e in crud_enrollment.get_by_user(db, user_id=current_user.id)]

enrollment_service = EnrollmentService(audit_log=audit_log_service, progress=progress_service)
