import logging
from typing import Optional
from sqlalchemy.orm import Session

from app.core.constants import RoleEnum
from app.core.exceptions import UnauthorizedError
from app.crud.enrollment import enrollment as crud_enrollment
from app.models.program import Program
from app.models.user import User

logger = logging.getLogger(__name__)


class PermissionHelper:
    @staticmethod
    def is_admin(user: User) -> bool:
        return user.role == RoleEnum.ADMIN

    @staticmethod
    def is_instructor(user: User) -> bool:
        return user.role == RoleEnum.INSTRUCTOR

    @staticmethod
    def is_learner(user: User) -> bool:
        return user.role == RoleEnum.USER

    @staticmethod
    def can_manage(user: User, owner_id: Optional[int]) -> bool:
        """Single capability check for every write on a program and its content."""
        if PermissionHelper.is_admin(user):
            return True
        return owner_id is not None and user.id == owner_id

    @staticmethod
    def is_enrolled(db: Session, user: User, program: Program) -> bool:
        try:
            return crud_enrollment.exists(db, user_id=user.id, program_id=program.id)
        except Exception as e:
            # Fail closed: a broken enrollment lookup never grants access.
            logger.error(f"Enrollment check failed for user {user.id} on program {program.id}: {e}", exc_info=True)
            return False

    @staticmethod
    def can_view_program(db: Session, user: User, program: Program) -> bool:
        if PermissionHelper.is_admin(user):
            return True
        if PermissionHelper.is_instructor(user) and PermissionHelper.can_manage(user, program.instructor_id):
            return True
        if PermissionHelper.is_learner(user):
            return PermissionHelper.is_enrolled(db, user, program)
        return False

    @staticmethod
    def require_not_learner(user: User, error_message: str = "Learners cannot perform this action."):
        if PermissionHelper.is_learner(user):
            raise UnauthorizedError(error_message)

    @staticmethod
    def require_program_management_permission(user: User, program: Program, error_message: Optional[str] = None):
        if not PermissionHelper.can_manage(user, program.instructor_id):
            raise UnauthorizedError(error_message or "You don't have permission to modify this program")

    @staticmethod
    def require_program_view_permission(db: Session, user: User, program: Program):
        if not PermissionHelper.can_view_program(db, user, program):
            logger.warning(f"Access denied for user {user.id} to program {program.id}")
            raise UnauthorizedError("You don't have access to this program")
