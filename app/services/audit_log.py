import logging
from typing import Optional
from sqlalchemy.orm import Session

from app.core.constants import SYSTEM_ACTOR_NAME
from app.crud.audit_log import audit_log as crud_audit_log
from app.models.audit_log import AuditLog
from app.models.user import User

logger = logging.getLogger(__name__)


class AuditLogService:
    """Append-only audit sink. Entries join the caller's transaction and persist on its commit."""

    def record(self, db: Session, actor: Optional[User], action: str) -> AuditLog:
        actor_name = actor.display_name if actor is not None else SYSTEM_ACTOR_NAME
        entry = crud_audit_log.create(db, obj_in={"actor": actor_name, "action": action}, commit=False)
        logger.info(f"Audit: {actor_name} - {action}")
        return entry

audit_log_service = AuditLogService()
