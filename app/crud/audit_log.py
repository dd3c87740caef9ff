from typing import List
from sqlalchemy.orm import Session

from app.crud.base import CRUDBase
from app.models.audit_log import AuditLog
from pydantic import BaseModel

class CRUDAuditLog(CRUDBase[AuditLog, BaseModel, BaseModel]):
    def get_recent(self, db: Session, *, limit: int = 50) -> List[AuditLog]:
        return db.query(AuditLog).order_by(AuditLog.id.desc()).limit(limit).all()

audit_log = CRUDAuditLog(AuditLog)
