from pydantic import BaseModel, ConfigDict
from datetime import datetime

from app.core.constants import EnrollmentStatusEnum

class Enrollment(BaseModel):
    id: int
    user_id: int
    program_id: int
    program_name: str
    status: EnrollmentStatusEnum
    enrolled_at: datetime

    model_config = ConfigDict(from_attributes=True, use_enum_values=True)
