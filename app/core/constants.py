from enum import Enum


SYSTEM_ACTOR_NAME = "System user"
RESOURCES_SUBDIRECTORY = "resources"

class RoleEnum(str, Enum):
    ADMIN = "admin"
    INSTRUCTOR = "instructor"
    USER = "user"

class DifficultyLevelEnum(str, Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"

class EnrollmentStatusEnum(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


def enum_values(enum_cls):
    """Persist enum values rather than member names."""
    return [member.value for member in enum_cls]
