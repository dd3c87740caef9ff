from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Enum, Numeric, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.core.database import Base
from app.core.constants import DifficultyLevelEnum, enum_values

class Program(Base):
    __tablename__ = "programs"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, unique=True, index=True, nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Numeric(10, 2), nullable=False, default=0)
    duration = Column(Integer, nullable=False)  # Duration in days
    difficulty_level = Column(Enum(DifficultyLevelEnum, values_callable=enum_values), nullable=False, default=DifficultyLevelEnum.BEGINNER)
    category = Column(String, nullable=True)
    location = Column(String, nullable=True)
    instructor_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    instructor = relationship("User", back_populates="programs")
    modules = relationship(
        "ProgramModule",
        back_populates="program",
        cascade="all, delete-orphan",
        order_by="ProgramModule.order_index",
    )
    enrollments = relationship("Enrollment", back_populates="program", cascade="all, delete-orphan")
    progress_records = relationship("ProgramProgress", back_populates="program", cascade="all, delete-orphan")

    @property
    def instructor_name(self):
        return self.instructor.display_name if self.instructor else None
