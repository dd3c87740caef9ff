from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.core.database import Base

class ProgramLesson(Base):
    __tablename__ = "program_lessons"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    content = Column(Text, nullable=True)
    video_url = Column(String, nullable=True)
    duration_minutes = Column(Integer, nullable=True)
    order_index = Column(Integer, nullable=False, default=0)
    is_published = Column(Boolean, nullable=False, default=False)
    is_preview = Column(Boolean, nullable=False, default=False)
    module_id = Column(Integer, ForeignKey("program_modules.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    module = relationship("ProgramModule", back_populates="lessons")
    resources = relationship(
        "ProgramResource",
        back_populates="lesson",
        cascade="all, delete-orphan",
        order_by="ProgramResource.order_index",
    )
    progress_records = relationship("LessonProgress", back_populates="lesson", cascade="all, delete-orphan")

    @property
    def program_id(self):
        return self.module.program_id if self.module else None
