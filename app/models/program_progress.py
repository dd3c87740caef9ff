from sqlalchemy import Column, Integer, Float, ForeignKey, DateTime, Boolean, UniqueConstraint, func
from sqlalchemy.orm import relationship
from app.core.database import Base


class ProgramProgress(Base):
    __tablename__ = "program_progress"
    __table_args__ = (UniqueConstraint("user_id", "program_id", name="uq_program_progress_user_program"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    program_id = Column(Integer, ForeignKey("programs.id", ondelete="CASCADE"), nullable=False, index=True)
    total_lessons = Column(Integer, nullable=False, default=0)
    completed_lessons = Column(Integer, nullable=False, default=0)
    progress_percentage = Column(Float, nullable=False, default=0.0)
    total_watch_time_seconds = Column(Integer, nullable=False, default=0)
    is_program_completed = Column(Boolean, nullable=False, default=False)
    started_at = Column(DateTime, nullable=True)
    last_accessed_at = Column(DateTime, nullable=True)
    completed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now(), nullable=True)

    program = relationship("Program", back_populates="progress_records")

    def apply_counts(self, total_lessons: int, completed_lessons: int, total_watch_time_seconds: int, now) -> bool:
        """Store a fresh rollup. Returns True when this call completed the program."""
        was_completed = bool(self.is_program_completed)
        self.total_lessons = total_lessons
        self.completed_lessons = completed_lessons
        self.total_watch_time_seconds = total_watch_time_seconds
        self.progress_percentage = calculate_percentage(completed_lessons, total_lessons)
        self.is_program_completed = total_lessons > 0 and completed_lessons == total_lessons
        self.last_accessed_at = now

        if self.is_program_completed and not was_completed:
            self.completed_at = now
        elif not self.is_program_completed:
            self.completed_at = None
        return self.is_program_completed and not was_completed


def calculate_percentage(completed_lessons: int, total_lessons: int) -> float:
    if total_lessons <= 0:
        return 0.0
    return completed_lessons / total_lessons * 100.0
