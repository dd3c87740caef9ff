from sqlalchemy import Column, Integer, ForeignKey, DateTime, Boolean, UniqueConstraint, func
from sqlalchemy.orm import relationship
from app.core.database import Base


class LessonProgress(Base):
    __tablename__ = "lesson_progress"
    __table_args__ = (UniqueConstraint("user_id", "lesson_id", name="uq_lesson_progress_user_lesson"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    lesson_id = Column(Integer, ForeignKey("program_lessons.id", ondelete="CASCADE"), nullable=False, index=True)
    program_id = Column(Integer, ForeignKey("programs.id", ondelete="CASCADE"), nullable=False, index=True)
    is_completed = Column(Boolean, nullable=False, default=False)
    completed_at = Column(DateTime, nullable=True)
    watch_time_seconds = Column(Integer, nullable=False, default=0)
    last_watched_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now(), nullable=True)

    lesson = relationship("ProgramLesson", back_populates="progress_records")

    def mark_completed(self, now):
        if not self.is_completed:
            self.is_completed = True
            self.completed_at = now
        self.last_watched_at = now

    def mark_incomplete(self, now):
        self.is_completed = False
        self.completed_at = None
        self.last_watched_at = now

    def add_watch_time(self, seconds: int, now):
        self.watch_time_seconds = (self.watch_time_seconds or 0) + seconds
        self.last_watched_at = now
