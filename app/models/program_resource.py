from sqlalchemy import Column, Integer, String, BigInteger, DateTime, ForeignKey, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.core.database import Base

class ProgramResource(Base):
    __tablename__ = "program_resources"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    file_url = Column(String, nullable=False)
    file_type = Column(String, nullable=False)  # PDF, DOC, VIDEO, IMAGE or a MIME type
    file_size_bytes = Column(BigInteger, nullable=True)
    order_index = Column(Integer, nullable=False, default=0)
    lesson_id = Column(Integer, ForeignKey("program_lessons.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    lesson = relationship("ProgramLesson", back_populates="resources")
