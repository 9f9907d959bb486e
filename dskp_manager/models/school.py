from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from dskp_manager.database import Base
from dskp_manager.utils.time_utils import get_local_time

class SchoolClass(Base):
    __tablename__ = "classes"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=True) # e.g. 4 Bestari
    year = Column(String, nullable=False) # Year level, e.g. "4"
    created_at = Column(DateTime, default=get_local_time)

    subjects = relationship("Subject", back_populates="school_class")

class Subject(Base):
    __tablename__ = "subjects"

    id = Column(Integer, primary_key=True, index=True)
    class_id = Column(Integer, ForeignKey("classes.id"), nullable=False, index=True)
    name = Column(String, nullable=False) # BM, English, Matematik
    created_at = Column(DateTime, default=get_local_time)

    school_class = relationship("SchoolClass", back_populates="subjects")
    dskp_items = relationship("DSKPItem", back_populates="subject")

class DSKPItem(Base):
    __tablename__ = "dskp_items"

    id = Column(Integer, primary_key=True, index=True)
    subject_id = Column(Integer, ForeignKey("subjects.id"), nullable=False, index=True)
    sk = Column(Text, nullable=False) # Standard Kandungan
    sp = Column(Text, nullable=False) # Standard Pembelajaran
    created_at = Column(DateTime, default=get_local_time)

    subject = relationship("Subject", back_populates="dskp_items")
