from sqlalchemy import Column, String, DateTime, Text, ForeignKey, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from .db import Base
import uuid

def uid() -> str:
    return str(uuid.uuid4())

class Profile(Base):
    __tablename__ = "profiles"
    id = Column(String, primary_key=True, default=uid)
    profile_name = Column(String, nullable=False)
    email = Column(String, nullable=False)
    full_name = Column(String, nullable=True)
    title = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    location = Column(String, nullable=True)
    summary = Column(Text, nullable=True)
    skills = Column(JSON, nullable=True)        # list[str]
    links = Column(JSON, nullable=True)         # [{type, url}]
    education = Column(JSON, nullable=True)
    experiences = Column(JSON, nullable=True)
    projects = Column(JSON, nullable=True)
    activities = Column(JSON, nullable=True)
    volunteering = Column(JSON, nullable=True)
    certificates = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    cvs = relationship("Cv", back_populates="profile", cascade="all, delete-orphan")

class Cv(Base):
    __tablename__ = "cvs"
    id = Column(String, primary_key=True, default=uid)
    profile_id = Column(String, ForeignKey("profiles.id", ondelete="CASCADE"), index=True, nullable=False)
    job_description = Column(Text, nullable=False)
    pdf_path = Column(String, nullable=True)  # relative to FILES_DIR
    cv_data = Column(JSON, nullable=True)     # last validated document, stored verbatim
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    profile = relationship("Profile", back_populates="cvs")
