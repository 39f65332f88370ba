"""
TechAnalysis model — website capability flags + classifier output, one per lead.
"""
from sqlalchemy import Column, Integer, Text, Boolean, DateTime, JSON, ForeignKey
from sqlalchemy.sql import func

from app.database import Base


class TechAnalysis(Base):
    __tablename__ = 'lead_tech_analysis'

    id = Column(Integer, primary_key=True, autoincrement=True)
    lead_id = Column(Integer, ForeignKey('leads.id'), nullable=False, unique=True)
    technologies = Column(JSON, default=list)
    has_online_scheduling = Column(Boolean, default=False)
    has_patient_portal = Column(Boolean, default=False)
    has_text_reminders = Column(Boolean, default=False)
    has_digital_forms = Column(Boolean, default=False)
    has_online_payments = Column(Boolean, default=False)
    has_virtual_consults = Column(Boolean, default=False)
    has_advanced_imaging = Column(Boolean, default=False)
    website_text_excerpt = Column(Text, nullable=True)
    llm_specialties = Column(JSON, default=list)
    llm_notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
