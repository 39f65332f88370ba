"""
LeadEvent model — append-only audit trail per lead (created/rescored/contacts_found).
"""
from sqlalchemy import Column, Integer, Text, DateTime, JSON, ForeignKey
from sqlalchemy.sql import func

from app.database import Base


class LeadEvent(Base):
    __tablename__ = 'lead_events'

    id = Column(Integer, primary_key=True, autoincrement=True)
    lead_id = Column(Integer, ForeignKey('leads.id'), nullable=False, index=True)
    event_type = Column(Text, nullable=False)
    payload = Column(JSON, default=dict)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
