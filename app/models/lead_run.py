"""
LeadRun model — one row per submitted crawl job.

`meta` holds the submission options (location, preset, thresholds, keyword
filters). The crawler's completion webhook carries none of them, so this row
is the only place they can be recovered from.
"""
from sqlalchemy import Column, Integer, Text, DateTime, JSON
from sqlalchemy.sql import func

from app.database import Base


class LeadRun(Base):
    __tablename__ = 'lead_runs'

    id = Column(Integer, primary_key=True, autoincrement=True)
    source = Column(Text, nullable=False, default='google_places')
    actor_id = Column(Text, nullable=False)
    run_id = Column(Text, nullable=False, unique=True)
    status = Column(Text, nullable=False, default='pending')  # pending/succeeded/failed
    meta = Column(JSON, default=dict)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    finished_at = Column(DateTime(timezone=True), nullable=True)
