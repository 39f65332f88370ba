"""
Lead model — one row per discovered dental practice.

Identity is fuzzy: a re-sighted business matches on google_place_id, domain
or phone (see app.pipeline.identity). Score columns are derived and rewritten
by every rescore.
"""
from sqlalchemy import Column, Integer, Float, Text, Boolean, DateTime, JSON
from sqlalchemy.sql import func

from app.database import Base


class Lead(Base):
    __tablename__ = 'leads'

    id = Column(Integer, primary_key=True, autoincrement=True)
    google_place_id = Column(Text, nullable=True, index=True)
    name = Column(Text, default='')
    address = Column(Text, nullable=True)
    city = Column(Text, nullable=True)
    state = Column(Text, nullable=True)
    postal_code = Column(Text, nullable=True)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    phone = Column(Text, nullable=True, index=True)
    website = Column(Text, nullable=True)
    domain = Column(Text, nullable=True, index=True)
    email = Column(Text, nullable=True)
    rating = Column(Float, nullable=True)
    review_count = Column(Integer, nullable=True)
    categories = Column(JSON, default=list)
    opening_hours = Column(JSON, default=dict)
    temporarily_closed = Column(Boolean, default=False)
    permanently_closed = Column(Boolean, default=False)

    # Score (derived)
    tech_score = Column(Integer, nullable=True)
    tech_tier = Column(Text, nullable=True)
    investment_level = Column(Text, nullable=True)
    qualification_status = Column(Text, nullable=True)
    final_score = Column(Integer, nullable=True)
    final_score_explanation = Column(Text, nullable=True)

    first_seen_at = Column(DateTime(timezone=True), server_default=func.now())
    last_seen_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
