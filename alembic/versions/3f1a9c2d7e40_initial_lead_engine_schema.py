"""Initial lead engine schema: leads, tech analysis, runs, events

Revision ID: 3f1a9c2d7e40
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1a9c2d7e40'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'leads',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('google_place_id', sa.Text(), nullable=True),
        sa.Column('name', sa.Text(), nullable=True),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('city', sa.Text(), nullable=True),
        sa.Column('state', sa.Text(), nullable=True),
        sa.Column('postal_code', sa.Text(), nullable=True),
        sa.Column('latitude', sa.Float(), nullable=True),
        sa.Column('longitude', sa.Float(), nullable=True),
        sa.Column('phone', sa.Text(), nullable=True),
        sa.Column('website', sa.Text(), nullable=True),
        sa.Column('domain', sa.Text(), nullable=True),
        sa.Column('email', sa.Text(), nullable=True),
        sa.Column('rating', sa.Float(), nullable=True),
        sa.Column('review_count', sa.Integer(), nullable=True),
        sa.Column('categories', sa.JSON(), nullable=True),
        sa.Column('opening_hours', sa.JSON(), nullable=True),
        sa.Column('temporarily_closed', sa.Boolean(), nullable=True),
        sa.Column('permanently_closed', sa.Boolean(), nullable=True),
        sa.Column('tech_score', sa.Integer(), nullable=True),
        sa.Column('tech_tier', sa.Text(), nullable=True),
        sa.Column('investment_level', sa.Text(), nullable=True),
        sa.Column('qualification_status', sa.Text(), nullable=True),
        sa.Column('final_score', sa.Integer(), nullable=True),
        sa.Column('final_score_explanation', sa.Text(), nullable=True),
        sa.Column('first_seen_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('last_seen_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_leads_google_place_id', 'leads', ['google_place_id'])
    op.create_index('ix_leads_domain', 'leads', ['domain'])
    op.create_index('ix_leads_phone', 'leads', ['phone'])

    op.create_table(
        'lead_tech_analysis',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('lead_id', sa.Integer(), sa.ForeignKey('leads.id'), nullable=False, unique=True),
        sa.Column('technologies', sa.JSON(), nullable=True),
        sa.Column('has_online_scheduling', sa.Boolean(), nullable=True),
        sa.Column('has_patient_portal', sa.Boolean(), nullable=True),
        sa.Column('has_text_reminders', sa.Boolean(), nullable=True),
        sa.Column('has_digital_forms', sa.Boolean(), nullable=True),
        sa.Column('has_online_payments', sa.Boolean(), nullable=True),
        sa.Column('has_virtual_consults', sa.Boolean(), nullable=True),
        sa.Column('has_advanced_imaging', sa.Boolean(), nullable=True),
        sa.Column('website_text_excerpt', sa.Text(), nullable=True),
        sa.Column('llm_specialties', sa.JSON(), nullable=True),
        sa.Column('llm_notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    op.create_table(
        'lead_runs',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('source', sa.Text(), nullable=False),
        sa.Column('actor_id', sa.Text(), nullable=False),
        sa.Column('run_id', sa.Text(), nullable=False, unique=True),
        sa.Column('status', sa.Text(), nullable=False),
        sa.Column('meta', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('finished_at', sa.DateTime(timezone=True), nullable=True),
    )

    op.create_table(
        'lead_events',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('lead_id', sa.Integer(), sa.ForeignKey('leads.id'), nullable=False),
        sa.Column('event_type', sa.Text(), nullable=False),
        sa.Column('payload', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_lead_events_lead_id', 'lead_events', ['lead_id'])


def downgrade() -> None:
    op.drop_index('ix_lead_events_lead_id', table_name='lead_events')
    op.drop_table('lead_events')
    op.drop_table('lead_runs')
    op.drop_table('lead_tech_analysis')
    op.drop_index('ix_leads_phone', table_name='leads')
    op.drop_index('ix_leads_domain', table_name='leads')
    op.drop_index('ix_leads_google_place_id', table_name='leads')
    op.drop_table('leads')
