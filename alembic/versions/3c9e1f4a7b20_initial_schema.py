"""initial schema

Revision ID: 3c9e1f4a7b20
Revises: 
Create Date: 2025-03-04 10:12:41.318204

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3c9e1f4a7b20'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'ranks',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('rank_name', sa.String(), nullable=False),
        sa.Column('rank_level', sa.Integer(), nullable=False, unique=True),
        sa.Column('manual_promotion', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('time_requirement_months', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_table(
        'kpis',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('kpi_name', sa.String(), nullable=False),
        sa.Column('kpi_type', sa.String(), nullable=False),
        sa.Column('kpi_description', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_table(
        'requirements',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('requirement_name', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_table(
        'code_of_honor',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('code_of_honor_name', sa.String(), nullable=False),
        sa.Column('explanation', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_table(
        'agents',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('mentor_id', sa.Integer(), nullable=True, index=True),
        sa.Column('starting_date', sa.Date(), nullable=True),
        sa.Column('property_type', sa.String(), nullable=False, server_default='Condo'),
        sa.Column('rank_id', sa.Integer(), sa.ForeignKey('ranks.id'), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_table(
        'promotion_conditions',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('rank_id', sa.Integer(), sa.ForeignKey('ranks.id'), nullable=False, index=True),
        sa.Column('kpi_id', sa.Integer(), sa.ForeignKey('kpis.id'), nullable=True),
        sa.Column('requirement_id', sa.Integer(), sa.ForeignKey('requirements.id'), nullable=True),
        sa.Column('target_count_house', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('target_count_condo', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('minimum_skillset_score', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('timeframe_days', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_table(
        'weeks',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('agent_id', sa.Integer(), sa.ForeignKey('agents.id'), nullable=False, index=True),
        sa.Column('week_number', sa.Integer(), nullable=False),
        sa.Column('month_number', sa.Integer(), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint('agent_id', 'week_number', name='uq_agent_week_number'),
    )
    op.create_table(
        'week_kpi_actions',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('week_id', sa.Integer(), sa.ForeignKey('weeks.id'), nullable=False, index=True),
        sa.Column('kpi_id', sa.Integer(), sa.ForeignKey('kpis.id'), nullable=False),
        sa.Column('count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('target', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('enabled', sa.Boolean(), nullable=False, server_default=sa.true()),
    )
    op.create_table(
        'week_kpi_skillsets',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('week_id', sa.Integer(), sa.ForeignKey('weeks.id'), nullable=False, index=True),
        sa.Column('kpi_id', sa.Integer(), sa.ForeignKey('kpis.id'), nullable=False),
        sa.Column('wording', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('tonality', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('rapport', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('target', sa.Integer(), nullable=False, server_default='0'),
    )
    op.create_table(
        'week_requirements',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('week_id', sa.Integer(), sa.ForeignKey('weeks.id'), nullable=False, index=True),
        sa.Column('requirement_id', sa.Integer(), sa.ForeignKey('requirements.id'), nullable=False),
        sa.Column('count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('target', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('enabled', sa.Boolean(), nullable=False, server_default=sa.true()),
    )
    op.create_table(
        'week_violations',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('week_id', sa.Integer(), sa.ForeignKey('weeks.id'), nullable=False, index=True),
        sa.Column('rule_id', sa.Integer(), sa.ForeignKey('code_of_honor.id'), nullable=False),
        sa.Column('remark', sa.Text(), nullable=True),
        sa.Column('resolved', sa.Boolean(), nullable=False, server_default=sa.false()),
    )


def downgrade() -> None:
    op.drop_table('week_violations')
    op.drop_table('week_requirements')
    op.drop_table('week_kpi_skillsets')
    op.drop_table('week_kpi_actions')
    op.drop_table('weeks')
    op.drop_table('promotion_conditions')
    op.drop_table('agents')
    op.drop_table('code_of_honor')
    op.drop_table('requirements')
    op.drop_table('kpis')
    op.drop_table('ranks')
