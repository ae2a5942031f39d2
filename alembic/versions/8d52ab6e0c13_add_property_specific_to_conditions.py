"""add is_property_specific to promotion conditions

Revision ID: 8d52ab6e0c13
Revises: 3c9e1f4a7b20
Create Date: 2025-03-11 16:40:02.901577

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '8d52ab6e0c13'
down_revision: Union[str, None] = '3c9e1f4a7b20'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade():
    op.add_column(
        'promotion_conditions',
        sa.Column('is_property_specific', sa.Boolean(), nullable=False, server_default=sa.false()),
    )
    # Rows whose house and condo counts already differ were split targets all along
    op.execute(
        "UPDATE promotion_conditions SET is_property_specific = TRUE "
        "WHERE target_count_house <> target_count_condo"
    )

def downgrade():
    op.drop_column('promotion_conditions', 'is_property_specific')
