"""policy export history and employee VIP codes

Revision ID: 7b4e2d91c5a3
Revises: 3f1a9c2d7e10
Create Date: 2026-10-20 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '7b4e2d91c5a3'
down_revision: Union[str, Sequence[str], None] = '3f1a9c2d7e10'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # insurance_company already exists from the initial revision
    insurer = postgresql.ENUM(
        'Sanlam Sky', 'Avbob', 'Old Mutual', 'Provident Fund',
        name='insurance_company', create_type=False,
    )
    op.create_table(
        'policy_exports',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('export_name', sa.String(length=255), nullable=False),
        sa.Column('company', insurer, nullable=True),
        sa.Column('month', sa.Date(), nullable=False),
        sa.Column('total_amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('format', sa.String(length=10), nullable=False, server_default='csv'),
        sa.Column('created_by', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_policy_exports_created_by', 'policy_exports', ['created_by'])

    with op.batch_alter_table('employees') as batch:
        batch.add_column(sa.Column('vip_code', sa.String(length=32), nullable=True))
        batch.add_column(sa.Column('vip_code_requested', sa.Boolean(), nullable=False,
                                   server_default=sa.false()))
        batch.add_column(sa.Column('vip_code_request_date', sa.DateTime(), nullable=True))
        batch.add_column(sa.Column('vip_code_status', sa.String(length=20), nullable=False,
                                   server_default='Not Requested'))


def downgrade() -> None:
    with op.batch_alter_table('employees') as batch:
        batch.drop_column('vip_code_status')
        batch.drop_column('vip_code_request_date')
        batch.drop_column('vip_code_requested')
        batch.drop_column('vip_code')

    op.drop_index('ix_policy_exports_created_by', table_name='policy_exports')
    op.drop_table('policy_exports')
