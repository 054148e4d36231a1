"""initial setup

Revision ID: 3f2a9c41d7b8
Revises:
Create Date: 2024-01-08 18:02:11.530212

"""
from alembic import op
import sqlalchemy as sa


revision = '3f2a9c41d7b8'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table('aircraft',
                    sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
                    sa.Column('model', sa.String(length=255), nullable=False),
                    sa.Column('registration', sa.String(length=255), nullable=False),
                    sa.Column('airline', sa.String(length=255), nullable=False),
                    sa.Column('status', sa.String(length=255), nullable=False),
                    sa.Column('homebase', sa.String(length=1024), nullable=False),
                    sa.Column('description', sa.String(length=1024), nullable=False),
                    sa.Column('created_at', sa.DateTime(), nullable=False),
                    sa.Column('updated_at', sa.DateTime(), nullable=False),
                    sa.CheckConstraint("model != ''", name='non_empty_model'),
                    sa.CheckConstraint("registration != ''", name='non_empty_registration'),
                    sa.CheckConstraint("airline != ''", name='non_empty_airline'),
                    sa.CheckConstraint("status != ''", name='non_empty_status'),
                    sa.PrimaryKeyConstraint('id'),
                    sa.UniqueConstraint('id')
                    )


def downgrade():
    op.drop_table('aircraft')
