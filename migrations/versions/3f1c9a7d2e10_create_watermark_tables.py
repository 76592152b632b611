"""create message_watermarks and issued_watermark_codes

Revision ID: 3f1c9a7d2e10
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '3f1c9a7d2e10'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    # Códigos emitidos nunca são apagados (nem no purge do registro)
    op.create_table(
        'issued_watermark_codes',
        sa.Column('code', sa.String(length=16), nullable=False),
        sa.Column('issued_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('code')
    )

    op.create_table(
        'message_watermarks',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('code', sa.String(length=16), nullable=False),
        sa.Column('sender_id', sa.String(length=64), nullable=False),
        sa.Column('recipient_id', sa.String(length=64), nullable=True),
        sa.Column('platform', sa.String(length=32), nullable=False),
        sa.Column('message_preview', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('detected_count', sa.Integer(), nullable=False),
        sa.Column('last_detected_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('code')
    )
    with op.batch_alter_table('message_watermarks', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_message_watermarks_sender_id'), ['sender_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_message_watermarks_created_at'), ['created_at'], unique=False)


def downgrade():
    with op.batch_alter_table('message_watermarks', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_message_watermarks_created_at'))
        batch_op.drop_index(batch_op.f('ix_message_watermarks_sender_id'))

    op.drop_table('message_watermarks')
    op.drop_table('issued_watermark_codes')
