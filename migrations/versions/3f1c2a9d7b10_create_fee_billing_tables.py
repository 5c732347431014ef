"""create fee billing tables

Revision ID: 3f1c2a9d7b10
Revises:
Create Date: 2025-03-02 10:14:27.118204

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1c2a9d7b10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None



def upgrade() -> None:
    """Create class/student lookup tables and the fee billing tables."""

    op.create_table('classes',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('class_name', sa.String(length=100), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('class_name')
    )

    op.create_table('students',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('class_id', sa.Integer(), nullable=True),
        sa.Column('first_name', sa.String(length=100), nullable=False),
        sa.Column('last_name', sa.String(length=100), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['class_id'], ['classes.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_students_class_id'), 'students', ['class_id'], unique=False)

    op.create_table('fee_types',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint('length(name) > 0', name='ck_fee_types_name_not_empty'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('uq_fee_types_name', 'fee_types', ['name'], unique=True)

    op.create_table('fee_structures',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('class_id', sa.Integer(), nullable=False),
        sa.Column('fee_type_id', sa.Integer(), nullable=False),
        sa.Column('amount', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('frequency', sa.String(length=16), nullable=False),
        sa.Column('academic_year', sa.String(length=9), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("frequency IN ('monthly','annual','one-time')", name='ck_fee_structures_frequency'),
        sa.CheckConstraint('amount > 0', name='ck_fee_structures_amount_positive'),
        sa.ForeignKeyConstraint(['class_id'], ['classes.id'], name='fk_fee_structures_class_id', ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['fee_type_id'], ['fee_types.id'], name='fk_fee_structures_fee_type_id', ondelete='RESTRICT'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_fee_structures_class_id'), 'fee_structures', ['class_id'], unique=False)
    op.create_index(op.f('ix_fee_structures_fee_type_id'), 'fee_structures', ['fee_type_id'], unique=False)
    op.create_index('ix_fee_structures_class_year_frequency', 'fee_structures', ['class_id', 'academic_year', 'frequency'], unique=False)

    op.create_table('fee_vouchers',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('student_id', sa.Integer(), nullable=False),
        sa.Column('due_date', sa.Date(), nullable=False),
        sa.Column('paid_amount', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("status IN ('pending','partial','paid')", name='ck_fee_vouchers_status'),
        sa.CheckConstraint('paid_amount >= 0', name='ck_fee_vouchers_paid_amount_non_negative'),
        sa.ForeignKeyConstraint(['student_id'], ['students.id'], name='fk_fee_vouchers_student_id', ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('student_id', 'due_date', name='uq_fee_vouchers_student_due_date')
    )
    op.create_index(op.f('ix_fee_vouchers_student_id'), 'fee_vouchers', ['student_id'], unique=False)

    op.create_table('fee_voucher_details',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('voucher_id', sa.Integer(), nullable=False),
        sa.Column('fee_type_id', sa.Integer(), nullable=False),
        sa.Column('amount', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint('amount > 0', name='ck_fee_voucher_details_amount_positive'),
        sa.ForeignKeyConstraint(['voucher_id'], ['fee_vouchers.id'], name='fk_fee_voucher_details_voucher_id', ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['fee_type_id'], ['fee_types.id'], name='fk_fee_voucher_details_fee_type_id', ondelete='RESTRICT'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_fee_voucher_details_voucher_id'), 'fee_voucher_details', ['voucher_id'], unique=False)
    op.create_index(op.f('ix_fee_voucher_details_fee_type_id'), 'fee_voucher_details', ['fee_type_id'], unique=False)


def downgrade() -> None:
    """Drop fee billing tables."""
    op.drop_index(op.f('ix_fee_voucher_details_fee_type_id'), table_name='fee_voucher_details')
    op.drop_index(op.f('ix_fee_voucher_details_voucher_id'), table_name='fee_voucher_details')
    op.drop_table('fee_voucher_details')
    op.drop_index(op.f('ix_fee_vouchers_student_id'), table_name='fee_vouchers')
    op.drop_table('fee_vouchers')
    op.drop_index('ix_fee_structures_class_year_frequency', table_name='fee_structures')
    op.drop_index(op.f('ix_fee_structures_fee_type_id'), table_name='fee_structures')
    op.drop_index(op.f('ix_fee_structures_class_id'), table_name='fee_structures')
    op.drop_table('fee_structures')
    op.drop_index('uq_fee_types_name', table_name='fee_types')
    op.drop_table('fee_types')
    op.drop_index(op.f('ix_students_class_id'), table_name='students')
    op.drop_table('students')
    op.drop_table('classes')
