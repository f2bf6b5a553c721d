"""initial payroll schema

Revision ID: 3f1a9c2d7e10
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1a9c2d7e10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

RECORD_TYPES = (
    'Leave', 'Termination', 'Advance', 'Loan', 'Deduction', 'Overtime', 'Standby Shift',
    'Bank Account Change', 'Special Shift', 'Escort Allowance', 'Commission',
    'Cash in Transit', 'Camera Allowance', 'Staff Garnishee', 'Maternity Leave',
)

ENUMS = (
    'user_role', 'company', 'department', 'employee_status', 'record_type', 'record_status',
    'deduction_frequency', 'insurance_company', 'policy_status', 'overtime_type',
)


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('username', sa.String(length=80), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('full_name', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('role', sa.Enum('Admin', 'HR Manager', 'Payroll Officer', 'Viewer', name='user_role'),
                  nullable=False),
        sa.Column('active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_users_username', 'users', ['username'], unique=True)

    op.create_table(
        'employees',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('employee_code', sa.String(length=32), nullable=False, unique=True),
        sa.Column('first_name', sa.String(length=80), nullable=False),
        sa.Column('last_name', sa.String(length=80), nullable=False),
        sa.Column('id_number', sa.String(length=20), nullable=True),
        sa.Column('company', sa.Enum('Butters', 'Makana', name='company'), nullable=False),
        sa.Column('department', sa.Enum('Security', 'Administration', 'Operations', name='department'),
                  nullable=False),
        sa.Column('position', sa.String(length=120), nullable=False),
        sa.Column('status', sa.Enum('Active', 'On Leave', 'Terminated', name='employee_status'), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('phone', sa.String(length=20), nullable=True),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('date_joined', sa.Date(), nullable=True),
        sa.Column('base_salary', sa.Numeric(12, 2), nullable=False),
        sa.Column('tax_number', sa.String(length=32), nullable=True),
        sa.Column('bank_name', sa.String(length=80), nullable=True),
        sa.Column('bank_account', sa.String(length=40), nullable=True),
        sa.Column('bank_branch', sa.String(length=80), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_emp_company', 'employees', ['company'])
    op.create_index('ix_emp_status', 'employees', ['status'])

    op.create_table(
        'payroll_records',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('employee_id', sa.Integer(), sa.ForeignKey('employees.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('record_type', sa.Enum(*RECORD_TYPES, name='record_type'), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('amount', sa.Numeric(12, 2), nullable=True),
        sa.Column('hours', sa.Numeric(6, 2), nullable=True),
        sa.Column('rate', sa.Numeric(5, 2), nullable=True),
        sa.Column('start_date', sa.Date(), nullable=True),
        sa.Column('end_date', sa.Date(), nullable=True),
        sa.Column('total_days', sa.Numeric(6, 2), nullable=True),
        sa.Column('status', sa.Enum('Pending', 'Approved', 'Rejected', name='record_status'), nullable=False),
        sa.Column('approved', sa.Boolean(), nullable=False),
        sa.Column('recurring', sa.Boolean(), nullable=False),
        sa.Column('details', sa.Text(), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('document_image', sa.String(length=500), nullable=True),
        sa.Column('created_by', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_payroll_records_employee_id', 'payroll_records', ['employee_id'])
    op.create_index('ix_payroll_records_record_type', 'payroll_records', ['record_type'])
    op.create_index('ix_payroll_records_date', 'payroll_records', ['date'])

    op.create_table(
        'archived_payroll_records',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('original_id', sa.Integer(), nullable=False),
        sa.Column('employee_id', sa.Integer(), sa.ForeignKey('employees.id'), nullable=True),
        sa.Column('record_type', sa.String(length=40), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('amount', sa.Numeric(12, 2)),
        sa.Column('hours', sa.Numeric(6, 2)),
        sa.Column('rate', sa.Numeric(5, 2)),
        sa.Column('start_date', sa.Date()),
        sa.Column('end_date', sa.Date()),
        sa.Column('total_days', sa.Numeric(6, 2)),
        sa.Column('status', sa.String(length=20)),
        sa.Column('approved', sa.Boolean()),
        sa.Column('recurring', sa.Boolean()),
        sa.Column('details', sa.Text()),
        sa.Column('description', sa.Text()),
        sa.Column('notes', sa.Text()),
        sa.Column('document_image', sa.String(length=500)),
        sa.Column('created_by', sa.Integer()),
        sa.Column('created_at', sa.DateTime()),
        sa.Column('archived_at', sa.DateTime(), nullable=False),
        sa.Column('archived_by', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
    )
    op.create_index('ix_archived_payroll_records_employee_id', 'archived_payroll_records', ['employee_id'])
    op.create_index('ix_archived_payroll_records_record_type', 'archived_payroll_records', ['record_type'])
    op.create_index('ix_archived_payroll_records_archived_by', 'archived_payroll_records', ['archived_by'])

    op.create_table(
        'recurring_deductions',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('employee_id', sa.Integer(), sa.ForeignKey('employees.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('deduction_name', sa.String(length=80), nullable=False),
        sa.Column('amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=True),
        sa.Column('frequency', sa.Enum('weekly', 'biweekly', 'monthly', 'quarterly', name='deduction_frequency'),
                  nullable=False),
        sa.Column('description', sa.Text()),
        sa.Column('approved', sa.Boolean(), nullable=False),
        sa.Column('reference_number', sa.String(length=16), nullable=True, unique=True),
        sa.Column('document_image', sa.String(length=500)),
        sa.Column('notes', sa.Text()),
        sa.Column('active', sa.Boolean(), nullable=False),
        sa.Column('created_by', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_recurring_deductions_employee_id', 'recurring_deductions', ['employee_id'])

    op.create_table(
        'insurance_policies',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('employee_id', sa.Integer(), sa.ForeignKey('employees.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('company', sa.Enum('Sanlam Sky', 'Avbob', 'Old Mutual', 'Provident Fund', name='insurance_company'),
                  nullable=False),
        sa.Column('policy_number', sa.String(length=64), nullable=False),
        sa.Column('amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=True),
        sa.Column('status', sa.Enum('Active', 'Cancelled', 'Pending', 'Suspended', name='policy_status'),
                  nullable=False),
        sa.Column('notes', sa.Text()),
        sa.Column('document_image', sa.String(length=500)),
        sa.Column('created_by', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_by', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_insurance_policies_employee_id', 'insurance_policies', ['employee_id'])

    op.create_table(
        'policy_payments',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('policy_id', sa.Integer(), sa.ForeignKey('insurance_policies.id', ondelete='CASCADE'),
                  nullable=False),
        sa.Column('payment_date', sa.Date(), nullable=False),
        sa.Column('amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('payment_method', sa.String(length=40), nullable=False),
        sa.Column('month', sa.Date(), nullable=False),
        sa.Column('notes', sa.Text()),
        sa.Column('created_by', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_policy_payments_policy_id', 'policy_payments', ['policy_id'])
    op.create_index('ix_policy_payment_month', 'policy_payments', ['policy_id', 'month'])

    op.create_table(
        'maternity_records',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('employee_id', sa.Integer(), sa.ForeignKey('employees.id', ondelete='CASCADE'), nullable=False),
        sa.Column('from_date', sa.Date(), nullable=False),
        sa.Column('to_date', sa.Date(), nullable=False),
        sa.Column('comments', sa.Text()),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_maternity_records_employee_id', 'maternity_records', ['employee_id'])

    op.create_table(
        'activity_logs',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('action', sa.String(length=120), nullable=False),
        sa.Column('details', sa.Text()),
        sa.Column('timestamp', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_activity_logs_user_id', 'activity_logs', ['user_id'])
    op.create_index('ix_activity_logs_timestamp', 'activity_logs', ['timestamp'])

    op.create_table(
        'export_records',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('export_type', sa.String(length=60), nullable=False),
        sa.Column('file_url', sa.String(length=500), nullable=False),
        sa.Column('file_format', sa.String(length=10), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=False),
        sa.Column('include_unapproved', sa.Boolean(), nullable=False),
        sa.Column('record_count', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_export_records_user_id', 'export_records', ['user_id'])

    op.create_table(
        'overtime_rates',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('overtime_type', sa.Enum('Weekday', 'Saturday', 'Sunday', 'Public Holiday', name='overtime_type'),
                  nullable=False, unique=True),
        sa.Column('rate', sa.Numeric(5, 2), nullable=False),
        sa.Column('description', sa.Text()),
        sa.Column('updated_by', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )


def downgrade() -> None:
    for table in (
        'overtime_rates', 'export_records', 'activity_logs', 'maternity_records', 'policy_payments',
        'insurance_policies', 'recurring_deductions', 'archived_payroll_records', 'payroll_records',
        'employees', 'users',
    ):
        op.drop_table(table)

    bind = op.get_bind()
    if bind.dialect.name == 'postgresql':
        for name in ENUMS:
            sa.Enum(name=name).drop(bind, checkfirst=True)
