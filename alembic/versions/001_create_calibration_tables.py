"""001_create_calibration_tables

Revision ID: 001
Revises: 
Create Date: 2026-10-19 10:00:00.000000

Crea le tabelle del sistema di taratura:
- calibration_methods (template di policy)
- calibration_calendars (istanze di policy assegnabili)
- instruments (strumenti con schedule risolto)
- interventions (tarature, verifiche, manutenzioni)
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    ]


def _policy_columns():
    """Forma piatta della policy, condivisa da metodi e calendari"""
    return [
        sa.Column('recurrence_type', sa.String(30), nullable=False, server_default='FIXED_INTERVAL'),
        sa.Column('frequency_value', sa.Integer, nullable=True),
        sa.Column('frequency_unit', sa.String(10), nullable=True),
        sa.Column('days_of_week', sa.JSON, nullable=False),
        sa.Column('day_of_month', sa.Integer, nullable=True),
        sa.Column('month_of_year', sa.Integer, nullable=True),
        sa.Column('day_of_year', sa.Integer, nullable=True),
        sa.Column('tolerance_value', sa.Integer, nullable=False, server_default='0'),
        sa.Column('tolerance_unit', sa.String(10), nullable=False, server_default='DAYS'),
    ]


def upgrade() -> None:
    """Crea tabelle di taratura"""

    # =====================================================
    # 1. CALIBRATION METHODS (template)
    # =====================================================
    op.create_table(
        'calibration_methods',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('name', sa.String(150), nullable=False),
        sa.Column('description', sa.Text, nullable=True),
        sa.Column('procedure', sa.Text, nullable=True),
        sa.Column('required_equipment', sa.Text, nullable=True),
        sa.Column('estimated_duration', sa.Integer, nullable=True),
        sa.Column('instrument_type', sa.String(100), nullable=True),
        *_policy_columns(),
        *_timestamps(),

        sa.CheckConstraint('tolerance_value >= 0', name='chk_method_tolerance_positive'),
        sa.CheckConstraint(
            'estimated_duration IS NULL OR estimated_duration > 0',
            name='chk_method_duration_positive'
        ),
    )
    op.create_index('ix_calibration_methods_name', 'calibration_methods', ['name'])
    op.create_index('ix_calibration_methods_instrument_type', 'calibration_methods', ['instrument_type'])

    # =====================================================
    # 2. CALIBRATION CALENDARS
    # =====================================================
    op.create_table(
        'calibration_calendars',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('calibration_method_id', sa.Uuid(), nullable=True),
        sa.Column('name', sa.String(150), nullable=False),
        sa.Column('description', sa.Text, nullable=True),
        sa.Column('active', sa.Boolean, nullable=False, server_default=sa.true()),
        *_policy_columns(),
        *_timestamps(),

        sa.ForeignKeyConstraint(['calibration_method_id'], ['calibration_methods.id'],
                                ondelete='RESTRICT', name='fk_calibration_calendars_calibration_method_id'),
        sa.CheckConstraint('tolerance_value >= 0', name='chk_calendar_tolerance_positive'),
    )
    op.create_index('ix_calibration_calendars_calibration_method_id', 'calibration_calendars', ['calibration_method_id'])
    op.create_index('ix_calibration_calendars_name', 'calibration_calendars', ['name'])
    op.create_index('ix_calibration_calendars_active', 'calibration_calendars', ['active'])

    # =====================================================
    # 3. INSTRUMENTS
    # =====================================================
    op.create_table(
        'instruments',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('calibration_calendar_id', sa.Uuid(), nullable=True),
        sa.Column('serial_number', sa.String(100), nullable=False),
        sa.Column('name', sa.String(150), nullable=False),
        sa.Column('internal_reference', sa.String(100), nullable=True),
        sa.Column('brand', sa.String(100), nullable=True),
        sa.Column('model', sa.String(100), nullable=True),
        sa.Column('instrument_type', sa.String(100), nullable=True),
        sa.Column('site', sa.String(100), nullable=True),
        sa.Column('active', sa.Boolean, nullable=False, server_default=sa.true()),

        # Policy di fallback (senza calendario)
        sa.Column('calibration_frequency_value', sa.Integer, nullable=False, server_default='12'),
        sa.Column('calibration_frequency_unit', sa.String(10), nullable=False, server_default='MONTHS'),
        sa.Column('tolerance_value', sa.Integer, nullable=False, server_default='0'),
        sa.Column('tolerance_unit', sa.String(10), nullable=False, server_default='DAYS'),

        # Schedule risolto
        sa.Column('last_calibration_date', sa.Date, nullable=True),
        sa.Column('next_calibration_date', sa.Date, nullable=True),
        sa.Column('tolerance_expiry_date', sa.Date, nullable=True),
        *_timestamps(),

        sa.ForeignKeyConstraint(['calibration_calendar_id'], ['calibration_calendars.id'],
                                ondelete='SET NULL', name='fk_instruments_calibration_calendar_id'),
        sa.CheckConstraint('calibration_frequency_value > 0', name='chk_instrument_frequency_positive'),
        sa.CheckConstraint('tolerance_value >= 0', name='chk_instrument_tolerance_positive'),
        sa.CheckConstraint(
            'tolerance_expiry_date IS NULL OR next_calibration_date IS NULL '
            'OR tolerance_expiry_date >= next_calibration_date',
            name='chk_tolerance_after_due_date'
        ),
    )
    op.create_index('ix_instruments_serial_number', 'instruments', ['serial_number'], unique=True)
    op.create_index('ix_instruments_calibration_calendar_id', 'instruments', ['calibration_calendar_id'])
    op.create_index('ix_instruments_instrument_type', 'instruments', ['instrument_type'])
    op.create_index('ix_instruments_site', 'instruments', ['site'])
    op.create_index('ix_instruments_active', 'instruments', ['active'])
    op.create_index('ix_instruments_next_calibration_date', 'instruments', ['next_calibration_date'])

    # =====================================================
    # 4. INTERVENTIONS
    # =====================================================
    intervention_type = sa.Enum('CALIBRATION', 'VERIFICATION', 'MAINTENANCE', 'REPAIR', name='interventiontype')
    intervention_status = sa.Enum('PLANNED', 'IN_PROGRESS', 'COMPLETED', 'CANCELLED', name='interventionstatus')
    conformity_result = sa.Enum('CONFORMING', 'NON_CONFORMING', 'WITH_RESERVATIONS', name='conformityresult')

    op.create_table(
        'interventions',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('instrument_id', sa.Uuid(), nullable=False),
        sa.Column('intervention_type', intervention_type, nullable=False),
        sa.Column('status', intervention_status, nullable=False),
        sa.Column('conformity_result', conformity_result, nullable=True),
        sa.Column('certificate_number', sa.String(100), nullable=True),
        sa.Column('observations', sa.Text, nullable=True),
        sa.Column('scheduled_date', sa.Date, nullable=False),
        sa.Column('completed_date', sa.Date, nullable=True),
        sa.Column('next_calibration_date', sa.Date, nullable=True),
        *_timestamps(),

        sa.ForeignKeyConstraint(['instrument_id'], ['instruments.id'],
                                ondelete='CASCADE', name='fk_interventions_instrument_id'),
        sa.CheckConstraint(
            'next_calibration_date IS NULL OR completed_date IS NULL OR next_calibration_date > completed_date',
            name='chk_next_calibration_after_completion'
        ),
    )
    op.create_index('ix_interventions_instrument_id', 'interventions', ['instrument_id'])
    op.create_index('ix_interventions_intervention_type', 'interventions', ['intervention_type'])
    op.create_index('ix_interventions_status', 'interventions', ['status'])


def downgrade() -> None:
    """Rimuove le tabelle di taratura"""
    # Drop tables (ordine inverso per FK)
    op.drop_table('interventions')
    op.drop_table('instruments')
    op.drop_table('calibration_calendars')
    op.drop_table('calibration_methods')

    bind = op.get_bind()
    for enum_name in ('conformityresult', 'interventionstatus', 'interventiontype'):
        sa.Enum(name=enum_name).drop(bind, checkfirst=True)
