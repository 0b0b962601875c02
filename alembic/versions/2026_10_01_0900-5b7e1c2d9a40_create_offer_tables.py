"""create_offer_tables

Revision ID: 5b7e1c2d9a40
Revises:
Create Date: 2026-10-01 09:00:00.000000+00:00

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '5b7e1c2d9a40'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    ]


def upgrade() -> None:
    """Users, companies, categories, offers and applications."""

    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('full_name', sa.String(length=255), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index('ix_users_id', 'users', ['id'])
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'user_roles',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(length=50), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint('user_id', 'name', name='unique_user_role'),
    )
    op.create_index('ix_user_roles_id', 'user_roles', ['id'])
    op.create_index('ix_user_roles_user_id', 'user_roles', ['user_id'])

    op.create_table(
        'categories',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('name', sa.String(length=255), nullable=False, unique=True),
        *_timestamps(),
    )
    op.create_index('ix_categories_id', 'categories', ['id'])

    op.create_table(
        'companies',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('website', sa.String(length=500), nullable=True),
        sa.Column(
            'status',
            sa.Enum('pending', 'validated', 'rejected', name='company_status', native_enum=False),
            nullable=False,
            server_default='pending',
        ),
        sa.Column('rejection_reason', sa.Text(), nullable=True),
        sa.Column('owner_id', sa.Uuid(), sa.ForeignKey('users.id'), nullable=False, unique=True),
        *_timestamps(),
    )
    op.create_index('ix_companies_id', 'companies', ['id'])
    op.create_index('ix_companies_name', 'companies', ['name'])
    op.create_index('ix_companies_status', 'companies', ['status'])

    op.create_table(
        'company_assignments',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('company_id', sa.Uuid(), sa.ForeignKey('companies.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint('company_id', 'user_id', name='unique_company_manager'),
    )
    op.create_index('ix_company_assignments_id', 'company_assignments', ['id'])
    op.create_index('ix_company_assignments_company_id', 'company_assignments', ['company_id'])
    op.create_index('ix_company_assignments_user_id', 'company_assignments', ['user_id'])

    op.create_table(
        'offers',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('experience', sa.String(length=255), nullable=False),
        sa.Column('location', sa.String(length=255), nullable=False),
        sa.Column('offer_kind', sa.Enum('job', 'internship', name='offer_kind', native_enum=False), nullable=False),
        sa.Column('contract_type', sa.String(length=255), nullable=False),
        sa.Column('salary', sa.Numeric(10, 2), nullable=True),
        sa.Column(
            'status',
            sa.Enum(
                'draft', 'pending_validation', 'validated', 'rejected', 'published', 'closed', 'expired',
                name='offer_status',
                native_enum=False,
            ),
            nullable=False,
            server_default='draft',
        ),
        sa.Column('publication_date', sa.Date(), nullable=True),
        sa.Column('expiration_date', sa.Date(), nullable=False),
        sa.Column('rejection_reason', sa.Text(), nullable=True),
        sa.Column('validated_at', sa.DateTime(), nullable=True),
        sa.Column('validated_by_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('sponsored_level', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('featured_until', sa.DateTime(), nullable=True),
        sa.Column('recruiter_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=True),
        sa.Column('company_id', sa.Uuid(), sa.ForeignKey('companies.id', ondelete='CASCADE'), nullable=True),
        sa.Column('created_by_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('category_id', sa.Uuid(), sa.ForeignKey('categories.id', ondelete='CASCADE'), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_offers_id', 'offers', ['id'])
    op.create_index('ix_offers_company_id', 'offers', ['company_id'])
    op.create_index('ix_offers_sponsored_level', 'offers', ['sponsored_level'])
    op.create_index('ix_offers_featured_until', 'offers', ['featured_until'])
    op.create_index('ix_offers_status_publication_date', 'offers', ['status', 'publication_date'])
    op.create_index('ix_offers_recruiter_status', 'offers', ['recruiter_id', 'status'])
    op.create_index('ix_offers_expiration_status', 'offers', ['expiration_date', 'status'])
    op.create_index('ix_offers_category_status', 'offers', ['category_id', 'status'])
    op.create_index('ix_offers_kind_location', 'offers', ['offer_kind', 'location'])

    op.create_table(
        'applications',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('candidate_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('offer_id', sa.Uuid(), sa.ForeignKey('offers.id', ondelete='CASCADE'), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=True),
        sa.Column('cover_letter', sa.String(length=2000), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint('candidate_id', 'offer_id', name='unique_candidate_offer_application'),
    )
    op.create_index('ix_applications_id', 'applications', ['id'])
    op.create_index('ix_applications_candidate_id', 'applications', ['candidate_id'])
    op.create_index('ix_applications_offer_id', 'applications', ['offer_id'])


def downgrade() -> None:
    """Drop all offer tables."""
    op.drop_table('applications')
    op.drop_table('offers')
    op.drop_table('company_assignments')
    op.drop_table('companies')
    op.drop_table('categories')
    op.drop_table('user_roles')
    op.drop_table('users')
