"""Create catalog, user and wishlist tables.

Revision ID: 001
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
    ]


def upgrade() -> None:
    """Create categories, subcategories, products, variants, users and wishlist tables."""
    # Categories table
    op.create_table(
        'categories',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('name', sa.String(50), nullable=False),
        sa.Column('description', sa.String(500), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true', index=True),
        sa.Column('created_by', sa.String(36), nullable=True),
        *_timestamps(),
    )
    op.create_index(
        'uq_categories_name_lower',
        'categories',
        [sa.text('lower(name)')],
        unique=True,
    )

    # Subcategories table
    op.create_table(
        'subcategories',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('name', sa.String(50), nullable=False),
        sa.Column('category_id', sa.String(36),
                  sa.ForeignKey('categories.id'), nullable=False, index=True),
        sa.Column('description', sa.String(500), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true', index=True),
        sa.Column('created_by', sa.String(36), nullable=True),
        *_timestamps(),
    )
    op.create_index(
        'uq_subcategories_name_lower_category',
        'subcategories',
        [sa.text('lower(name)'), 'category_id'],
        unique=True,
    )

    # Products table
    op.create_table(
        'products',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('title', sa.String(100), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('sub_category_id', sa.String(36),
                  sa.ForeignKey('subcategories.id'), nullable=False, index=True),
        sa.Column('category_id', sa.String(36),
                  sa.ForeignKey('categories.id'), nullable=False, index=True),
        sa.Column('images', postgresql.JSONB(), nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column('rating_average', sa.Float(), nullable=False, server_default='0'),
        sa.Column('rating_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true', index=True),
        sa.Column('created_by', sa.String(36), nullable=True),
        *_timestamps(),
    )

    # Full-text index over title and description
    op.create_index(
        'ix_products_fulltext',
        'products',
        [sa.text("to_tsvector('english', coalesce(title, '') || ' ' || coalesce(description, ''))")],
        postgresql_using='gin',
    )

    # Product variants table
    op.create_table(
        'product_variants',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('product_id', sa.String(36),
                  sa.ForeignKey('products.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('ram', sa.String(50), nullable=False),
        sa.Column('price', sa.Float(), nullable=False, index=True),
        sa.Column('quantity', sa.Integer(), nullable=False),
    )

    # Users table
    op.create_table(
        'users',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('name', sa.String(100), nullable=True),
        sa.Column('role', sa.String(20), nullable=False, server_default='user'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        *_timestamps(),
    )
    op.create_index(
        'uq_users_email_lower',
        'users',
        [sa.text('lower(email)')],
        unique=True,
    )

    # Wishlist entries table; product_id has no foreign key
    op.create_table(
        'wishlist_entries',
        sa.Column('user_id', sa.String(36),
                  sa.ForeignKey('users.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('product_id', sa.String(36), primary_key=True),
        sa.Column('position', sa.Integer(), nullable=False),
    )


def downgrade() -> None:
    """Drop catalog, user and wishlist tables."""
    op.drop_table('wishlist_entries')
    op.drop_index('uq_users_email_lower', table_name='users')
    op.drop_table('users')
    op.drop_table('product_variants')
    op.drop_index('ix_products_fulltext', table_name='products')
    op.drop_table('products')
    op.drop_index('uq_subcategories_name_lower_category', table_name='subcategories')
    op.drop_table('subcategories')
    op.drop_index('uq_categories_name_lower', table_name='categories')
    op.drop_table('categories')
