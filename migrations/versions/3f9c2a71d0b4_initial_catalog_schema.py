"""initial catalog schema

Revision ID: 3f9c2a71d0b4
Revises:
Create Date: 2026-10-18 09:30:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '3f9c2a71d0b4'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade():
    op.create_table(
        'categories',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('parent_id', sa.Integer(),
                  sa.ForeignKey('categories.id', ondelete='RESTRICT'), nullable=True),
        sa.Column('description', sa.Text()),
        *_timestamps(),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint('name', 'parent_id', name='uq_category_name_parent'),
    )
    op.create_index('ix_categories_parent_id', 'categories', ['parent_id'])
    op.create_index('ix_categories_deleted_at', 'categories', ['deleted_at'])

    op.create_table(
        'products',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('seller_id', sa.Integer(), nullable=False),
        sa.Column('category_id', sa.Integer(),
                  sa.ForeignKey('categories.id', ondelete='RESTRICT'), nullable=True),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('brand', sa.String(100)),
        sa.Column('sku', sa.String(50), nullable=False),
        sa.Column('price', sa.Numeric(12, 2), nullable=False),
        sa.Column('currency', sa.String(3), nullable=False),
        sa.Column('short_description', sa.String(500)),
        sa.Column('long_description', sa.Text()),
        sa.Column('images', sa.Text()),
        sa.Column('tags', sa.Text()),
        sa.Column('is_popular', sa.Boolean(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_products_sku', 'products', ['sku'], unique=True)
    op.create_index('ix_products_seller_id', 'products', ['seller_id'])
    op.create_index('ix_products_category_id', 'products', ['category_id'])
    op.create_index('ix_products_deleted_at', 'products', ['deleted_at'])

    op.create_table(
        'product_options',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('product_id', sa.Integer(),
                  sa.ForeignKey('products.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(50), nullable=False),
        sa.Column('display_name', sa.String(100), nullable=False),
        sa.Column('sort_order', sa.Integer(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint('product_id', 'name', name='uq_product_option_name'),
    )
    op.create_index('ix_product_options_product_id', 'product_options', ['product_id'])

    op.create_table(
        'product_option_values',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('option_id', sa.Integer(),
                  sa.ForeignKey('product_options.id', ondelete='CASCADE'), nullable=False),
        sa.Column('value', sa.String(100), nullable=False),
        sa.Column('display_name', sa.String(100), nullable=False),
        sa.Column('color_code', sa.String(7)),
        sa.Column('sort_order', sa.Integer(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint('option_id', 'value', name='uq_option_value'),
    )
    op.create_index('ix_product_option_values_option_id', 'product_option_values', ['option_id'])

    op.create_table(
        'product_variants',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('product_id', sa.Integer(),
                  sa.ForeignKey('products.id', ondelete='CASCADE'), nullable=False),
        sa.Column('sku', sa.String(100), nullable=False),
        sa.Column('price', sa.Numeric(12, 2), nullable=False),
        sa.Column('stock', sa.Integer(), nullable=False),
        sa.Column('images', sa.Text()),
        sa.Column('allow_purchase', sa.Boolean(), nullable=False),
        sa.Column('is_popular', sa.Boolean(), nullable=False),
        sa.Column('is_default', sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_product_variants_product_id', 'product_variants', ['product_id'])
    op.create_index('ix_product_variants_deleted_at', 'product_variants', ['deleted_at'])

    op.create_table(
        'variant_option_values',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('variant_id', sa.Integer(),
                  sa.ForeignKey('product_variants.id', ondelete='CASCADE'), nullable=False),
        sa.Column('option_id', sa.Integer(),
                  sa.ForeignKey('product_options.id', ondelete='CASCADE'), nullable=False),
        sa.Column('option_value_id', sa.Integer(),
                  sa.ForeignKey('product_option_values.id', ondelete='CASCADE'), nullable=False),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint('variant_id', 'option_id', name='uq_variant_option'),
    )
    op.create_index('ix_variant_option_values_variant_id', 'variant_option_values', ['variant_id'])
    op.create_index('ix_variant_option_values_option_value_id', 'variant_option_values', ['option_value_id'])
    op.create_index('ix_variant_option_values_deleted_at', 'variant_option_values', ['deleted_at'])

    op.create_table(
        'attribute_definitions',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('key', sa.String(50), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('unit', sa.String(20)),
        sa.Column('allowed_values', sa.Text()),
        sa.Column('mode', sa.String(10), nullable=False, server_default='OPEN'),
        *_timestamps(),
    )
    op.create_index('ix_attribute_definitions_key', 'attribute_definitions', ['key'], unique=True)

    op.create_table(
        'product_attributes',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('product_id', sa.Integer(),
                  sa.ForeignKey('products.id', ondelete='CASCADE'), nullable=False),
        sa.Column('attribute_definition_id', sa.Integer(),
                  sa.ForeignKey('attribute_definitions.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('value', sa.String(500), nullable=False),
        sa.Column('sort_order', sa.Integer(), nullable=False),
        *_timestamps(),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint('product_id', 'attribute_definition_id', name='uq_product_attribute'),
    )
    op.create_index('ix_product_attributes_product_id', 'product_attributes', ['product_id'])
    op.create_index('ix_product_attributes_attribute_definition_id', 'product_attributes',
                    ['attribute_definition_id'])
    op.create_index('ix_product_attributes_deleted_at', 'product_attributes', ['deleted_at'])


def downgrade():
    op.drop_table('product_attributes')
    op.drop_table('attribute_definitions')
    op.drop_table('variant_option_values')
    op.drop_table('product_variants')
    op.drop_table('product_option_values')
    op.drop_table('product_options')
    op.drop_table('products')
    op.drop_table('categories')
