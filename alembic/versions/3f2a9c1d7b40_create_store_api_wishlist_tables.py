"""create store api wishlist tables

Revision ID: 3f2a9c1d7b40
Revises:
Create Date: 2026-10-17 10:12:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '3f2a9c1d7b40'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'sales_channels',
        sa.Column('id', sa.String(length=32), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('access_key', sa.String(length=64), nullable=False),
        sa.Column('active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.TIMESTAMP(), server_default=sa.func.current_timestamp(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_sales_channels_access_key', 'sales_channels', ['access_key'], unique=True)

    op.create_table(
        'customers',
        sa.Column('id', sa.String(length=32), nullable=False),
        sa.Column('sales_channel_id', sa.String(length=32), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('first_name', sa.String(length=255), nullable=True),
        sa.Column('last_name', sa.String(length=255), nullable=True),
        sa.Column('active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.TIMESTAMP(), server_default=sa.func.current_timestamp(), nullable=True),
        sa.ForeignKeyConstraint(['sales_channel_id'], ['sales_channels.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_customers_email', 'customers', ['email'])
    op.create_index('ix_customers_sales_channel_id', 'customers', ['sales_channel_id'])

    op.create_table(
        'products',
        sa.Column('id', sa.String(length=32), nullable=False),
        sa.Column('product_number', sa.String(length=64), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('price', sa.Numeric(15, 2), nullable=False),
        sa.Column('stock', sa.Integer(), nullable=True),
        sa.Column('active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.TIMESTAMP(), server_default=sa.func.current_timestamp(), nullable=True),
        sa.Column('updated_at', sa.TIMESTAMP(), server_default=sa.func.current_timestamp(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('product_number'),
    )

    op.create_table(
        'product_visibilities',
        sa.Column('id', sa.String(length=32), nullable=False),
        sa.Column('product_id', sa.String(length=32), nullable=False),
        sa.Column('sales_channel_id', sa.String(length=32), nullable=False),
        sa.Column('visibility', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['product_id'], ['products.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['sales_channel_id'], ['sales_channels.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('product_id', 'sales_channel_id', name='uniq_product_sales_channel'),
    )

    op.create_table(
        'customer_wishlists',
        sa.Column('id', sa.String(length=32), nullable=False),
        sa.Column('customer_id', sa.String(length=32), nullable=False),
        sa.Column('sales_channel_id', sa.String(length=32), nullable=False),
        sa.Column('created_at', sa.TIMESTAMP(), server_default=sa.func.current_timestamp(), nullable=True),
        sa.Column('updated_at', sa.TIMESTAMP(), server_default=sa.func.current_timestamp(), nullable=True),
        sa.ForeignKeyConstraint(['customer_id'], ['customers.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['sales_channel_id'], ['sales_channels.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('customer_id', 'sales_channel_id', name='uniq_customer_wishlist_channel'),
    )

    op.create_table(
        'customer_wishlist_products',
        sa.Column('id', sa.String(length=32), nullable=False),
        sa.Column('wishlist_id', sa.String(length=32), nullable=False),
        sa.Column('product_id', sa.String(length=32), nullable=False),
        sa.Column('created_at', sa.TIMESTAMP(), server_default=sa.func.current_timestamp(), nullable=True),
        sa.ForeignKeyConstraint(['wishlist_id'], ['customer_wishlists.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['product_id'], ['products.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('wishlist_id', 'product_id', name='uniq_wishlist_product'),
    )
    op.create_index('ix_customer_wishlist_products_wishlist_id', 'customer_wishlist_products', ['wishlist_id'])
    op.create_index('ix_customer_wishlist_products_product_id', 'customer_wishlist_products', ['product_id'])

    op.create_table(
        'system_config',
        sa.Column('id', sa.String(length=32), nullable=False),
        sa.Column('configuration_key', sa.String(length=255), nullable=False),
        sa.Column('configuration_value', sa.JSON(), nullable=False),
        sa.Column('sales_channel_id', sa.String(length=32), nullable=True),
        sa.Column('created_at', sa.TIMESTAMP(), server_default=sa.func.current_timestamp(), nullable=True),
        sa.Column('updated_at', sa.TIMESTAMP(), server_default=sa.func.current_timestamp(), nullable=True),
        sa.ForeignKeyConstraint(['sales_channel_id'], ['sales_channels.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('configuration_key', 'sales_channel_id', name='uniq_config_key_sales_channel'),
    )
    op.create_index('ix_system_config_configuration_key', 'system_config', ['configuration_key'])


def downgrade():
    op.drop_index('ix_system_config_configuration_key', table_name='system_config')
    op.drop_table('system_config')
    op.drop_index('ix_customer_wishlist_products_product_id', table_name='customer_wishlist_products')
    op.drop_index('ix_customer_wishlist_products_wishlist_id', table_name='customer_wishlist_products')
    op.drop_table('customer_wishlist_products')
    op.drop_table('customer_wishlists')
    op.drop_table('product_visibilities')
    op.drop_table('products')
    op.drop_index('ix_customers_sales_channel_id', table_name='customers')
    op.drop_index('ix_customers_email', table_name='customers')
    op.drop_table('customers')
    op.drop_index('ix_sales_channels_access_key', table_name='sales_channels')
    op.drop_table('sales_channels')
