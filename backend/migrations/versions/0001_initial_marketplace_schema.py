"""initial marketplace schema

Revision ID: 0001_marketplace
Revises:
Create Date: 2026-10-19 00:00:00.000000

Creates the relational marketplace schema and the documents table:
- users, certifications: accounts and producer certificates
- products, product_varieties, authorized_products: catalog and grants
- offers, offer_products, daily_quantities: weekly offers with line items
- documents: schemaless collections (users, products, offers, authorizations, alerts, news)
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '0001_marketplace'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    # ============================================================================
    # users / certifications
    # ============================================================================
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=32), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('company_name', sa.String(length=255), nullable=True),
        sa.Column('vat_number', sa.String(length=64), nullable=True),
        sa.Column('street', sa.String(length=255), nullable=True),
        sa.Column('city', sa.String(length=128), nullable=True),
        sa.Column('state', sa.String(length=128), nullable=True),
        sa.Column('country', sa.String(length=128), nullable=True),
        sa.Column('postal_code', sa.String(length=32), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'certifications',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('type', sa.String(length=32), nullable=False),
        sa.Column('number', sa.String(length=128), nullable=False),
        sa.Column('valid_until', sa.Date(), nullable=False),
        sa.Column('status', sa.String(length=32), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_certifications_user_id', 'certifications', ['user_id'])

    # ============================================================================
    # catalog
    # ============================================================================
    op.create_table(
        'products',
        sa.Column('id', sa.String(length=128), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('category', sa.String(length=64), nullable=False),
        sa.Column('unit', sa.String(length=32), nullable=False),
        sa.Column('box_size', sa.String(length=64), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'product_varieties',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('product_id', sa.String(length=128), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.ForeignKeyConstraint(['product_id'], ['products.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_product_varieties_product_id', 'product_varieties', ['product_id'])

    op.create_table(
        'authorized_products',
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('product_id', sa.String(length=128), nullable=False),
        sa.Column('authorized_at', sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['product_id'], ['products.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('user_id', 'product_id'),
    )

    # ============================================================================
    # offers: offer -> line items -> daily quantities
    # ============================================================================
    op.create_table(
        'offers',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('producer_id', sa.Integer(), nullable=False),
        sa.Column('week_number', sa.Integer(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('status', sa.String(length=32), nullable=False),
        sa.Column('feedback', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('reviewed_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['producer_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_offers_producer_id', 'offers', ['producer_id'])
    op.create_index('ix_offers_status', 'offers', ['status'])
    op.create_index('ix_offers_producer_status', 'offers', ['producer_id', 'status'])

    op.create_table(
        'offer_products',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('offer_id', sa.Integer(), nullable=False),
        sa.Column('product_id', sa.String(length=128), nullable=False),
        sa.Column('variety', sa.String(length=255), nullable=True),
        sa.Column('price', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('total_quantity', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.ForeignKeyConstraint(['offer_id'], ['offers.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['product_id'], ['products.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_offer_products_offer_id', 'offer_products', ['offer_id'])

    op.create_table(
        'daily_quantities',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('offer_product_id', sa.Integer(), nullable=False),
        sa.Column('day_of_week', sa.String(length=16), nullable=False),
        sa.Column('quantity', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.ForeignKeyConstraint(['offer_product_id'], ['offer_products.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_daily_quantities_offer_product_id', 'daily_quantities', ['offer_product_id'])

    # ============================================================================
    # documents: schemaless collections
    # ============================================================================
    op.create_table(
        'documents',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('collection', sa.String(length=64), nullable=False),
        sa.Column('doc_id', sa.String(length=64), nullable=False),
        sa.Column('data', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('collection', 'doc_id', name='uq_documents_collection_doc_id'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_documents_collection', 'documents', ['collection'])


def downgrade():
    op.drop_index('ix_documents_collection', table_name='documents')
    op.drop_table('documents')
    op.drop_index('ix_daily_quantities_offer_product_id', table_name='daily_quantities')
    op.drop_table('daily_quantities')
    op.drop_index('ix_offer_products_offer_id', table_name='offer_products')
    op.drop_table('offer_products')
    op.drop_index('ix_offers_producer_status', table_name='offers')
    op.drop_index('ix_offers_status', table_name='offers')
    op.drop_index('ix_offers_producer_id', table_name='offers')
    op.drop_table('offers')
    op.drop_table('authorized_products')
    op.drop_index('ix_product_varieties_product_id', table_name='product_varieties')
    op.drop_table('product_varieties')
    op.drop_table('products')
    op.drop_index('ix_certifications_user_id', table_name='certifications')
    op.drop_table('certifications')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
