"""create_reviews_schema

Revision ID: 3f9c1d2e4a5b
Revises:
Create Date: 2025-11-03 09:15:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f9c1d2e4a5b'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False,
                  comment="User's email address (used for login)"),
        sa.Column('username', sa.String(length=50), nullable=False,
                  comment='Unique public username'),
        sa.Column('profile_pic', sa.Text(), nullable=True,
                  comment="URL to the user's profile picture"),
        sa.Column('is_active', sa.Boolean(), nullable=False,
                  comment='Whether the account is active'),
        sa.Column('is_deleted', sa.Boolean(), nullable=False,
                  comment='Soft-delete flag; deleted users cannot authenticate'),
        sa.Column('is_superuser', sa.Boolean(), nullable=False,
                  comment='Whether user can access moderation endpoints'),
        sa.Column('created_at', sa.DateTime(timezone=True),
                  server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True),
                  server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)
    op.create_index(op.f('ix_users_username'), 'users', ['username'], unique=True)

    op.create_table(
        'recipes',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('user_id', sa.String(length=36), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('is_deleted', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True),
                  server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True),
                  server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_recipes_user_id'), 'recipes', ['user_id'], unique=False)
    op.create_index(op.f('ix_recipes_is_deleted'), 'recipes', ['is_deleted'], unique=False)

    op.create_table(
        'reviews',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('recipe_id', sa.String(length=36), nullable=False),
        sa.Column('user_id', sa.String(length=36), nullable=False),
        sa.Column('rating', sa.Integer(), nullable=False,
                  comment='Rating from 1-5 stars'),
        sa.Column('comment', sa.String(length=500), nullable=True,
                  comment='Optional review text'),
        sa.Column('helpful_count', sa.Integer(), nullable=False,
                  server_default='0', comment='Number of helpful votes'),
        sa.Column('is_flagged', sa.Boolean(), nullable=False,
                  server_default=sa.false(), comment='Flag for moderation review'),
        sa.Column('flag_reason', sa.String(length=200), nullable=True,
                  comment='Reason supplied by the user who flagged the review'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint('rating >= 1 AND rating <= 5', name='ck_review_rating_range'),
        sa.ForeignKeyConstraint(['recipe_id'], ['recipes.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('recipe_id', 'user_id', name='uq_review_recipe_user'),
    )
    op.create_index(op.f('ix_reviews_recipe_id'), 'reviews', ['recipe_id'], unique=False)
    op.create_index(op.f('ix_reviews_user_id'), 'reviews', ['user_id'], unique=False)
    op.create_index(op.f('ix_reviews_is_flagged'), 'reviews', ['is_flagged'], unique=False)
    op.create_index(op.f('ix_reviews_created_at'), 'reviews', ['created_at'], unique=False)


def downgrade() -> None:
    op.drop_index(op.f('ix_reviews_created_at'), table_name='reviews')
    op.drop_index(op.f('ix_reviews_is_flagged'), table_name='reviews')
    op.drop_index(op.f('ix_reviews_user_id'), table_name='reviews')
    op.drop_index(op.f('ix_reviews_recipe_id'), table_name='reviews')
    op.drop_table('reviews')
    op.drop_index(op.f('ix_recipes_is_deleted'), table_name='recipes')
    op.drop_index(op.f('ix_recipes_user_id'), table_name='recipes')
    op.drop_table('recipes')
    op.drop_index(op.f('ix_users_username'), table_name='users')
    op.drop_index(op.f('ix_users_email'), table_name='users')
    op.drop_table('users')
