"""initial_schema

Revision ID: 3f9c2a71d0b4
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f9c2a71d0b4'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps(server_side: bool = True) -> list[sa.Column]:
    default = sa.text('CURRENT_TIMESTAMP') if server_side else None
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=default, nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=default, nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('hashed_password', sa.String(length=255), nullable=True),
        sa.Column('username', sa.String(length=50), nullable=False),
        sa.Column('full_name', sa.String(length=255), nullable=True),
        sa.Column('avatar_url', sa.Text(), nullable=True),
        sa.Column('bio', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('is_superuser', sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.Column('last_login_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)
    op.create_index(op.f('ix_users_username'), 'users', ['username'], unique=True)

    op.create_table(
        'user_follows',
        sa.Column('follower_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('followed_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), primary_key=True),
    )

    op.create_table(
        'genres',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('created_by_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        *_timestamps(),
    )
    op.create_index(op.f('ix_genres_name'), 'genres', ['name'], unique=True)

    op.create_table(
        'books',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('title', sa.String(length=500), nullable=False),
        sa.Column('author', sa.String(length=255), nullable=False),
        sa.Column('isbn', sa.String(length=20), nullable=True),
        sa.Column('olid', sa.String(length=32), nullable=True),
        sa.Column('cover_id', sa.Integer(), nullable=True),
        sa.Column('cover_image', sa.Text(), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('publish_year', sa.Integer(), nullable=True),
        sa.Column('page_count', sa.Integer(), nullable=True),
        sa.Column('ratings_average', sa.Float(), nullable=False, server_default='0'),
        sa.Column('ratings_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('total_shelved', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_by_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        *_timestamps(),
    )
    op.create_index(op.f('ix_books_title'), 'books', ['title'], unique=False)
    op.create_index(op.f('ix_books_author'), 'books', ['author'], unique=False)
    op.create_index(op.f('ix_books_isbn'), 'books', ['isbn'], unique=False)
    op.create_index(op.f('ix_books_ratings_average'), 'books', ['ratings_average'], unique=False)

    op.create_table(
        'book_genres',
        sa.Column('book_id', sa.Integer(), sa.ForeignKey('books.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('genre_id', sa.Integer(), sa.ForeignKey('genres.id', ondelete='CASCADE'), primary_key=True),
    )

    op.create_table(
        'library_entries',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('book_id', sa.Integer(), sa.ForeignKey('books.id', ondelete='CASCADE'), nullable=False),
        sa.Column('shelf', sa.String(length=20), nullable=False),
        sa.Column('pages_read', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('total_pages', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('percentage', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('personal_rating', sa.Integer(), nullable=True),
        sa.Column('date_added', sa.DateTime(timezone=True), nullable=False),
        sa.Column('date_finished', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(server_side=False),
        sa.UniqueConstraint('user_id', 'book_id', name='uq_library_user_book'),
        sa.CheckConstraint('pages_read >= 0', name='ck_library_pages_read'),
        sa.CheckConstraint('total_pages >= 0', name='ck_library_total_pages'),
        sa.CheckConstraint('percentage >= 0 AND percentage <= 100', name='ck_library_percentage_range'),
        sa.CheckConstraint(
            'personal_rating IS NULL OR (personal_rating >= 1 AND personal_rating <= 5)',
            name='ck_library_personal_rating_range',
        ),
    )
    op.create_index(op.f('ix_library_entries_id'), 'library_entries', ['id'], unique=False)
    op.create_index(op.f('ix_library_entries_user_id'), 'library_entries', ['user_id'], unique=False)
    op.create_index(op.f('ix_library_entries_book_id'), 'library_entries', ['book_id'], unique=False)
    op.create_index(op.f('ix_library_entries_shelf'), 'library_entries', ['shelf'], unique=False)

    op.create_table(
        'reviews',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('book_id', sa.Integer(), sa.ForeignKey('books.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('rating', sa.Integer(), nullable=False),
        sa.Column('comment', sa.Text(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('moderated_by_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('moderated_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(server_side=False),
        sa.CheckConstraint('rating >= 1 AND rating <= 5', name='ck_review_rating_range'),
    )
    op.create_index(op.f('ix_reviews_id'), 'reviews', ['id'], unique=False)
    op.create_index('ix_reviews_book_user', 'reviews', ['book_id', 'user_id'], unique=False)
    op.create_index('ix_reviews_status', 'reviews', ['status'], unique=False)

    op.create_table(
        'reading_goals',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('year', sa.Integer(), nullable=False),
        sa.Column('target_books', sa.Integer(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint('user_id', 'year', name='uq_reading_goal_user_year'),
        sa.CheckConstraint('target_books >= 1', name='ck_reading_goal_target'),
    )
    op.create_index(op.f('ix_reading_goals_user_id'), 'reading_goals', ['user_id'], unique=False)

    op.create_table(
        'activities',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('type', sa.String(length=30), nullable=False),
        sa.Column('book_id', sa.Integer(), sa.ForeignKey('books.id', ondelete='SET NULL'), nullable=True),
        sa.Column('target_user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=True),
        sa.Column('details', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_activities_user_created', 'activities', ['user_id', 'created_at'], unique=False)
    op.create_index('ix_activities_created', 'activities', ['created_at'], unique=False)

    op.create_table(
        'tutorials',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('video_url', sa.Text(), nullable=True),
        sa.Column('category', sa.String(length=100), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('author_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('views', sa.Integer(), nullable=False, server_default='0'),
        *_timestamps(),
    )
    op.create_index('ix_tutorials_status_category', 'tutorials', ['status', 'category'], unique=False)


def downgrade() -> None:
    op.drop_table('tutorials')
    op.drop_table('activities')
    op.drop_table('reading_goals')
    op.drop_table('reviews')
    op.drop_table('library_entries')
    op.drop_table('book_genres')
    op.drop_table('books')
    op.drop_table('genres')
    op.drop_table('user_follows')
    op.drop_table('users')
