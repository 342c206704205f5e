"""create news, source, interaction and device tables

Revision ID: 4c1e9a7b2d10
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '4c1e9a7b2d10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the news aggregation schema."""
    op.create_table('news_articles',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('title', sa.String(length=500), nullable=False),
        sa.Column('url', sa.String(length=1000), nullable=False),
        sa.Column('source', sa.String(length=200), nullable=False),
        sa.Column('category', sa.String(length=100), nullable=False),
        sa.Column('language', sa.String(length=10), nullable=False, server_default='en'),
        sa.Column('summary', sa.Text(), nullable=True),
        sa.Column('image_url', sa.String(length=1000), nullable=True),
        sa.Column('title_tokens', sa.JSON(), nullable=True),
        sa.Column('is_breaking', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('breaking_at', sa.DateTime(), nullable=True),
        sa.Column('notified_at', sa.DateTime(), nullable=True),
        sa.Column('source_count', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('likes', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('views', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('published_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('url')
    )
    op.create_index('ix_news_articles_category', 'news_articles', ['category'])
    op.create_index('ix_news_articles_language', 'news_articles', ['language'])
    op.create_index('idx_news_articles_created_at_id', 'news_articles', ['created_at', 'id'])

    op.create_table('article_sources',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('article_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('url', sa.String(length=1000), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['article_id'], ['news_articles.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('url')
    )
    op.create_index('ix_article_sources_article_id', 'article_sources', ['article_id'])

    op.create_table('article_interactions',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('article_id', sa.Integer(), nullable=False),
        sa.Column('device_id', sa.String(length=255), nullable=False),
        sa.Column('kind', sa.String(length=10), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['article_id'], ['news_articles.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('article_id', 'device_id', 'kind', name='uq_article_interaction')
    )
    op.create_index('ix_article_interactions_article_id', 'article_interactions', ['article_id'])

    op.create_table('devices',
        sa.Column('token', sa.String(length=512), nullable=False),
        sa.Column('categories', sa.JSON(), nullable=False),
        sa.Column('platform', sa.String(length=50), nullable=False, server_default='web'),
        sa.Column('language', sa.String(length=10), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('token')
    )


def downgrade() -> None:
    """Drop the news aggregation schema."""
    op.drop_table('devices')
    op.drop_index('ix_article_interactions_article_id', 'article_interactions')
    op.drop_table('article_interactions')
    op.drop_index('ix_article_sources_article_id', 'article_sources')
    op.drop_table('article_sources')
    op.drop_index('idx_news_articles_created_at_id', 'news_articles')
    op.drop_index('ix_news_articles_language', 'news_articles')
    op.drop_index('ix_news_articles_category', 'news_articles')
    op.drop_table('news_articles')
