import datetime
from enum import Enum
from sqlalchemy import (
    Column, Integer, String, Text, DateTime, Boolean, Float, ForeignKey, JSON, Table, Enum as SQLEnum
)
from sqlalchemy.orm import relationship

from archiver.db.base_class import Base


class ArticleStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    PROCESSED = "processed"
    FAILED = "failed"
    ARCHIVED = "archived"


class ScrapingMethod(str, Enum):
    MANUAL = "manual"
    BULK = "bulk"
    SCHEDULED = "scheduled"


# Association table for Article and Category
article_category = Table(
    "article_category",
    Base.metadata,
    Column("article_id", Integer, ForeignKey("articles.id"), primary_key=True),
    Column("category_id", Integer, ForeignKey("categories.id"), primary_key=True, index=True)
)


class Article(Base):
    __tablename__ = "articles"

    id = Column(Integer, primary_key=True, index=True)
    url = Column(String(2048), nullable=False, unique=True)
    title = Column(String(500), nullable=False)
    description = Column(Text, nullable=True)
    publish_date = Column(DateTime, nullable=True, index=True)
    added_date = Column(DateTime, default=datetime.datetime.utcnow, index=True)
    updated_date = Column(DateTime, default=datetime.datetime.utcnow)

    # Source
    source_domain = Column(String(255), nullable=False, index=True)
    source_site_name = Column(String(255), nullable=False)
    source_favicon = Column(String(2048), nullable=True)
    source_trust_score = Column(Integer, nullable=False, default=50)

    # Extracted content
    raw_html = Column(Text, nullable=True)
    extracted_text = Column(Text, nullable=True)
    clean_text = Column(Text, nullable=True)
    images = Column(JSON, nullable=False, default=list)
    videos = Column(JSON, nullable=False, default=list)
    word_count = Column(Integer, nullable=False, default=0)
    reading_time = Column(Integer, nullable=False, default=0)  # minutes
    language = Column(String(10), nullable=False, default="en")

    # Metadata
    author = Column(String(255), nullable=True)
    author_url = Column(String(2048), nullable=True)
    tags = Column(JSON, nullable=False, default=list)
    custom_tags = Column(JSON, nullable=False, default=list)
    external_id = Column(String(255), nullable=True)

    # Topics, keywords, entities, sentiment, difficulty, quality
    classification = Column(JSON, nullable=False, default=dict)

    # Scraping provenance
    scraping_method = Column(SQLEnum(ScrapingMethod), nullable=False, default=ScrapingMethod.MANUAL)
    scraping_attempts = Column(Integer, nullable=False, default=0)
    scraping_last_attempt = Column(DateTime, nullable=True)
    scraping_errors = Column(JSON, nullable=False, default=list)

    # Analytics
    views = Column(Integer, nullable=False, default=0)
    bookmarks = Column(Integer, nullable=False, default=0)
    shares = Column(Integer, nullable=False, default=0)
    rating = Column(Float, nullable=False, default=0)

    status = Column(SQLEnum(ArticleStatus), nullable=False, default=ArticleStatus.PENDING, index=True)

    # Flags
    is_duplicate = Column(Boolean, nullable=False, default=False)
    is_archived = Column(Boolean, nullable=False, default=False)
    is_public = Column(Boolean, nullable=False, default=True, index=True)
    needs_review = Column(Boolean, nullable=False, default=False)

    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    updated_by = Column(Integer, ForeignKey("users.id"), nullable=True)

    # Relationships
    categories = relationship("Category", secondary=article_category, back_populates="articles")

    @property
    def source(self):
        return {
            "domain": self.source_domain,
            "site_name": self.source_site_name,
            "favicon": self.source_favicon,
            "trust_score": self.source_trust_score,
        }

    @property
    def content(self):
        return {
            "raw_html": self.raw_html,
            "extracted_text": self.extracted_text,
            "clean_text": self.clean_text,
            "images": self.images or [],
            "videos": self.videos or [],
            "word_count": self.word_count,
            "reading_time": self.reading_time,
            "language": self.language,
        }

    @property
    def scraping(self):
        return {
            "method": self.scraping_method,
            "attempts": self.scraping_attempts,
            "last_attempt": self.scraping_last_attempt,
            "errors": self.scraping_errors or [],
        }

    @property
    def analytics(self):
        return {
            "views": self.views,
            "bookmarks": self.bookmarks,
            "shares": self.shares,
            "rating": self.rating,
        }

    @property
    def flags(self):
        return {
            "is_duplicate": self.is_duplicate,
            "is_archived": self.is_archived,
            "is_public": self.is_public,
            "needs_review": self.needs_review,
        }

    @property
    def category_ids(self):
        return [category.id for category in self.categories]
