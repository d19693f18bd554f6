import datetime
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, JSON
from sqlalchemy.orm import relationship, backref

from archiver.db.base_class import Base
from archiver.models.article import article_category


class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False, unique=True)
    slug = Column(String(100), nullable=False, unique=True)
    description = Column(String(500), nullable=True)
    color = Column(String(7), nullable=False, default="#3B82F6")
    icon = Column(String(50), nullable=True, default="📂")
    parent_id = Column(Integer, ForeignKey("categories.id"), nullable=True, index=True)
    settings = Column(JSON, nullable=False, default=dict)  # auto_tag, keywords, default_tags

    # Denormalized stats, refreshed by crud.category.update_category_stats
    article_count = Column(Integer, nullable=False, default=0)
    stats_updated_at = Column(DateTime, default=datetime.datetime.utcnow)

    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime, default=datetime.datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.datetime.utcnow, onupdate=datetime.datetime.utcnow)

    # Relationships
    articles = relationship("Article", secondary=article_category, back_populates="categories")
    children = relationship("Category", backref=backref("parent", remote_side=[id]))
