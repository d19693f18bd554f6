from datetime import datetime
from typing import Optional, List, Literal
from pydantic import BaseModel

from archiver.models.article import ArticleStatus, ScrapingMethod


class ArticleSource(BaseModel):
    domain: str
    site_name: str
    favicon: Optional[str] = None
    trust_score: int = 50


class ArticleImage(BaseModel):
    url: str
    alt: Optional[str] = None
    caption: Optional[str] = None


class ArticleContent(BaseModel):
    raw_html: Optional[str] = None
    extracted_text: Optional[str] = None
    clean_text: Optional[str] = None
    images: List[ArticleImage] = []
    videos: List[str] = []
    word_count: int = 0
    reading_time: int = 0
    language: str = "en"


class ArticleEntity(BaseModel):
    name: str
    type: Literal["person", "organization", "location", "other"] = "other"
    confidence: float = 0


class ArticleSentiment(BaseModel):
    score: float = 0
    label: Literal["positive", "negative", "neutral"] = "neutral"


class ArticleClassification(BaseModel):
    topics: List[str] = []
    keywords: List[str] = []
    entities: List[ArticleEntity] = []
    sentiment: ArticleSentiment = ArticleSentiment()
    difficulty: Optional[Literal["beginner", "intermediate", "advanced"]] = None
    quality: int = 50


class ArticleScraping(BaseModel):
    method: ScrapingMethod = ScrapingMethod.MANUAL
    attempts: int = 0
    last_attempt: Optional[datetime] = None
    errors: List[str] = []


class ArticleAnalytics(BaseModel):
    views: int = 0
    bookmarks: int = 0
    shares: int = 0
    rating: float = 0


class ArticleFlags(BaseModel):
    is_duplicate: bool = False
    is_archived: bool = False
    is_public: bool = True
    needs_review: bool = False


class ArticleBase(BaseModel):
    url: str
    title: str
    description: Optional[str] = None
    publish_date: Optional[datetime] = None
    source: ArticleSource
    author: Optional[str] = None
    author_url: Optional[str] = None
    tags: List[str] = []
    custom_tags: List[str] = []
    external_id: Optional[str] = None


class ArticleCreate(ArticleBase):
    category_ids: List[int] = []
    content: ArticleContent = ArticleContent()
    classification: ArticleClassification = ArticleClassification()
    scraping_method: ScrapingMethod = ScrapingMethod.MANUAL
    status: ArticleStatus = ArticleStatus.PENDING
    flags: ArticleFlags = ArticleFlags()


class ArticleUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    publish_date: Optional[datetime] = None
    author: Optional[str] = None
    author_url: Optional[str] = None
    tags: Optional[List[str]] = None
    custom_tags: Optional[List[str]] = None
    category_ids: Optional[List[int]] = None
    content: Optional[ArticleContent] = None
    classification: Optional[ArticleClassification] = None
    status: Optional[ArticleStatus] = None
    flags: Optional[ArticleFlags] = None


class Article(ArticleBase):
    id: int
    added_date: datetime
    updated_date: datetime
    category_ids: List[int] = []
    content: ArticleContent = ArticleContent()
    classification: ArticleClassification = ArticleClassification()
    scraping: ArticleScraping = ArticleScraping()
    analytics: ArticleAnalytics = ArticleAnalytics()
    status: ArticleStatus
    flags: ArticleFlags = ArticleFlags()
    created_by: Optional[int] = None
    updated_by: Optional[int] = None

    class Config:
        from_attributes = True


class ArticleStats(BaseModel):
    total: int = 0
    processed: int = 0
    pending: int = 0
    failed: int = 0
    avg_word_count: float = 0
    avg_reading_time: float = 0
