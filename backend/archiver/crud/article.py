import datetime
import logging
from typing import Iterable, List, Optional

from sqlalchemy import func, case
from sqlalchemy.orm import Session

from archiver.core.exceptions import RecordValidationError
from archiver.core.validation import validate_article
from archiver.crud.category import update_category_stats
from archiver.crud.user import get_user, increment_article_count
from archiver.models.article import Article, ArticleStatus, article_category
from archiver.models.category import Category
from archiver.schemas.article import ArticleCreate, ArticleUpdate, ArticleStats
from archiver.schemas.validation import FieldError

logger = logging.getLogger(__name__)


def get_article(db: Session, article_id: int) -> Optional[Article]:
    return db.query(Article).filter(Article.id == article_id).first()


def get_article_by_url(db: Session, url: str) -> Optional[Article]:
    return db.query(Article).filter(Article.url == url.strip()).first()


def get_articles(
    db: Session,
    skip: int = 0,
    limit: int = 20,
    category_id: Optional[int] = None,
    status: Optional[ArticleStatus] = None,
) -> List[Article]:
    query = db.query(Article)

    if category_id is not None:
        query = query.join(article_category, Article.id == article_category.c.article_id).filter(
            article_category.c.category_id == category_id
        )
    if status is not None:
        query = query.filter(Article.status == status)

    return query.order_by(Article.added_date.desc()).offset(skip).limit(limit).all()


def get_articles_by_category(db: Session, category_id: int) -> List[Article]:
    return (
        db.query(Article)
        .join(article_category, Article.id == article_category.c.article_id)
        .filter(article_category.c.category_id == category_id)
        .all()
    )


def get_published_articles(db: Session, skip: int = 0, limit: int = 20) -> List[Article]:
    return (
        db.query(Article)
        .filter(
            Article.status == ArticleStatus.PROCESSED,
            Article.is_public == True,  # noqa: E712
            Article.is_archived == False,  # noqa: E712
        )
        .order_by(Article.added_date.desc())
        .offset(skip)
        .limit(limit)
        .all()
    )


def _resolve_categories(db: Session, category_ids: Iterable[int]) -> List[Category]:
    category_ids = list(dict.fromkeys(category_ids))
    if not category_ids:
        return []

    categories = db.query(Category).filter(Category.id.in_(category_ids)).all()
    missing = set(category_ids) - {category.id for category in categories}
    if missing:
        raise RecordValidationError([
            FieldError(field="category_ids", message="Category not found", value=sorted(missing))
        ])
    return categories


def _refresh_stats(db: Session, category_ids: Iterable[int]) -> None:
    for category_id in set(category_ids):
        update_category_stats(db, category_id)


def create_article(db: Session, article: ArticleCreate, created_by: Optional[int] = None) -> Article:
    errors = validate_article(article)
    if errors:
        raise RecordValidationError(errors)

    categories = _resolve_categories(db, article.category_ids)
    content = article.content.model_dump()

    db_article = Article(
        url=article.url.strip(),
        title=article.title.strip(),
        description=article.description,
        publish_date=article.publish_date,
        source_domain=article.source.domain.strip().lower(),
        source_site_name=article.source.site_name.strip(),
        source_favicon=article.source.favicon,
        source_trust_score=article.source.trust_score,
        raw_html=content["raw_html"],
        extracted_text=content["extracted_text"],
        clean_text=content["clean_text"],
        images=content["images"],
        videos=content["videos"],
        word_count=content["word_count"],
        reading_time=content["reading_time"],
        language=content["language"].strip().lower(),
        author=article.author,
        author_url=article.author_url,
        tags=[tag.strip().lower() for tag in article.tags],
        custom_tags=[tag.strip() for tag in article.custom_tags],
        external_id=article.external_id,
        classification=article.classification.model_dump(),
        scraping_method=article.scraping_method,
        status=article.status,
        created_by=created_by,
        updated_by=created_by,
        categories=categories,
        **article.flags.model_dump(),
    )
    db.add(db_article)
    db.commit()
    db.refresh(db_article)
    logger.info(f"Archived article {db_article.id}: {db_article.url}")

    _refresh_stats(db, [category.id for category in categories])
    if created_by is not None:
        creator = get_user(db, created_by)
        if creator is not None:
            increment_article_count(db, creator)

    return db_article


def update_article(
    db: Session,
    article_id: int,
    article: ArticleUpdate,
    updated_by: Optional[int] = None,
) -> Optional[Article]:
    db_article = get_article(db, article_id)
    if not db_article:
        return None

    errors = validate_article(article)
    if errors:
        raise RecordValidationError(errors)

    update_data = article.model_dump(exclude_unset=True)
    affected = set(db_article.category_ids)

    category_ids = update_data.pop("category_ids", None)
    if category_ids is not None:
        db_article.categories = _resolve_categories(db, category_ids)
        affected.update(category_ids)

    flags = update_data.pop("flags", None)
    if flags is not None:
        for key, value in flags.items():
            setattr(db_article, key, value)

    content = update_data.pop("content", None)
    if content is not None:
        for key, value in content.items():
            setattr(db_article, key, value)

    if "tags" in update_data and update_data["tags"] is not None:
        update_data["tags"] = [tag.strip().lower() for tag in update_data["tags"]]

    for key, value in update_data.items():
        setattr(db_article, key, value)

    db_article.updated_date = datetime.datetime.utcnow()
    if updated_by is not None:
        db_article.updated_by = updated_by

    db.commit()
    db.refresh(db_article)

    if category_ids is not None or flags is not None:
        _refresh_stats(db, affected)

    return db_article


def delete_article(db: Session, article_id: int) -> bool:
    db_article = get_article(db, article_id)
    if not db_article:
        return False

    category_ids = db_article.category_ids
    db.delete(db_article)
    db.commit()

    _refresh_stats(db, category_ids)
    return True


def increment_views(db: Session, article: Article) -> Article:
    article.views = (article.views or 0) + 1
    db.commit()
    db.refresh(article)
    return article


def add_bookmark(db: Session, article: Article) -> Article:
    article.bookmarks = (article.bookmarks or 0) + 1
    db.commit()
    db.refresh(article)
    return article


def remove_bookmark(db: Session, article: Article) -> Article:
    if article.bookmarks and article.bookmarks > 0:
        article.bookmarks -= 1
        db.commit()
        db.refresh(article)
    return article


def get_article_stats(db: Session) -> ArticleStats:
    def count_status(status: ArticleStatus):
        return func.sum(case((Article.status == status, 1), else_=0))

    row = db.query(
        func.count(Article.id),
        count_status(ArticleStatus.PROCESSED),
        count_status(ArticleStatus.PENDING),
        count_status(ArticleStatus.FAILED),
        func.avg(Article.word_count),
        func.avg(Article.reading_time),
    ).one()

    total, processed, pending, failed, avg_word_count, avg_reading_time = row
    return ArticleStats(
        total=total or 0,
        processed=processed or 0,
        pending=pending or 0,
        failed=failed or 0,
        avg_word_count=float(avg_word_count or 0),
        avg_reading_time=float(avg_reading_time or 0),
    )
