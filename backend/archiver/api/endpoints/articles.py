from typing import Any, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Path
from sqlalchemy.orm import Session

from archiver.api.deps import get_db, get_current_active_user, get_current_moderator
from archiver.crud.article import (
    get_article, get_article_by_url, get_articles, get_published_articles,
    create_article, update_article, delete_article, increment_views,
    add_bookmark, remove_bookmark, get_article_stats
)
from archiver.models.article import ArticleStatus
from archiver.models.user import User
from archiver.schemas.article import Article, ArticleCreate, ArticleUpdate, ArticleStats

router = APIRouter()


def _get_or_404(db: Session, article_id: int):
    article = get_article(db, article_id=article_id)
    if not article:
        raise HTTPException(
            status_code=404,
            detail="Article not found",
        )
    return article


@router.get("/", response_model=List[Article])
def read_articles(
    db: Session = Depends(get_db),
    skip: int = 0,
    limit: int = 20,
    category_id: Optional[int] = None,
    status: Optional[ArticleStatus] = None,
) -> Any:
    """
    Retrieve articles, newest first.
    """
    return get_articles(db, skip=skip, limit=limit, category_id=category_id, status=status)


@router.get("/published", response_model=List[Article])
def read_published_articles(
    db: Session = Depends(get_db),
    skip: int = 0,
    limit: int = 20,
) -> Any:
    """
    Processed, public, non-archived articles.
    """
    return get_published_articles(db, skip=skip, limit=limit)


@router.get("/stats", response_model=ArticleStats)
def read_article_stats(
    db: Session = Depends(get_db),
) -> Any:
    return get_article_stats(db)


@router.post("/", response_model=Article, status_code=201)
def create_new_article(
    *,
    db: Session = Depends(get_db),
    article_in: ArticleCreate,
    current_user: User = Depends(get_current_active_user),
) -> Any:
    """
    Archive a new article.
    """
    if get_article_by_url(db, url=article_in.url):
        raise HTTPException(
            status_code=400,
            detail="Article with this URL already exists",
        )
    return create_article(db, article_in, created_by=current_user.id)


@router.get("/{article_id}", response_model=Article)
def read_article(
    *,
    db: Session = Depends(get_db),
    article_id: int = Path(..., description="The ID of the article to get"),
) -> Any:
    """
    Get article by ID.
    """
    return _get_or_404(db, article_id)


@router.put("/{article_id}", response_model=Article)
def update_article_api(
    *,
    db: Session = Depends(get_db),
    article_id: int = Path(..., description="The ID of the article to update"),
    article_in: ArticleUpdate,
    current_user: User = Depends(get_current_moderator),
) -> Any:
    """
    Update an article.
    """
    _get_or_404(db, article_id)
    return update_article(db, article_id=article_id, article=article_in, updated_by=current_user.id)


@router.delete("/{article_id}", response_model=bool)
def delete_article_api(
    *,
    db: Session = Depends(get_db),
    article_id: int = Path(..., description="The ID of the article to delete"),
    _: Any = Depends(get_current_moderator),
) -> Any:
    """
    Delete an article.
    """
    _get_or_404(db, article_id)
    return delete_article(db, article_id=article_id)


@router.post("/{article_id}/view", response_model=Article)
def view_article(
    *,
    db: Session = Depends(get_db),
    article_id: int = Path(..., description="The ID of the article"),
) -> Any:
    article = _get_or_404(db, article_id)
    return increment_views(db, article)


@router.post("/{article_id}/bookmark", response_model=Article)
def bookmark_article(
    *,
    db: Session = Depends(get_db),
    article_id: int = Path(..., description="The ID of the article"),
    _: Any = Depends(get_current_active_user),
) -> Any:
    article = _get_or_404(db, article_id)
    return add_bookmark(db, article)


@router.delete("/{article_id}/bookmark", response_model=Article)
def unbookmark_article(
    *,
    db: Session = Depends(get_db),
    article_id: int = Path(..., description="The ID of the article"),
    _: Any = Depends(get_current_active_user),
) -> Any:
    article = _get_or_404(db, article_id)
    return remove_bookmark(db, article)
