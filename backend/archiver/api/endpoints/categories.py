from typing import Any, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Path
from sqlalchemy.orm import Session

from archiver.api.deps import get_db, get_current_moderator, get_current_admin
from archiver.crud.category import (
    get_category, get_category_by_slug, get_categories, get_top_categories,
    create_category, update_category, delete_category, get_category_tree,
    get_category_path, get_category_articles, update_category_stats
)
from archiver.models.user import User
from archiver.schemas.article import Article
from archiver.schemas.category import (
    Category, CategoryCreate, CategoryUpdate, CategoryTree, CategoryPath
)

router = APIRouter()


def _get_or_404(db: Session, category_id: int):
    category = get_category(db, category_id=category_id)
    if not category:
        raise HTTPException(
            status_code=404,
            detail="Category not found",
        )
    return category


@router.get("/", response_model=List[Category])
def read_categories(
    db: Session = Depends(get_db),
    skip: int = 0,
    limit: int = 100,
    parent_id: Optional[int] = None,
) -> Any:
    """
    Retrieve categories.
    """
    return get_categories(db, skip=skip, limit=limit, parent_id=parent_id)


@router.get("/tree", response_model=CategoryTree)
def read_category_tree(
    db: Session = Depends(get_db),
) -> Any:
    """
    Retrieve category tree.
    """
    return {"categories": get_category_tree(db)}


@router.get("/top", response_model=List[Category])
def read_top_categories(
    db: Session = Depends(get_db),
    limit: int = 10,
) -> Any:
    """
    Root categories with the most articles.
    """
    return get_top_categories(db, limit=limit)


@router.post("/", response_model=Category, status_code=201)
def create_new_category(
    *,
    db: Session = Depends(get_db),
    category_in: CategoryCreate,
    current_user: User = Depends(get_current_moderator),
) -> Any:
    """
    Create new category.
    """
    if category_in.slug:
        existing = get_category_by_slug(db, slug=category_in.slug)
        if existing:
            raise HTTPException(
                status_code=400,
                detail=f"Category with slug '{category_in.slug}' already exists",
            )

    if category_in.parent_id is not None:
        parent = get_category(db, category_id=category_in.parent_id)
        if not parent:
            raise HTTPException(
                status_code=404,
                detail="Parent category not found",
            )

    return create_category(db, category_in, created_by=current_user.id)


@router.get("/slug/{slug}", response_model=Category)
def read_category_by_slug(
    *,
    db: Session = Depends(get_db),
    slug: str = Path(..., description="The slug of the category to get"),
) -> Any:
    """
    Get category by slug.
    """
    category = get_category_by_slug(db, slug=slug)
    if not category:
        raise HTTPException(
            status_code=404,
            detail="Category not found",
        )
    return category


@router.get("/{category_id}", response_model=Category)
def read_category(
    *,
    db: Session = Depends(get_db),
    category_id: int = Path(..., description="The ID of the category to get"),
) -> Any:
    """
    Get category by ID.
    """
    return _get_or_404(db, category_id)


@router.get("/{category_id}/path", response_model=CategoryPath)
def read_category_path(
    *,
    db: Session = Depends(get_db),
    category_id: int = Path(..., description="The ID of the category"),
) -> Any:
    """
    Breadcrumb from the outermost ancestor down to the category.
    """
    path = get_category_path(db, category_id=category_id)
    if path is None:
        raise HTTPException(
            status_code=404,
            detail="Category not found",
        )
    return {"id": category_id, "path": path, "full_path": " > ".join(path)}


@router.get("/{category_id}/articles", response_model=List[Article])
def read_category_articles(
    *,
    db: Session = Depends(get_db),
    category_id: int = Path(..., description="The ID of the category"),
    skip: int = 0,
    limit: int = 10,
) -> Any:
    """
    Public, non-archived articles of a category, newest first.
    """
    _get_or_404(db, category_id)
    return get_category_articles(db, category_id=category_id, skip=skip, limit=limit)


@router.put("/{category_id}", response_model=Category)
def update_category_api(
    *,
    db: Session = Depends(get_db),
    category_id: int = Path(..., description="The ID of the category to update"),
    category_in: CategoryUpdate,
    _: Any = Depends(get_current_moderator),
) -> Any:
    """
    Update a category.
    """
    category = _get_or_404(db, category_id)

    if category_in.slug and category_in.slug.lower() != category.slug:
        existing = get_category_by_slug(db, slug=category_in.slug)
        if existing:
            raise HTTPException(
                status_code=400,
                detail=f"Category with slug '{category_in.slug}' already exists",
            )

    if category_in.parent_id is not None and category_in.parent_id != category.parent_id:
        parent = get_category(db, category_id=category_in.parent_id)
        if not parent:
            raise HTTPException(
                status_code=404,
                detail="Parent category not found",
            )

    return update_category(db, category_id=category_id, category=category_in)


@router.delete("/{category_id}", response_model=bool)
def delete_category_api(
    *,
    db: Session = Depends(get_db),
    category_id: int = Path(..., description="The ID of the category to delete"),
    _: Any = Depends(get_current_admin),
) -> Any:
    """
    Delete a category. Refused while subcategories or articles reference it.
    """
    _get_or_404(db, category_id)
    return delete_category(db, category_id=category_id)


@router.post("/{category_id}/refresh-stats", response_model=Category)
def refresh_category_stats(
    *,
    db: Session = Depends(get_db),
    category_id: int = Path(..., description="The ID of the category"),
    _: Any = Depends(get_current_moderator),
) -> Any:
    """
    Recount the articles of a category.
    """
    category = _get_or_404(db, category_id)
    return update_category_stats(db, category_id=category_id) or category
