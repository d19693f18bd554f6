import datetime
import logging
import re
from typing import Any, Callable, Dict, Iterable, List, Optional, Set

from sqlalchemy import func
from sqlalchemy.orm import Session

from archiver.core.exceptions import CategoryDeleteError, CategoryHierarchyError, RecordValidationError
from archiver.core.validation import validate_category
from archiver.models.article import Article, article_category
from archiver.models.category import Category
from archiver.schemas.category import Category as CategorySchema, CategoryCreate, CategoryUpdate
from archiver.schemas.validation import FieldError

logger = logging.getLogger(__name__)

SUBCATEGORIES_EXIST = "Cannot delete category with subcategories. Please delete or move subcategories first."
ARTICLES_EXIST = "Cannot delete category with articles. Please move or delete articles first."


def generate_slug(name: str) -> str:
    slug = name.lower()
    slug = re.sub(r"[^a-z0-9\s-]", "", slug).strip()
    slug = re.sub(r"\s+", "-", slug)
    return re.sub(r"-+", "-", slug)


def get_category(db: Session, category_id: int) -> Optional[Category]:
    return db.query(Category).filter(Category.id == category_id).first()


def get_category_by_slug(db: Session, slug: str) -> Optional[Category]:
    return db.query(Category).filter(Category.slug == slug.lower()).first()


def get_category_by_name(db: Session, name: str) -> Optional[Category]:
    return db.query(Category).filter(Category.name == name).first()


def get_categories(
    db: Session,
    skip: int = 0,
    limit: int = 100,
    parent_id: Optional[int] = None
) -> List[Category]:
    query = db.query(Category)

    if parent_id is not None:
        query = query.filter(Category.parent_id == parent_id)

    return query.order_by(Category.name).offset(skip).limit(limit).all()


def get_root_categories(db: Session) -> List[Category]:
    return db.query(Category).filter(Category.parent_id == None).order_by(Category.name).all()  # noqa: E711


def get_subcategories(db: Session, category_id: int) -> List[Category]:
    return db.query(Category).filter(Category.parent_id == category_id).order_by(Category.name).all()


def get_top_categories(db: Session, limit: int = 10) -> List[Category]:
    return (
        db.query(Category)
        .filter(Category.parent_id == None)  # noqa: E711
        .order_by(Category.article_count.desc())
        .limit(limit)
        .all()
    )


def _normalize(data: Dict[str, Any]) -> Dict[str, Any]:
    if data.get("name") is not None:
        data["name"] = data["name"].strip()
    if data.get("slug") is not None:
        data["slug"] = data["slug"].strip().lower()
    return data


def _parent_missing(parent_id: int) -> FieldError:
    return FieldError(field="parent_id", message="Parent category not found", value=parent_id)


def create_category(db: Session, category: CategoryCreate, created_by: Optional[int] = None) -> Category:
    data = _normalize(category.model_dump())
    if not data.get("slug") and data.get("name"):
        data["slug"] = generate_slug(data["name"])

    errors = validate_category(CategoryCreate(**data))
    if data.get("parent_id") is not None and get_category(db, data["parent_id"]) is None:
        errors.append(_parent_missing(data["parent_id"]))
    if errors:
        raise RecordValidationError(errors)

    db_category = Category(**data, created_by=created_by)
    db.add(db_category)
    db.commit()
    db.refresh(db_category)
    logger.info(f"Created category '{db_category.name}' ({db_category.id})")
    return db_category


def is_descendant_or_self(db: Session, category_id: int, candidate_id: int) -> bool:
    """
    True when ``candidate_id`` is ``category_id`` itself or lies below it.
    """
    seen: Set[int] = set()
    current: Optional[int] = candidate_id
    while current is not None:
        if current == category_id:
            return True
        if current in seen:
            # pre-existing cycle that does not pass through category_id
            return False
        seen.add(current)
        row = db.query(Category.parent_id).filter(Category.id == current).first()
        current = row[0] if row else None
    return False


def update_category(db: Session, category_id: int, category: CategoryUpdate) -> Optional[Category]:
    db_category = get_category(db, category_id)
    if not db_category:
        return None

    update_data = _normalize(category.model_dump(exclude_unset=True))

    errors = validate_category(CategoryUpdate(**update_data), partial=True)
    if errors:
        raise RecordValidationError(errors)

    parent_id = update_data.get("parent_id")
    if parent_id is not None:
        if get_category(db, parent_id) is None:
            raise RecordValidationError([_parent_missing(parent_id)])
        if parent_id == category_id:
            raise CategoryHierarchyError("Category cannot be its own parent")
        if is_descendant_or_self(db, category_id, parent_id):
            raise CategoryHierarchyError("Category cannot be moved under one of its own subcategories")

    for key, value in update_data.items():
        setattr(db_category, key, value)

    db.commit()
    db.refresh(db_category)
    return db_category


def delete_category(db: Session, category_id: int) -> bool:
    """
    Delete a category. Returns False when it does not exist and raises
    CategoryDeleteError while subcategories or articles still reference it.
    """
    db_category = get_category(db, category_id)
    if not db_category:
        return False

    children = db.query(Category).filter(Category.parent_id == category_id).count()
    if children > 0:
        raise CategoryDeleteError(SUBCATEGORIES_EXIST)

    articles = (
        db.query(func.count())
        .select_from(article_category)
        .filter(article_category.c.category_id == category_id)
        .scalar()
    )
    if articles > 0:
        raise CategoryDeleteError(ARTICLES_EXIST)

    db.delete(db_category)
    db.commit()
    logger.info(f"Deleted category {category_id}")
    return True


def count_category_articles(db: Session, category_id: int) -> int:
    return (
        db.query(func.count(Article.id))
        .join(article_category, Article.id == article_category.c.article_id)
        .filter(article_category.c.category_id == category_id, Article.is_archived == False)  # noqa: E712
        .scalar()
    )


def update_category_stats(db: Session, category_id: int) -> Optional[Category]:
    """
    Recompute the denormalized article count of a category.

    Call it after committing the change that moved articles in or out of the
    category. Failures are logged and swallowed so they never fail the
    triggering operation; None is returned in that case.
    """
    try:
        db_category = get_category(db, category_id)
        if db_category is None:
            logger.warning(f"Cannot update stats, category {category_id} not found")
            return None

        db_category.article_count = count_category_articles(db, category_id)
        db_category.stats_updated_at = datetime.datetime.utcnow()
        db.commit()
        db.refresh(db_category)
        return db_category
    except Exception as e:
        db.rollback()
        logger.error(f"Failed to update stats for category {category_id}: {str(e)}")
        return None


def get_category_articles(db: Session, category_id: int, skip: int = 0, limit: int = 10) -> List[Article]:
    return (
        db.query(Article)
        .join(article_category, Article.id == article_category.c.article_id)
        .filter(
            article_category.c.category_id == category_id,
            Article.is_archived == False,  # noqa: E712
            Article.is_public == True,  # noqa: E712
        )
        .order_by(Article.added_date.desc())
        .offset(skip)
        .limit(limit)
        .all()
    )


def get_category_path(db: Session, category_id: int) -> Optional[List[str]]:
    """
    Names from the outermost ancestor down to the category itself.
    """
    db_category = get_category(db, category_id)
    if not db_category:
        return None

    path = [db_category.name]
    seen = {db_category.id}
    current = db_category.parent_id
    while current is not None and current not in seen:
        parent = get_category(db, current)
        if not parent:
            break
        path.insert(0, parent.name)
        seen.add(parent.id)
        current = parent.parent_id
    return path


def _serialize_category(category: Category) -> Dict[str, Any]:
    return CategorySchema.model_validate(category).model_dump()


def _find_cycle_roots(parents: Dict[int, Optional[int]], order: List[int]) -> Set[int]:
    """
    Pick one member of every parent cycle, the first in ``order``, to be
    treated as a root so the cycle still reaches the top level.
    """
    position = {category_id: index for index, category_id in enumerate(order)}
    resolved: Set[int] = set()
    breakers: Set[int] = set()

    for start in order:
        path: List[int] = []
        on_path: Set[int] = set()
        current = start
        while current in parents and current not in resolved and current not in breakers:
            if current in on_path:
                cycle = path[path.index(current):]
                breakers.add(min(cycle, key=position.__getitem__))
                break
            on_path.add(current)
            path.append(current)
            current = parents[current]
        resolved.update(path)

    return breakers


def build_category_tree(
    categories: Iterable[Any],
    serialize: Optional[Callable[[Any], Dict[str, Any]]] = None,
) -> List[Dict[str, Any]]:
    """
    Turn a flat list of categories into a name-ordered forest.

    Categories whose parent is missing from the list are roots. Children
    keep the global name order because nodes are linked in that order.
    """
    serialize = serialize or _serialize_category
    ordered = sorted(categories, key=lambda category: category.name)

    # First pass: one node per category
    nodes: Dict[int, Dict[str, Any]] = {}
    for category in ordered:
        node = serialize(category)
        node["children"] = []
        nodes[category.id] = node

    parents = {category.id: category.parent_id for category in ordered}
    cycle_roots = _find_cycle_roots(parents, [category.id for category in ordered])
    for category_id in cycle_roots:
        logger.warning(f"Category {category_id} is part of a parent cycle, treating it as a root")

    # Second pass: link each node under its parent
    roots = []
    for category in ordered:
        node = nodes[category.id]
        if category.parent_id in nodes and category.id not in cycle_roots:
            nodes[category.parent_id]["children"].append(node)
        else:
            roots.append(node)

    return roots


def get_category_tree(db: Session) -> List[Dict[str, Any]]:
    """
    Get a hierarchical tree of categories
    """
    categories = db.query(Category).order_by(Category.name).all()
    return build_category_tree(categories)
