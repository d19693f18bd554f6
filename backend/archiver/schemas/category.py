from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel


class CategorySettings(BaseModel):
    auto_tag: bool = False
    keywords: List[str] = []
    default_tags: List[str] = []


class CategoryBase(BaseModel):
    name: str
    slug: Optional[str] = None
    description: Optional[str] = None
    color: str = "#3B82F6"
    icon: Optional[str] = "📂"
    parent_id: Optional[int] = None
    settings: CategorySettings = CategorySettings()


class CategoryCreate(CategoryBase):
    pass


class CategoryUpdate(BaseModel):
    name: Optional[str] = None
    slug: Optional[str] = None
    description: Optional[str] = None
    color: Optional[str] = None
    icon: Optional[str] = None
    parent_id: Optional[int] = None
    settings: Optional[CategorySettings] = None


class CategoryInDB(CategoryBase):
    id: int
    slug: str
    article_count: int = 0
    stats_updated_at: Optional[datetime] = None
    created_by: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class Category(CategoryInDB):
    pass


class CategoryWithChildren(Category):
    children: List['CategoryWithChildren'] = []


# Resolve forward reference
CategoryWithChildren.model_rebuild()


class CategoryTree(BaseModel):
    categories: List[CategoryWithChildren]


class CategoryPath(BaseModel):
    id: int
    path: List[str]
    full_path: str
