from archiver.schemas.article import (
    Article, ArticleCreate, ArticleUpdate, ArticleStats,
    ArticleSource, ArticleContent, ArticleClassification, ArticleFlags
)
from archiver.schemas.category import (
    Category, CategoryCreate, CategoryUpdate, CategoryWithChildren, CategoryTree,
    CategoryPath, CategorySettings, CategoryBase, CategoryInDB
)
from archiver.schemas.user import (
    User, UserCreate, UserUpdate, UserAdminUpdate, UserAuth,
    UserProfile, UserPreferences, UserBase
)
from archiver.schemas.token import Token, TokenPayload, LoginRequest, RefreshRequest, AuthResponse
from archiver.schemas.validation import FieldError
