from archiver.models.article import Article, ArticleStatus, ScrapingMethod, article_category
from archiver.models.category import Category
from archiver.models.user import User, UserToken, UserRole, TokenType

__all__ = [
    "Article", "ArticleStatus", "ScrapingMethod", "article_category",
    "Category",
    "User", "UserToken", "UserRole", "TokenType",
]
