from archiver.crud.category import (
    get_category, get_category_by_slug, get_category_by_name, get_categories,
    get_root_categories, get_subcategories, get_top_categories,
    create_category, update_category, delete_category,
    build_category_tree, get_category_tree, get_category_path,
    get_category_articles, update_category_stats, generate_slug
)
from archiver.crud.user import (
    get_user, get_user_by_email, get_user_by_username, get_users, get_active_users,
    create_user, update_user, deactivate_user, find_by_credentials,
    update_last_login, increment_article_count,
    add_token, remove_token, find_valid_token, to_auth_json
)
from archiver.crud.article import (
    get_article, get_article_by_url, get_articles, get_articles_by_category,
    get_published_articles, create_article, update_article, delete_article,
    increment_views, add_bookmark, remove_bookmark, get_article_stats
)
