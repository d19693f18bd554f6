import pytest

from archiver.core.exceptions import CategoryDeleteError, CategoryHierarchyError, RecordValidationError
from archiver.crud.article import create_article, delete_article
from archiver.crud.category import (
    ARTICLES_EXIST, SUBCATEGORIES_EXIST, create_category, delete_category, generate_slug,
    get_category_by_name, get_root_categories, get_subcategories,
    get_category, get_category_path, get_top_categories, update_category, update_category_stats
)
from archiver.schemas.article import ArticleCreate, ArticleFlags, ArticleSource
from archiver.schemas.category import CategoryCreate, CategoryUpdate


def _article(url, category_ids, **kwargs):
    return ArticleCreate(
        url=url,
        title="Archived page",
        source=ArticleSource(domain="archive.io", site_name="Archive"),
        category_ids=category_ids,
        **kwargs
    )


class TestCreateCategory:
    def test_slug_is_generated_from_name(self, db):
        category = create_category(db, CategoryCreate(name="  Science & Tech  "))

        assert category.name == "Science & Tech"
        assert category.slug == "science-tech"
        assert category.color == "#3B82F6"

    def test_explicit_slug_is_lowercased(self, db):
        category = create_category(db, CategoryCreate(name="Politics", slug="World-Politics"))

        assert category.slug == "world-politics"

    def test_invalid_color_is_rejected(self, db):
        with pytest.raises(RecordValidationError) as exc_info:
            create_category(db, CategoryCreate(name="Bad", color="blue"))

        assert [error.field for error in exc_info.value.errors] == ["color"]

    def test_parent_must_exist(self, db):
        with pytest.raises(RecordValidationError) as exc_info:
            create_category(db, CategoryCreate(name="Stray", parent_id=321))

        assert [error.field for error in exc_info.value.errors] == ["parent_id"]

    def test_generate_slug(self):
        assert generate_slug("Hello   World!") == "hello-world"
        assert generate_slug("a -- b") == "a-b"


class TestDeleteCategory:
    def test_missing_category(self, db):
        assert delete_category(db, 12345) is False

    def test_rejected_while_children_exist(self, db):
        parent = create_category(db, CategoryCreate(name="Parent"))
        child = create_category(db, CategoryCreate(name="Child", parent_id=parent.id))

        with pytest.raises(CategoryDeleteError) as exc_info:
            delete_category(db, parent.id)
        assert exc_info.value.reason == SUBCATEGORIES_EXIST

        assert delete_category(db, child.id) is True
        assert delete_category(db, parent.id) is True
        assert get_category(db, parent.id) is None

    def test_rejected_while_articles_reference_it(self, db):
        category = create_category(db, CategoryCreate(name="Linked"))
        article = create_article(db, _article("https://archive.io/linked", [category.id]))

        with pytest.raises(CategoryDeleteError) as exc_info:
            delete_category(db, category.id)
        assert exc_info.value.reason == ARTICLES_EXIST

        assert delete_article(db, article.id) is True
        assert delete_category(db, category.id) is True


class TestHierarchy:
    def test_cannot_be_own_parent(self, db):
        category = create_category(db, CategoryCreate(name="Solo"))

        with pytest.raises(CategoryHierarchyError):
            update_category(db, category.id, CategoryUpdate(parent_id=category.id))

    def test_cannot_move_under_descendant(self, db):
        top = create_category(db, CategoryCreate(name="Top"))
        middle = create_category(db, CategoryCreate(name="Middle", parent_id=top.id))
        bottom = create_category(db, CategoryCreate(name="Bottom", parent_id=middle.id))

        with pytest.raises(CategoryHierarchyError):
            update_category(db, top.id, CategoryUpdate(parent_id=bottom.id))

        db.refresh(top)
        assert top.parent_id is None

    def test_move_to_sibling_branch(self, db):
        left = create_category(db, CategoryCreate(name="Left"))
        right = create_category(db, CategoryCreate(name="Right"))
        leaf = create_category(db, CategoryCreate(name="Leaf", parent_id=left.id))

        updated = update_category(db, leaf.id, CategoryUpdate(parent_id=right.id))

        assert updated.parent_id == right.id
        assert get_category_path(db, leaf.id) == ["Right", "Leaf"]

    def test_partial_update_keeps_other_fields(self, db):
        category = create_category(db, CategoryCreate(name="Keep", color="#112233"))

        updated = update_category(db, category.id, CategoryUpdate(description="Kept colors"))

        assert updated.color == "#112233"
        assert updated.description == "Kept colors"

    def test_path_of_missing_category(self, db):
        assert get_category_path(db, 999) is None


class TestStats:
    def test_counts_only_non_archived_articles(self, db):
        category = create_category(db, CategoryCreate(name="Counted"))
        create_article(db, _article("https://archive.io/one", [category.id]))
        create_article(db, _article("https://archive.io/two", [category.id]))
        create_article(db, _article(
            "https://archive.io/old", [category.id], flags=ArticleFlags(is_archived=True)
        ))

        db.refresh(category)
        assert category.article_count == 2
        assert category.stats_updated_at is not None

    def test_missing_category_returns_none(self, db):
        assert update_category_stats(db, 404) is None

    def test_top_categories_by_article_count(self, db):
        quiet = create_category(db, CategoryCreate(name="Quiet"))
        busy = create_category(db, CategoryCreate(name="Busy"))
        create_article(db, _article("https://archive.io/busy", [busy.id]))

        top = get_top_categories(db, limit=2)

        assert [category.id for category in top] == [busy.id, quiet.id]


class TestGetters:
    def test_roots_and_subcategories(self, db):
        root = create_category(db, CategoryCreate(name="Root"))
        create_category(db, CategoryCreate(name="Beta", parent_id=root.id))
        create_category(db, CategoryCreate(name="Alpha", parent_id=root.id))

        assert [c.name for c in get_root_categories(db)] == ["Root"]
        assert [c.name for c in get_subcategories(db, root.id)] == ["Alpha", "Beta"]
        assert get_category_by_name(db, "Alpha").slug == "alpha"
        assert get_category_by_name(db, "Gamma") is None
