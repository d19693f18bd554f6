import json
from typing import Any, Dict, List, Optional

import click

from archiver.cli.database import session_scope
from archiver.crud.category import get_categories, get_category, get_category_tree, update_category_stats


def _echo_tree(nodes: List[Dict[str, Any]], depth: int = 0) -> None:
    for node in nodes:
        click.echo(f"{'  ' * depth}- {node['name']} ({node['slug']}, {node['article_count']} articles)")
        _echo_tree(node["children"], depth + 1)


@click.command("category-tree")
@click.option("--database-url", help="覆盖 DATABASE_URL")
@click.option("--json", "as_json", is_flag=True, help="以JSON格式输出")
def category_tree(database_url: Optional[str], as_json: bool):
    """打印分类树"""
    with session_scope(database_url) as db:
        tree = get_category_tree(db)

    if as_json:
        click.echo(json.dumps(tree, indent=2, ensure_ascii=False, default=str))
        return
    if not tree:
        click.echo("No categories")
        return
    _echo_tree(tree)


@click.command("refresh-stats")
@click.option("--database-url", help="覆盖 DATABASE_URL")
@click.option("--category-id", type=int, help="只刷新指定分类")
def refresh_stats(database_url: Optional[str], category_id: Optional[int]):
    """重新统计分类下的文章数"""
    with session_scope(database_url) as db:
        if category_id is not None:
            if get_category(db, category_id) is None:
                raise click.ClickException(f"Category {category_id} not found")
            category_ids = [category_id]
        else:
            category_ids = [category.id for category in get_categories(db, limit=None)]

        failed = 0
        for current in category_ids:
            category = update_category_stats(db, current)
            if category is None:
                failed += 1
                continue
            click.echo(f"{category.name}: {category.article_count} articles")

    click.echo(f"Refreshed {len(category_ids) - failed} categories, {failed} failed")
