import logging

import click

from archiver.cli.categories import category_tree, refresh_stats
from archiver.cli.database import init_db_command
from archiver.cli.users import create_user_command
from archiver.core.logging_config import configure_logging


@click.group()
def cli():
    """Article Archiver CLI 工具"""
    # 不覆盖调用方已有的日志配置
    if not logging.getLogger().handlers:
        configure_logging()


# 添加子命令
cli.add_command(init_db_command)
cli.add_command(category_tree)
cli.add_command(refresh_stats)
cli.add_command(create_user_command)


if __name__ == "__main__":
    cli()
