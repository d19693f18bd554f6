import logging
from contextlib import contextmanager
from typing import Iterator, Optional

import click
from sqlalchemy.orm import Session

from archiver.core.config import settings
from archiver.db.session import create_db_engine, create_session_factory, dispose_engine, init_db

logger = logging.getLogger(__name__)


@contextmanager
def session_scope(database_url: Optional[str] = None) -> Iterator[Session]:
    """
    为单条命令创建引擎和会话，命令结束后释放
    """
    engine = create_db_engine(database_url or settings.DATABASE_URL)
    db = create_session_factory(engine)()
    try:
        yield db
    finally:
        db.close()
        dispose_engine(engine)


@click.command("init-db")
@click.option("--database-url", help="覆盖 DATABASE_URL")
def init_db_command(database_url: Optional[str]):
    """创建所有数据表"""
    engine = create_db_engine(database_url or settings.DATABASE_URL)
    try:
        init_db(engine)
    finally:
        dispose_engine(engine)
    click.echo("Database tables created")
