from typing import Optional

import click

from archiver.cli.database import session_scope
from archiver.core.exceptions import RecordValidationError
from archiver.crud.user import create_user, get_user_by_email, get_user_by_username
from archiver.models.user import UserRole
from archiver.schemas.user import UserCreate


@click.command("create-user")
@click.option("--database-url", help="覆盖 DATABASE_URL")
@click.option("--username", prompt=True, help="用户名")
@click.option("--email", prompt=True, help="邮箱")
@click.option("--password", prompt=True, hide_input=True, confirmation_prompt=True, help="密码")
@click.option(
    "--role",
    type=click.Choice([role.value for role in UserRole]),
    default=UserRole.USER.value,
    help="用户角色",
)
@click.option("--verified", is_flag=True, help="标记为已验证")
def create_user_command(
    database_url: Optional[str],
    username: str,
    email: str,
    password: str,
    role: str,
    verified: bool,
):
    """创建用户，可用于初始化管理员账号"""
    with session_scope(database_url) as db:
        if get_user_by_username(db, username) or get_user_by_email(db, email):
            raise click.ClickException("A user with this username or email already exists")

        try:
            user = create_user(db, UserCreate(
                username=username,
                email=email,
                password=password,
                role=UserRole(role),
                is_verified=verified,
            ))
        except RecordValidationError as e:
            for error in e.errors:
                click.echo(f"{error.field}: {error.message}", err=True)
            raise click.ClickException(str(e))

        click.echo(f"Created {user.role.value} '{user.username}' ({user.id})")
