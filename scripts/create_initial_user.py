"""Utility script to create the first administrator account."""

from __future__ import annotations

import argparse
from getpass import getpass

from sqlalchemy.exc import SQLAlchemyError

from classroom.application.use_cases.users.create_user import create_user
from classroom.domain.entities import ROLE_ADMIN, ROLES
from classroom.infrastructure.database import SessionLocal, initialize_database


def parse_args() -> argparse.Namespace:
    """Parse command line arguments for user creation."""

    parser = argparse.ArgumentParser(
        description="Create an initial user for the classroom notification service.",
    )
    parser.add_argument(
        "--username",
        default="admin",
        help="用户名（默认: admin）",
    )
    parser.add_argument(
        "--full-name",
        default="系统管理员",
        help="姓名（默认: 系统管理员）",
    )
    parser.add_argument(
        "--email",
        default=None,
        help="邮箱（可选，默认: <用户名>@example.com）",
    )
    parser.add_argument(
        "--role",
        default=ROLE_ADMIN,
        choices=ROLES,
        help="用户角色（默认: admin）",
    )
    parser.add_argument(
        "--password",
        default=None,
        help="用户密码。未提供时将交互式输入。",
    )
    return parser.parse_args()


def main() -> None:
    """Create a user using the provided command line arguments."""

    args = parse_args()

    password = args.password or getpass("请输入用户密码: ")
    if not password:
        raise SystemExit("未提供有效的密码。")

    initialize_database()

    session = SessionLocal()
    try:
        user = create_user(
            session,
            username=args.username,
            password=password,
            full_name=args.full_name,
            role=args.role,
            email=args.email,
        )
    except ValueError as exc:
        session.rollback()
        raise SystemExit(f"无法创建用户: {exc}") from exc
    except SQLAlchemyError as exc:
        session.rollback()
        raise SystemExit(f"保存用户到数据库时出错: {exc}") from exc
    else:
        print(
            "用户创建成功:\n"
            f"  ID: {user.id}\n"
            f"  用户名: {user.username}\n"
            f"  姓名: {user.full_name}\n"
            f"  角色: {user.role}"
        )
    finally:
        session.close()


if __name__ == "__main__":
    main()
