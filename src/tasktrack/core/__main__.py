"""CLI 入口模块 -- python -m tasktrack.core <command>

支持的命令：
  init-db          创建数据库表结构
  seed-users       创建 admin/manager/user 三个测试账户
  cleanup-users    删除测试账户及其会话、任务
  purge-sessions   清理过期会话
"""

import asyncio
import sys
from datetime import UTC, datetime

from .config import SEED_USERS, get_db_path, get_seed_password

COMMANDS = {
    "init-db": "创建数据库表结构",
    "seed-users": "创建 admin/manager/user 三个测试账户",
    "cleanup-users": "删除测试账户及其会话、任务",
    "purge-sessions": "清理过期会话",
}


def _print_usage() -> None:
    print("用法: python -m tasktrack.core <command>")
    print("命令:")
    for name, description in COMMANDS.items():
        print(f"  {name:<16} {description}")


def main(argv: list[str] | None = None) -> None:
    """CLI 主入口"""
    args = sys.argv[1:] if argv is None else argv
    if not args:
        _print_usage()
        sys.exit(1)

    command = args[0]
    db_path = get_db_path()

    if command == "init-db":
        asyncio.run(init_database(db_path))
    elif command == "seed-users":
        asyncio.run(seed_users(db_path))
    elif command == "cleanup-users":
        asyncio.run(cleanup_users(db_path))
    elif command == "purge-sessions":
        asyncio.run(purge_sessions(db_path))
    else:
        print(f"未知命令: {command}")
        print(f"可用命令: {', '.join(COMMANDS)}")
        sys.exit(1)


async def init_database(db_path: str) -> None:
    """创建表结构（create_store_group 内部执行 init_db）"""
    from .store import create_store_group

    print(f"数据库路径: {db_path}")
    store_group = await create_store_group(db_path)
    await store_group.close()
    print("数据库初始化完成")


async def seed_users(db_path: str) -> list[str]:
    """创建种子账户；已存在的账户跳过创建，但重新应用角色

    Returns:
        新创建账户的邮箱列表
    """
    from .auth import SessionProvider
    from .errors import UserAlreadyExistsError
    from .models.enums import Role
    from .store import atomic, create_store_group

    print("开始创建种子账户...")
    password = get_seed_password()
    created: list[str] = []

    store_group = await create_store_group(db_path)
    provider = SessionProvider(store_group)
    try:
        for name, email, role in SEED_USERS:
            try:
                await provider.sign_up(name, email, password, role=Role(role))
                created.append(email)
                print(f"已创建 {role}: {email}")
            except UserAlreadyExistsError:
                user = await store_group.user_store.get_user_by_email(email)
                if user is not None and user.role != role:
                    async with atomic(store_group.conn):
                        await store_group.user_store.set_role(
                            user.id, Role(role), datetime.now(UTC)
                        )
                print(f"已存在，跳过: {email}")
    finally:
        await store_group.close()

    print("种子账户创建完成")
    print("登录信息:")
    print(f"  邮箱: {', '.join(email for _, email, _ in SEED_USERS)}")
    print(f"  密码: {password}")
    return created


async def cleanup_users(db_path: str) -> int:
    """删除种子账户及其会话、任务

    Returns:
        删除的账户数量
    """
    from .store import create_store_group, delete_users_with_dependents

    print("开始清理测试账户...")
    emails = [email for _, email, _ in SEED_USERS]

    store_group = await create_store_group(db_path)
    try:
        users = await store_group.user_store.list_users_by_emails(emails)
        user_ids = [u.id for u in users]
        if not user_ids:
            print("没有需要删除的账户")
            return 0

        deleted = await delete_users_with_dependents(
            store_group.conn,
            store_group.user_store,
            store_group.session_store,
            store_group.task_store,
            user_ids,
        )
    finally:
        await store_group.close()

    print(f"已删除 {deleted} 个账户")
    return deleted


async def purge_sessions(db_path: str) -> int:
    """清理过期会话"""
    from .auth import SessionProvider
    from .store import create_store_group

    store_group = await create_store_group(db_path)
    try:
        count = await SessionProvider(store_group).purge_expired()
    finally:
        await store_group.close()

    print(f"已清理 {count} 个过期会话")
    return count


if __name__ == "__main__":
    main()
