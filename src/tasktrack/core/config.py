"""配置模块 -- 可通过环境变量覆盖

包含数据库路径、会话有效期、授权策略配置、种子账户等可配置项。
"""

import os
from pathlib import Path

import structlog
from pydantic import BaseModel, Field

from .models.enums import PolicyVariant

log = structlog.get_logger()

# 会话默认有效期（秒）：7 天
DEFAULT_SESSION_TTL_S: int = 7 * 24 * 3600

# 会话有效期下限（秒）
MIN_SESSION_TTL_S: int = 60

# 会话 cookie 名称
SESSION_COOKIE_NAME: str = "tasktrack_session"

# 种子账户：(name, email, role)
SEED_USERS: list[tuple[str, str, str]] = [
    ("Admin User", "admin@example.com", "admin"),
    ("Manager User", "manager@example.com", "manager"),
    ("Regular User", "user@example.com", "user"),
]


def _get_base_dir() -> Path:
    """获取项目 data 基础目录"""
    return Path(os.environ.get("TASKTRACK_DATA_DIR", "data"))


def get_db_path() -> str:
    """获取 SQLite 数据库路径"""
    return os.environ.get(
        "TASKTRACK_DB_PATH",
        str(_get_base_dir() / "sqlite" / "tasktrack.db"),
    )


def get_seed_password() -> str:
    """获取种子账户密码"""
    return os.environ.get("TASKTRACK_SEED_PASSWORD", "password123")


class Settings(BaseModel):
    """服务运行配置 -- 从环境变量加载

    环境变量:
        TASKTRACK_DB_PATH: SQLite 数据库路径
        TASKTRACK_SESSION_TTL_S: 会话有效期（秒，默认 7 天）
        TASKTRACK_POLICY_VARIANT: 授权策略配置（strict/permissive）
    """

    db_path: str = Field(description="SQLite 数据库路径")
    session_ttl_s: int = Field(
        default=DEFAULT_SESSION_TTL_S,
        ge=MIN_SESSION_TTL_S,
        description="会话有效期（秒）",
    )
    policy_variant: PolicyVariant = Field(
        default=PolicyVariant.STRICT,
        description="授权策略配置：strict / permissive",
    )


def load_settings() -> Settings:
    """从环境变量加载服务配置

    Returns:
        Settings 实例
    """
    kwargs: dict = {"db_path": get_db_path()}

    if val := os.environ.get("TASKTRACK_SESSION_TTL_S"):
        try:
            ttl = int(val)
            if ttl < MIN_SESSION_TTL_S:
                raise ValueError(f"session ttl must be >= {MIN_SESSION_TTL_S}")
            kwargs["session_ttl_s"] = ttl
        except ValueError:
            log.warning(
                "invalid_session_ttl_config",
                env_var="TASKTRACK_SESSION_TTL_S",
                value=val,
                fallback=DEFAULT_SESSION_TTL_S,
            )

    if val := os.environ.get("TASKTRACK_POLICY_VARIANT"):
        kwargs["policy_variant"] = val.lower()

    return Settings(**kwargs)
