"""SessionProvider -- 邮箱密码认证与会话签发

签发并校验绑定到用户身份和角色的不透明会话令牌。
核心层只消费 resolve() 返回的 Actor(user_id, role)。
注册时角色不可由调用方指定（始终为 user），角色变更只通过 UserStore.set_role。
"""

import secrets
from datetime import UTC, datetime, timedelta

import aiosqlite
import bcrypt
import structlog
from ulid import ULID

from .config import DEFAULT_SESSION_TTL_S
from .errors import InvalidCredentialsError, UserAlreadyExistsError
from .models.actor import Actor
from .models.enums import Role
from .models.user import Session, User
from .store import StoreGroup, atomic

log = structlog.get_logger()

# bcrypt 只处理前 72 字节
PASSWORD_MAX_BYTES = 72


def hash_password(password: str) -> str:
    """bcrypt 哈希密码

    Raises:
        ValueError: 密码 UTF-8 编码超过 PASSWORD_MAX_BYTES 字节
    """
    if len(password.encode("utf-8")) > PASSWORD_MAX_BYTES:
        raise ValueError(f"password must be at most {PASSWORD_MAX_BYTES} bytes")
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """校验密码与 bcrypt 哈希；超长密码不可能匹配"""
    if len(password.encode("utf-8")) > PASSWORD_MAX_BYTES:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # 非法哈希格式视为不匹配
        return False


class SessionProvider:
    """会话签发与校验"""

    def __init__(
        self,
        store_group: StoreGroup,
        ttl_seconds: int = DEFAULT_SESSION_TTL_S,
    ) -> None:
        self._stores = store_group
        self._ttl = timedelta(seconds=ttl_seconds)

    async def sign_up(
        self,
        name: str,
        email: str,
        password: str,
        role: Role = Role.USER,
    ) -> User:
        """注册新用户

        Args:
            name: 显示名称
            email: 邮箱
            password: 明文密码
            role: 角色，仅供种子脚本等内部调用使用；HTTP 注册始终为 user

        Raises:
            UserAlreadyExistsError: 邮箱已被使用
        """
        if await self._stores.user_store.get_user_by_email(email) is not None:
            raise UserAlreadyExistsError(email)

        now = datetime.now(UTC)
        try:
            async with atomic(self._stores.conn):
                user = await self._stores.user_store.create_user(
                    name=name,
                    email=email,
                    password_hash=hash_password(password),
                    role=role,
                    now=now,
                )
        except aiosqlite.IntegrityError as e:
            # 并发注册同一邮箱
            raise UserAlreadyExistsError(email) from e

        log.info("user_signed_up", user_id=user.id, role=user.role.value)
        return user

    async def sign_in(
        self,
        email: str,
        password: str,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> tuple[Session, User]:
        """邮箱密码登录，签发新会话

        Raises:
            InvalidCredentialsError: 邮箱不存在或密码错误
        """
        user = await self._stores.user_store.get_user_by_email(email)
        if user is None:
            raise InvalidCredentialsError()

        password_hash = await self._stores.user_store.get_password_hash(user.id)
        if password_hash is None or not verify_password(password, password_hash):
            log.info("sign_in_rejected", user_id=user.id)
            raise InvalidCredentialsError()

        now = datetime.now(UTC)
        session = Session(
            id=str(ULID()),
            user_id=user.id,
            token=secrets.token_urlsafe(32),
            expires_at=now + self._ttl,
            ip_address=ip_address,
            user_agent=user_agent,
            created_at=now,
        )
        async with atomic(self._stores.conn):
            await self._stores.session_store.create_session(session)

        log.info("session_created", user_id=user.id, session_id=session.id)
        return session, user

    async def get_session_user(self, token: str | None) -> User | None:
        """根据令牌获取会话用户；未知或过期令牌返回 None（过期会话顺带删除）"""
        if not token:
            return None

        session = await self._stores.session_store.get_session_by_token(token)
        if session is None:
            return None

        if session.is_expired(datetime.now(UTC)):
            async with atomic(self._stores.conn):
                await self._stores.session_store.delete_session_by_token(token)
            log.info("session_expired", session_id=session.id)
            return None

        # 角色每次从 users 表实时读取
        return await self._stores.user_store.get_user(session.user_id)

    async def resolve(self, token: str | None) -> Actor | None:
        """将令牌解析为 Actor；无有效会话返回 None"""
        user = await self.get_session_user(token)
        if user is None:
            return None
        return user.to_actor()

    async def sign_out(self, token: str) -> bool:
        """注销会话"""
        async with atomic(self._stores.conn):
            deleted = await self._stores.session_store.delete_session_by_token(token)
        return deleted

    async def purge_expired(self) -> int:
        """清理所有过期会话"""
        async with atomic(self._stores.conn):
            count = await self._stores.session_store.delete_expired_sessions(
                datetime.now(UTC)
            )
        return count
