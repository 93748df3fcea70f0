"""User / Session 模型"""

from datetime import datetime

from pydantic import BaseModel, Field

from .actor import Actor
from .enums import Role


class User(BaseModel):
    """用户账户（不含密码哈希）"""

    id: str = Field(description="唯一标识，ULID 格式")
    name: str = Field(description="显示名称")
    email: str = Field(description="邮箱，小写存储")
    email_verified: bool = Field(default=False, description="邮箱是否已验证")
    image: str | None = Field(default=None, description="头像 URL")
    role: Role = Field(default=Role.USER, description="角色")
    created_at: datetime = Field(description="创建时间")
    updated_at: datetime = Field(description="更新时间")

    def to_actor(self) -> Actor:
        return Actor(user_id=self.id, role=self.role)


class Session(BaseModel):
    """登录会话"""

    id: str = Field(description="唯一标识，ULID 格式")
    user_id: str = Field(description="所属用户 ID")
    token: str = Field(description="不透明会话令牌")
    expires_at: datetime = Field(description="过期时间")
    ip_address: str | None = Field(default=None, description="客户端 IP")
    user_agent: str | None = Field(default=None, description="客户端 UA")
    created_at: datetime = Field(description="创建时间")

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at <= now
