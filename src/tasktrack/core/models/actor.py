"""Actor 模型 -- 由会话派生的请求身份"""

from pydantic import BaseModel, ConfigDict, Field

from .enums import Role


class Actor(BaseModel):
    """发起请求的已认证身份，单次请求内不可变"""

    model_config = ConfigDict(frozen=True)

    user_id: str = Field(description="用户 ID")
    role: Role = Field(description="用户角色")
