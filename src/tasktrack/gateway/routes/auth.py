"""认证路由

POST /api/auth/sign-up/email: 邮箱注册（角色固定为 user），注册后自动登录
POST /api/auth/sign-in/email: 邮箱密码登录，返回令牌并写入会话 cookie
POST /api/auth/sign-out:      注销当前会话
GET  /api/auth/session:       当前会话用户
"""

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, Field, field_validator
from starlette.responses import JSONResponse
from tasktrack.core.auth import PASSWORD_MAX_BYTES, SessionProvider
from tasktrack.core.config import SESSION_COOKIE_NAME
from tasktrack.core.errors import UnauthenticatedError
from tasktrack.core.models import Session, User

from ..deps import extract_session_token, get_session_provider

router = APIRouter()

_EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class SignUpRequest(BaseModel):
    """注册请求体（不接受 role 字段）"""

    name: str = Field(min_length=1, max_length=255, description="显示名称")
    email: str = Field(pattern=_EMAIL_PATTERN, max_length=255, description="邮箱")
    password: str = Field(min_length=8, max_length=PASSWORD_MAX_BYTES, description="密码")

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        if len(value.encode("utf-8")) > PASSWORD_MAX_BYTES:
            raise ValueError(f"password must be at most {PASSWORD_MAX_BYTES} bytes")
        return value


class SignInRequest(BaseModel):
    """登录请求体"""

    email: str = Field(description="邮箱")
    password: str = Field(description="密码")


class UserResponse(BaseModel):
    id: str
    name: str
    email: str
    role: str

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(id=user.id, name=user.name, email=user.email, role=user.role.value)


class SessionResponse(BaseModel):
    token: str
    expires_at: str
    user: UserResponse


def _session_response(session: Session, user: User, status_code: int) -> JSONResponse:
    response = JSONResponse(
        status_code=status_code,
        content=SessionResponse(
            token=session.token,
            expires_at=session.expires_at.isoformat(),
            user=UserResponse.from_user(user),
        ).model_dump(),
    )
    response.set_cookie(
        SESSION_COOKIE_NAME,
        session.token,
        expires=session.expires_at,
        httponly=True,
        samesite="lax",
    )
    return response


def _client_info(request: Request) -> tuple[str | None, str | None]:
    ip_address = request.client.host if request.client else None
    return ip_address, request.headers.get("User-Agent")


@router.post("/api/auth/sign-up/email", status_code=201, response_model=SessionResponse)
async def sign_up(
    body: SignUpRequest,
    request: Request,
    provider: SessionProvider = Depends(get_session_provider),
):
    """注册并登录"""
    await provider.sign_up(body.name, body.email, body.password)
    ip_address, user_agent = _client_info(request)
    session, user = await provider.sign_in(
        body.email, body.password, ip_address=ip_address, user_agent=user_agent
    )
    return _session_response(session, user, status_code=201)


@router.post("/api/auth/sign-in/email", response_model=SessionResponse)
async def sign_in(
    body: SignInRequest,
    request: Request,
    provider: SessionProvider = Depends(get_session_provider),
):
    """邮箱密码登录"""
    ip_address, user_agent = _client_info(request)
    session, user = await provider.sign_in(
        body.email, body.password, ip_address=ip_address, user_agent=user_agent
    )
    return _session_response(session, user, status_code=200)


@router.post("/api/auth/sign-out")
async def sign_out(
    request: Request,
    provider: SessionProvider = Depends(get_session_provider),
):
    """注销当前会话；没有会话时 success 为 false"""
    token = extract_session_token(request)
    success = await provider.sign_out(token) if token else False
    response = JSONResponse(status_code=200, content={"success": success})
    response.delete_cookie(SESSION_COOKIE_NAME)
    return response


@router.get("/api/auth/session")
async def get_session(
    request: Request,
    provider: SessionProvider = Depends(get_session_provider),
):
    """返回当前会话用户"""
    user = await provider.get_session_user(extract_session_token(request))
    if user is None:
        raise UnauthenticatedError()
    return {"user": UserResponse.from_user(user).model_dump()}
