"""认证解析与令牌校验工具。"""
from dataclasses import dataclass
from functools import lru_cache
import re
from typing import Any

import jwt
from fastapi import HTTPException, status
from jwt import InvalidTokenError, PyJWKClient

from mta_api.core.config import get_settings

UNAUTHORIZED = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="unauthorized",
)
TOKEN_PLACEHOLDER_UNAUTHORIZED = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail={
        "code": "AUTH_TOKEN_PLACEHOLDER_NOT_RESOLVED",
        "message": "认证失败：Authorization 仍为变量占位符，未替换为真实访问令牌。",
        "details": {
            "reason": "authorization_placeholder_not_resolved",
            "suggestion": "请先登录获取 access_token，再在请求头中传入 Bearer 真实令牌。",
        },
    },
)


@dataclass
class AuthenticatedPrincipal:
    """统一认证主体对象。"""

    # 主体标识（sub），对应本地用户 ID。
    subject: str
    # 认证提供方（issuer）。
    provider: str
    # 原始声明集，租户上下文等信息从这里读取。
    claims: dict[str, Any]


@lru_cache
def _get_jwks_client(jwks_url: str) -> PyJWKClient:
    """缓存密钥集合客户端，减少重复网络开销。"""
    return PyJWKClient(jwks_url)


def _decode_jwt(token: str) -> dict[str, Any]:
    """按配置解码并校验令牌。"""
    settings = get_settings()
    algorithms = settings.auth_algorithms
    options = {"verify_signature": True, "verify_aud": bool(settings.auth_jwt_audience)}

    try:
        if settings.auth_jwks_url:
            key = _get_jwks_client(settings.auth_jwks_url).get_signing_key_from_jwt(token).key
        else:
            # 未配置 JWKS 时，回退到对称密钥校验。
            key = settings.auth_jwt_secret
        return jwt.decode(
            token,
            key=key,
            algorithms=algorithms,
            issuer=settings.auth_jwt_issuer,
            audience=settings.auth_jwt_audience,
            leeway=settings.auth_jwt_leeway_seconds,
            options=options,
        )
    except InvalidTokenError as exc:
        raise UNAUTHORIZED from exc


def _is_placeholder_token(token: str) -> bool:
    return ("{{" in token and "}}" in token) or ("${" in token and "}" in token)


def _extract_bearer_token(authorization: str | None) -> str:
    """从 Authorization 头中提取 Bearer token，兼容重复头被逗号拼接的场景。"""
    if not authorization:
        raise UNAUTHORIZED
    tokens = re.findall(r"Bearer\s+([^,\s]+)", authorization, flags=re.IGNORECASE)
    if not tokens:
        raise UNAUTHORIZED
    placeholder_seen = False
    for candidate in reversed(tokens):
        token = candidate.strip()
        if not token:
            continue
        if _is_placeholder_token(token):
            placeholder_seen = True
            continue
        return token
    if placeholder_seen:
        raise TOKEN_PLACEHOLDER_UNAUTHORIZED
    raise UNAUTHORIZED


def parse_authorization_header(authorization: str | None) -> AuthenticatedPrincipal:
    """解析认证头并返回认证主体。"""
    token = _extract_bearer_token(authorization)
    claims = _decode_jwt(token)

    subject = str(claims.get("sub") or "").strip()
    if not subject:
        raise UNAUTHORIZED

    provider = claims.get("provider")
    issuer = str(provider if isinstance(provider, str) and provider else (claims.get("iss") or "jwt"))
    return AuthenticatedPrincipal(subject=subject, provider=issuer, claims=claims)
