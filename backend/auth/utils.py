from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any, Iterator

import jwt
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from config import settings
from services.flowday_client import FlowdayClient, resolve_api_base_url

security = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class AuthSession:
    user_id: str
    token: str
    claims: dict[str, Any] = field(default_factory=dict)

    @property
    def session_id(self) -> str | None:
        sid = self.claims.get("sid")
        return str(sid) if sid else None


@lru_cache(maxsize=4)
def _jwks_client(url: str) -> jwt.PyJWKClient:
    return jwt.PyJWKClient(url)


def _verification_key(token: str):
    if settings.AUTH_JWKS_URL:
        return _jwks_client(settings.AUTH_JWKS_URL).get_signing_key_from_jwt(token).key
    return settings.AUTH_JWT_SECRET


def decode_token(token: str) -> dict:
    options = {"require": ["exp", "sub"], "verify_aud": bool(settings.AUTH_AUDIENCE)}
    try:
        return jwt.decode(
            token,
            _verification_key(token),
            algorithms=settings.AUTH_JWT_ALGORITHMS,
            audience=settings.AUTH_AUDIENCE,
            issuer=settings.AUTH_ISSUER,
            options=options,
        )
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token expired")
    except jwt.PyJWTError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")


def _token_from_request(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None,
) -> str | None:
    if credentials and credentials.credentials:
        return credentials.credentials
    cookie_name = (settings.AUTH_COOKIE_NAME or "").strip() or "__session"
    cookie_token = request.cookies.get(cookie_name)
    if cookie_token:
        return cookie_token
    return None


def get_current_session(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> AuthSession:
    token = _token_from_request(request, credentials)
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    claims = decode_token(token)
    user_id = str(claims.get("sub") or "").strip()
    if not user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
    request.state.user_id = user_id
    return AuthSession(user_id=user_id, token=token, claims=claims)


def get_flowday_client(
    request: Request,
    session: AuthSession = Depends(get_current_session),
) -> Iterator[FlowdayClient]:
    client = FlowdayClient(token=session.token, base_url=resolve_api_base_url(request.url.hostname))
    try:
        yield client
    finally:
        client.close()
