from fastapi import APIRouter, Depends, Response

from auth.models import SessionResponse
from auth.utils import AuthSession, get_current_session
from config import settings

router = APIRouter(prefix="/auth", tags=["auth"])


@router.get("/session", response_model=SessionResponse)
def get_session(session: AuthSession = Depends(get_current_session)):
    exp = session.claims.get("exp")
    return SessionResponse(
        user_id=session.user_id,
        session_id=session.session_id,
        expires_at=int(exp) if exp is not None else None,
    )


@router.post("/logout")
def logout(response: Response):
    # Sign-out itself happens at the identity provider; only the cookie is ours.
    response.delete_cookie(
        key=(settings.AUTH_COOKIE_NAME or "__session").strip() or "__session",
        domain=settings.AUTH_COOKIE_DOMAIN,
        path=settings.AUTH_COOKIE_PATH or "/",
        secure=bool(settings.AUTH_COOKIE_SECURE),
        samesite=(settings.AUTH_COOKIE_SAMESITE or "lax").strip().lower(),  # type: ignore[arg-type]
    )
    return {"status": "signed_out"}
