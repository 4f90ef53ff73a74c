from pydantic import BaseModel


class SessionResponse(BaseModel):
    user_id: str
    session_id: str | None = None
    expires_at: int | None = None
