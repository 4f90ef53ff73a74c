from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    ENVIRONMENT: str = "development"  # development | test | staging | production
    APP_NAME: str = "Flowday"
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    # Remote domain API
    FLOWDAY_API_URL: str | None = None
    FLOWDAY_API_LOCAL_PORT: int = 3030
    FLOWDAY_API_PROD_URL: str = "https://api.flowday.io"
    FLOWDAY_API_TIMEOUT_SECONDS: float = 15.0

    # Identity provider tokens
    AUTH_JWT_SECRET: str = "change-me-in-production"
    AUTH_JWT_ALGORITHMS: list[str] = ["HS256"]
    AUTH_JWKS_URL: str | None = None
    AUTH_ISSUER: str | None = None
    AUTH_AUDIENCE: str | None = None
    AUTH_COOKIE_NAME: str = "__session"
    AUTH_COOKIE_SECURE: bool = False
    AUTH_COOKIE_SAMESITE: str = "lax"  # strict | lax | none
    AUTH_COOKIE_DOMAIN: str | None = None
    AUTH_COOKIE_PATH: str = "/"

    # Habit form defaults
    HABIT_DEFAULT_TIME: str = Field(default="18:00", pattern=r"^\d{2}:\d{2}$")
    HABIT_PREP_OFFSET_MINUTES: int = Field(default=30, ge=0)

    SECURITY_HEADERS_ENABLED: bool = True
    SECURITY_CSP: str = (
        "default-src 'self'; "
        "img-src 'self' data: blob:; "
        "style-src 'self' 'unsafe-inline'; "
        "script-src 'self'; "
        "connect-src 'self' https:; "
        "frame-ancestors 'none'; "
        "base-uri 'self';"
    )

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    @property
    def is_production_like(self) -> bool:
        return (self.ENVIRONMENT or "").strip().lower() in {"production", "prod", "staging"}

    def validate_security_configuration(self) -> None:
        if not self.is_production_like:
            return

        errors: list[str] = []
        if not self.AUTH_JWKS_URL and self.AUTH_JWT_SECRET == "change-me-in-production":
            errors.append("AUTH_JWT_SECRET must be changed from the default value or AUTH_JWKS_URL must be set")
        if not self.AUTH_COOKIE_SECURE:
            errors.append("AUTH_COOKIE_SECURE must be true in production-like environments")
        if (self.AUTH_COOKIE_SAMESITE or "").strip().lower() == "none" and not self.AUTH_COOKIE_SECURE:
            errors.append("AUTH_COOKIE_SAMESITE=none requires AUTH_COOKIE_SECURE=true")
        if errors:
            joined = "; ".join(errors)
            raise RuntimeError(f"Insecure production configuration: {joined}")


settings = Settings()
