import logging
import time
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from config import settings
from auth.routes import router as auth_router
from api.food_items import router as food_items_router
from api.recipes import router as recipes_router
from api.meals import router as meals_router
from api.todos import router as todos_router
from api.habits import router as habits_router
from services.flowday_client import FlowdayAPIError

logging.basicConfig(
    level=(settings.LOG_LEVEL or "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("flowday")

settings.validate_security_configuration()

app = FastAPI(title=settings.APP_NAME, version="1.0.0")

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def security_headers_middleware(request: Request, call_next):
    response = await call_next(request)
    if not settings.SECURITY_HEADERS_ENABLED:
        return response
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
    response.headers["Content-Security-Policy"] = settings.SECURITY_CSP
    return response


@app.middleware("http")
async def request_log_middleware(request: Request, call_next):
    started = time.perf_counter()
    status_code = 500
    try:
        response = await call_next(request)
        status_code = response.status_code
        return response
    finally:
        logger.info(
            "%s %s -> %s (%.1f ms)",
            request.method,
            request.url.path,
            status_code,
            (time.perf_counter() - started) * 1000.0,
        )


@app.exception_handler(FlowdayAPIError)
async def flowday_api_error_handler(request: Request, exc: FlowdayAPIError):
    # Remote messages are surfaced verbatim; the UI shows them as-is.
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


# Routers
app.include_router(auth_router, prefix="/api")
app.include_router(food_items_router, prefix="/api")
app.include_router(recipes_router, prefix="/api")
app.include_router(meals_router, prefix="/api")
app.include_router(todos_router, prefix="/api")
app.include_router(habits_router, prefix="/api")

# Serve frontend static files (in production)
static_dir = Path(__file__).parent / "static"
if static_dir.exists():
    app.mount("/", StaticFiles(directory=str(static_dir), html=True), name="static")


@app.get("/api/health")
def health_check():
    return {"status": "ok", "app": settings.APP_NAME}
