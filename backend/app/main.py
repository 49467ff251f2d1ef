"""
LearnHub E-Learning — FastAPI Application Entry Point

Aggregates all routers, configures logging and middleware, installs the
JSON error envelope, and initializes the database on startup.
"""
import logging
import os
import time
from datetime import datetime

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import get_settings
from app.database import SessionLocal, init_db
from app.routes import (
    user_router, course_router, enrollment_router, payment_router, blog_router,
    webinar_router, webinar_registration_router, notification_router,
    dashboard_router, admin_router, student_router,
)

settings = get_settings()

# ─── Logging ─────────────────────────────────────────────────────────
os.makedirs(settings.LOG_DIR, exist_ok=True)
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    handlers=[
        logging.StreamHandler(),
        logging.FileHandler(os.path.join(settings.LOG_DIR, "server.log")),
    ],
)
logger = logging.getLogger("learnhub")

# ─── Application Instance ───────────────────────────────────────────
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description=(
        "API for the LearnHub e-learning platform. Covers accounts and roles, "
        "course catalogue and lessons, free and Razorpay-paid enrollment, blogs, "
        "webinars and the admin notification feed."
    ),
    docs_url="/docs",
    redoc_url="/redoc",
)

# ─── Startup ─────────────────────────────────────────────────────────
BOOT_TIME = time.time()


@app.on_event("startup")
def on_startup():
    """Initialize database tables and log boot info."""
    init_db()

    boot_msg = (
        f"\n{'='*60}\n"
        f"  {settings.APP_NAME} v{settings.APP_VERSION}\n"
        f"  TIME: {datetime.now().isoformat()}\n"
        f"  RAZORPAY KEYS: {'[OK] Loaded' if settings.RAZORPAY_KEY_ID and settings.RAZORPAY_KEY_SECRET else '[!] Missing'}\n"
        f"  JWT SECRET: {'[OK] Set' if settings.JWT_SECRET else '[!] Missing (random per-process key)'}\n"
        f"  DATABASE: {settings.DATABASE_URL}\n"
        f"  DEBUG: {settings.DEBUG}\n"
        f"{'='*60}"
    )
    logger.info(boot_msg)
    if not settings.JWT_SECRET:
        logger.warning("JWT_SECRET is not set; issued tokens will not survive a restart")


# ─── Middleware ──────────────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log every API request with timing."""
    start = time.time()
    response = await call_next(request)
    duration = round((time.time() - start) * 1000, 1)

    if request.url.path.startswith("/api"):
        logger.info("%s %s -> %s (%sms)", request.method, request.url.path, response.status_code, duration)

    return response


# ─── Error Envelope ──────────────────────────────────────────────────
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """400 with one {field, msg} entry per failed check."""
    errors = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        msg = err.get("msg", "Invalid value")
        if msg.startswith("Value error, "):
            msg = msg[len("Value error, "):]
        errors.append({"field": ".".join(loc), "msg": msg})

    return JSONResponse(status_code=400, content={"message": "Validation failed", "errors": errors})


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("unhandled error on %s %s", request.method, request.url.path)
    detail = str(exc) if settings.DEBUG else "Internal server error"
    return JSONResponse(status_code=500, content={"message": detail})


# ─── API Routers ─────────────────────────────────────────────────────
app.include_router(user_router)
app.include_router(course_router)
app.include_router(enrollment_router)
app.include_router(payment_router)
app.include_router(blog_router)
app.include_router(webinar_router)
app.include_router(webinar_registration_router)
app.include_router(notification_router)
app.include_router(dashboard_router)
app.include_router(admin_router)
app.include_router(student_router)


@app.get("/health", tags=["Health"])
def deep_health():
    """Detailed health check including dependency statuses."""
    db_ok = False
    db = SessionLocal()
    try:
        db.execute(text("SELECT 1"))
        db_ok = True
    except Exception:
        logger.exception("health check: database unreachable")
    finally:
        db.close()

    return {
        "status": "healthy" if db_ok else "degraded",
        "database": "connected" if db_ok else "disconnected",
        "payments": "configured" if settings.RAZORPAY_KEY_ID and settings.RAZORPAY_KEY_SECRET else "unconfigured",
        "uptime_seconds": round(time.time() - BOOT_TIME, 1),
        "version": settings.APP_VERSION,
    }


@app.get("/", tags=["Health"])
def root():
    return {"message": "API is running..."}
