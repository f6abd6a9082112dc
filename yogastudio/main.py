import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import models  # noqa: F401
from .config import ALLOWED_ORIGINS, SECURITY_HEADERS_ENABLED
from .database import Base, SessionLocal, engine
from .domain.accounts import router as accounts_router
from .domain.analytics import admin_router as dashboard_admin_router
from .domain.articles import admin_router as articles_admin_router
from .domain.articles import router as articles_router
from .domain.billing import admin_router as billing_admin_router
from .domain.billing import router as billing_router
from .domain.bookings import admin_router as bookings_admin_router
from .domain.bookings import router as bookings_router
from .domain.classes import admin_router as classes_admin_router
from .domain.classes import router as classes_router
from .domain.inquiries import admin_router as inquiries_admin_router
from .domain.inquiries import router as inquiries_router
from .domain.newsletters import admin_router as newsletters_admin_router
from .domain.newsletters import router as newsletters_router
from .domain.settings import router as settings_router
from .security_headers import SecurityHeadersMiddleware
from .seed import seed_default_roles

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Reduce verbosity of third-party libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application starting up...")
    try:
        Base.metadata.create_all(bind=engine, checkfirst=True)
        logger.info("Database tables created successfully")
    except Exception as e:
        # Another worker may have created the tables first
        error_msg = str(e)
        if "already exists" in error_msg or "duplicate key" in error_msg:
            logger.info("Database tables already exist (created by another worker)")
        else:
            logger.error(f"Failed to create database tables: {e}")

    db = SessionLocal()
    try:
        seed_default_roles(db)
    except Exception as e:
        logger.error(f"Failed to seed default roles: {e}")
    finally:
        db.close()

    yield
    logger.info("Application shutting down...")


app = FastAPI(title="Yoga Studio API", version="1.0.0", lifespan=lifespan)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Convert validation errors on the Authorization header into 401s;
    everything else stays a 422
    """
    for error in exc.errors():
        if error.get("loc") and "authorization" in str(error.get("loc")).lower():
            logger.warning(f"Authentication failed for {request.url.path}: Missing or invalid Authorization header")
            return JSONResponse(
                status_code=401,
                content={"detail": "Not authenticated. Please provide a valid Bearer token in the Authorization header."},
            )

    logger.warning(f"Validation error for {request.url.path}: {exc.errors()}")
    return JSONResponse(status_code=422, content={"detail": jsonable_errors(exc)})


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
    # ctx may carry the raised ValueError, which is not JSON serializable
    cleaned = []
    for error in exc.errors():
        error = dict(error)
        if "ctx" in error:
            error["ctx"] = {k: str(v) for k, v in error["ctx"].items()}
        cleaned.append(error)
    return cleaned


@app.middleware("http")
async def log_requests(request: Request, call_next):
    try:
        response = await call_next(request)
        return response
    except Exception as e:
        logger.error(f"{request.method} {request.url.path} - Error: {str(e)}")
        raise


if SECURITY_HEADERS_ENABLED:
    app.add_middleware(SecurityHeadersMiddleware, exclude_paths=["/health", "/docs", "/openapi.json"])
    logger.info("Security headers enabled")
else:
    logger.warning("Security headers DISABLED - only use in development!")

logger.info(f"CORS allowed origins: {ALLOWED_ORIGINS}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
    expose_headers=["*"],
)

# Routes
app.include_router(accounts_router)
app.include_router(articles_router)
app.include_router(articles_admin_router)
app.include_router(classes_router)
app.include_router(classes_admin_router)
app.include_router(bookings_router)
app.include_router(bookings_admin_router)
app.include_router(inquiries_router)
app.include_router(inquiries_admin_router)
app.include_router(newsletters_router)
app.include_router(newsletters_admin_router)
app.include_router(settings_router)
app.include_router(billing_router)
app.include_router(billing_admin_router)
app.include_router(dashboard_admin_router)


@app.get("/")
def root():
    return {"message": "Yoga Studio API is running"}


@app.get("/health")
def health():
    return {"status": "healthy"}
