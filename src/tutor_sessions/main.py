'''

'''
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from sqlalchemy.exc import DBAPIError

from .database.engine import create_db_engine_and_session_factory, dispose_db_engine
from .common.logger import log
from .common.config import settings
from .common.exceptions import describe_database_error
from .api import auth, profiles, students, sessions, ledger, zoom, reminders, contact, dashboard

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Handles application startup and shutdown events.
    """
    # --- On App Startup ---
    log.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}...")
    create_db_engine_and_session_factory()

    yield # --- Application is now running ---

    # --- On App Shutdown ---
    if not settings.TEST_MODE:
        log.info("Application lifespan shutdown...")
        await dispose_db_engine()
    else:
        log.info("Skipping database engine disposal in TEST_MODE.")


# ---- CREATING THE APP ----
app = FastAPI(
    title=settings.APP_NAME,
    description=settings.APP_DESCRIPTION,
    version=settings.APP_VERSION,
    lifespan=lifespan
)

# --- Add CORS Middleware ---
origins = [
    # URL of local frontend dev server
    "http://localhost:8080",
    "http://localhost:5173",
    "http://localhost",
    settings.FRONTEND_URL,
]

# Extend with environment-specific origins
origins.extend(settings.BACKEND_CORS_ORIGINS)

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    # The approval gate tells the client where to go through this header.
    expose_headers=["X-Redirect-To"],
)
# --- End of CORS Middleware ---

@app.exception_handler(DBAPIError)
async def database_error_handler(request: Request, exc: DBAPIError):
    """
    Surfaces database refusals (access policies, constraint violations) as
    readable client errors instead of a bare 500.
    """
    message = str(exc.orig) if exc.orig is not None else str(exc)
    status_code, detail = describe_database_error(message)
    log.error(f"Database error on {request.method} {request.url.path}: {message}")
    return JSONResponse(status_code=status_code, content={"detail": detail})

@app.get("/")
async def health_check():
    return {"status": "ok", "message": f"{settings.APP_NAME} is running"}

app.include_router(auth.router)
app.include_router(profiles.router)
app.include_router(students.router)
app.include_router(sessions.router)
app.include_router(ledger.router)
app.include_router(zoom.router)
app.include_router(reminders.router)
app.include_router(contact.router)
app.include_router(dashboard.router)
