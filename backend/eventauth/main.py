"""EventAuth - session and credential lifecycle API."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from eventauth.api.errors import register_exception_handlers
from eventauth.config import get_settings

settings = get_settings()


def configure_logging(level: str) -> None:
    """Set the root log level and a plain line format."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup: create tables
    from eventauth.api.deps import get_hasher, get_mail_dispatcher
    from eventauth.database import Base, engine

    # Import all models so they're registered with Base
    from eventauth import models  # noqa: F401

    Base.metadata.create_all(bind=engine)

    yield
    # Shutdown: let in-flight hashes and emails finish
    get_hasher().shutdown()
    get_mail_dispatcher().shutdown()
    # Next startup builds fresh pools.
    get_hasher.cache_clear()
    get_mail_dispatcher.cache_clear()


configure_logging(settings.log_level)

app = FastAPI(
    title=settings.app_name,
    description="Signup, signin, token rotation and signout",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173", "http://localhost:5174", "http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "app": settings.app_name}


# Import and include routers
from eventauth.api import auth  # noqa: E402

app.include_router(auth.router, prefix="/api")
