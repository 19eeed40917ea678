# skillhub/main.py
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from skillhub import models  # noqa: F401  registers tables on Base.metadata
from skillhub.api import admin, auth, meetings, notifications, reports, sessions
from skillhub.config import settings
from skillhub.database import Base, engine
from skillhub.errors import SkillSwapError

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Create database tables
Base.metadata.create_all(bind=engine)

# Initialize FastAPI app
app = FastAPI(title="SkillSwap Hub API")

# CORS Middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(SkillSwapError)
async def skillswap_error_handler(request: Request, exc: SkillSwapError):
    logger.info(
        "%s %s -> %s: %s", request.method, request.url.path, exc.status_code, exc.detail
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


# API routers
app.include_router(auth.router)           # /auth/*
app.include_router(sessions.router)       # /sessions/*
app.include_router(meetings.router)       # /meetings/*
app.include_router(reports.router)        # /reports/*
app.include_router(admin.router)          # /admin/*
app.include_router(notifications.router)  # /notifications/*


@app.get("/health")
def health_check():
    return {
        "status": "healthy",
        "message": "SkillSwap Hub API is running",
        "version": "1.0.0",
        "environment": settings.APP_ENV,
    }
