# backend/app/main.py
import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from dotenv import load_dotenv

# load .env before settings are read
load_dotenv()

from app.config import settings
from app.db import create_indexes, close_client
from app.routes.auth.auth import router as auth_router
from app.routes.expenses import router as expenses_router
from app.routes.notifications import router as notifications_router
from app.routes.analytics import router as analytics_router

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title=settings.app_name,
    description="Revenue, GST, expense and employee profitability dashboard API",
    version=settings.app_version,
)

# CORS - tighten in production
allowed_origins = settings.allowed_origins
if allowed_origins == "*":
    cors_origins = ["*"]
else:
    cors_origins = [o.strip() for o in allowed_origins.split(",")]

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_router, prefix="/auth")
app.include_router(expenses_router, prefix="/api")
app.include_router(notifications_router, prefix="/api")
app.include_router(analytics_router, prefix="/api")


@app.on_event("startup")
async def on_startup():
    await create_indexes()


@app.on_event("shutdown")
async def on_shutdown():
    close_client()


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": "Welcome to the Finance Dashboard API",
        "status": "running",
        "version": settings.app_version,
    }
