from __future__ import annotations
import sys
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from loguru import logger

from .config import settings
from .db import init_db, AsyncSessionLocal
from .api.deps import get_dispatcher
from .api.errors import register_exception_handlers
from .api.routers import ai, auth, calendar, habits, profile, stats, support
from .scheduler.reminders import ReminderScheduler

reminder_scheduler = ReminderScheduler(AsyncSessionLocal, get_dispatcher())


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    # --- startup ---
    logger.remove()
    logger.add(sys.stderr, level=settings.LOG_LEVEL)

    await init_db()
    if settings.ENABLE_REMINDER_SCHEDULER:
        reminder_scheduler.start()
    logger.info("HabitFlow API started ({})", settings.ENV)

    yield

    # --- shutdown ---
    reminder_scheduler.stop()
    logger.info("HabitFlow API shut down")


app = FastAPI(title="HabitFlow API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)

register_exception_handlers(app)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    logger.info("Incoming: {} {} origin: {}", request.method, request.url.path, request.headers.get("origin"))
    response = await call_next(request)
    logger.info("{} {} -> {}", request.method, request.url.path, response.status_code)
    return response


for r in (auth, profile, habits, stats, calendar, support, ai):
    app.include_router(r.router)


@app.get("/", response_class=PlainTextResponse)
async def root():
    return "HabitFlow API is running"


@app.get("/health")
async def health():
    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "scheduler_running": reminder_scheduler.running,
    }


if __name__ == "__main__":
    import os
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", 4000)))
