# conference_api/main.py
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from conference_api.config import settings
from conference_api.database import Base, engine

# every mapped class has to be imported before create_all / mapper setup
from conference_api.models import (  # noqa: F401
    user, conference, category, section, presentation,
    presenter, presentation_author, presenter_conflict, time_slot,
)
from conference_api.routers import conflicts, presenters, time_slots, presentation_status

import time
import logging
from fastapi import Request
from conference_api.logging_config import setup_logging


setup_logging()
logger = logging.getLogger("app")


# 建立資料表（若不存在）
Base.metadata.create_all(bind=engine)

app = FastAPI(title="Conference Scheduling Backend", version="1.0.0")


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.time()
    try:
        response = await call_next(request)
        ms = int((time.time() - start) * 1000)
        logger.info("%s %s -> %s (%dms)", request.method, request.url.path, response.status_code, ms)
        return response
    except Exception:
        ms = int((time.time() - start) * 1000)
        logger.exception("Unhandled error %s %s (%dms)", request.method, request.url.path, ms)
        raise


@app.exception_handler(Exception)
async def unhandled_error(request: Request, exc: Exception):
    # terminal per request, no retry
    return JSONResponse(
        status_code=500,
        content={"message": "Internal server error", "error": str(exc)},
    )


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers
app.include_router(conflicts.router)
app.include_router(presenters.router)
app.include_router(time_slots.router)
app.include_router(presentation_status.router)

@app.get("/")
def root():
    return {"message": "Conference scheduling backend is running!"}
