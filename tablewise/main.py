# Tablewise API Main Entry Point
import logging
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from .db import create_tables
from .infra.rate_limit import limiter
from .routers.ai import router as ai_router
from .routers.planner import router as planner_router
from .routers.ready import router as ready_router
from .routers.recipes import router as recipes_router
from .settings import settings

# Configure structured logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[logging.StreamHandler(sys.stdout)]
)
logger = logging.getLogger("tablewise")


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.auto_create_tables:
        create_tables()
        logger.info("Database tables ensured")
    logger.info(f"Tablewise API started (ai_mode={settings.ai_mode})")
    yield


app = FastAPI(title="Tablewise API", version="0.1.0", lifespan=lifespan)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.info(f"Rejected invalid request to {request.url.path}")
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid request data", "details": jsonable_encoder(exc.errors())},
    )


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(ready_router, prefix="/api", tags=["ready"])
app.include_router(recipes_router, prefix="/api", tags=["recipes"])
app.include_router(ai_router, prefix="/api")
app.include_router(planner_router, prefix="/api")
