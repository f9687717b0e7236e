# app/main.py
import logging
import os
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

load_dotenv()

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("allies")

from app.db.mongo import init_db_indexes  # noqa: E402
from app.services.media_service import UPLOAD_DIR  # noqa: E402

# Routers
from app.routes.allies import router as allies_router  # noqa: E402
from app.routes.auth import router as auth_router  # noqa: E402
from app.routes.comments import router as comments_router  # noqa: E402
from app.routes.communities import router as communities_router  # noqa: E402
from app.routes.posts import router as posts_router  # noqa: E402
from app.routes.subscriptions import router as subscriptions_router  # noqa: E402
from app.routes.users import router as users_router  # noqa: E402

API_PREFIX = "/api"

# ---------------------------
# Build FastAPI app
# ---------------------------
fastapi_app = FastAPI(title="Allies Social Backend", version="1.0.0")

# CORS: the mobile client calls from arbitrary origins
fastapi_app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------
# Error handlers
# ---------------------------
@fastapi_app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = {}
    for err in exc.errors():
        # loc looks like ("body", "email"); drop the source part
        loc = [str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path", "form")]
        msg = err.get("msg", "Invalid value")
        errors[".".join(loc) or "body"] = msg.removeprefix("Value error, ")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "Validation error", "errors": errors},
    )


@fastapi_app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


@fastapi_app.get("/health")
async def health_check():
    return {"status": "OK", "message": "Allies backend is running."}


@fastapi_app.get("/")
async def root():
    return {"message": "Welcome to the Allies social backend"}


# ---------------------------
# Routers
# ---------------------------
fastapi_app.include_router(users_router, prefix=API_PREFIX)
fastapi_app.include_router(auth_router, prefix=API_PREFIX)
fastapi_app.include_router(communities_router, prefix=API_PREFIX)
fastapi_app.include_router(subscriptions_router, prefix=API_PREFIX)
fastapi_app.include_router(posts_router, prefix=API_PREFIX)
fastapi_app.include_router(comments_router, prefix=API_PREFIX)
fastapi_app.include_router(allies_router, prefix=API_PREFIX)

# Uploaded media (profile pictures, banners, post images/videos)
Path(UPLOAD_DIR).mkdir(parents=True, exist_ok=True)
fastapi_app.mount("/uploads", StaticFiles(directory=UPLOAD_DIR), name="uploads")


# ---------------------------
# Startup tasks
# ---------------------------
@fastapi_app.on_event("startup")
async def on_startup():
    try:
        await init_db_indexes()
    except Exception:
        # Don't crash the app if indexes fail; just log it
        logger.exception("Index init error")


app = fastapi_app
