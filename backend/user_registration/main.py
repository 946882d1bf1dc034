# user_registration/main.py
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Your configuration and DB
from user_registration.config import settings
from user_registration.core.db import init_db, close_db
from user_registration.core.bootstrap import run_startup
from user_registration.services import build_services

from user_registration.api.v1.errors import register_exception_handlers
from user_registration.api.v1.routers import admin, auth, profile, roles

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger("uvicorn.error")

app = FastAPI(title=settings.APP_NAME)

# Stores and services, wired once; routes reach them through app.state
app.state.services = build_services(settings)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)


@app.on_event("startup")
async def on_startup():
    await init_db(generate_schemas=settings.generate_schemas)
    # Default roles and (optionally) a default admin account
    await run_startup(app.state.services, settings)
    logger.info("[startup] %s ready (env=%s)", settings.APP_NAME, settings.env)


@app.on_event("shutdown")
async def on_shutdown():
    await close_db()

# REST
app.include_router(auth.router, prefix="/api/v1")
app.include_router(profile.router, prefix="/api/v1")
app.include_router(roles.router, prefix="/api/v1")
app.include_router(admin.router, prefix="/api/v1")


@app.get("/healthz")
def healthz():
    return {"ok": True}
