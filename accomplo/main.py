import importlib
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import settings
from .deps import engine
from . import models

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Accomplo API", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_methods=["*"],
    allow_headers=["*"],
    allow_credentials=True,
)

@app.get("/health")
def health():
    return {"ok": True, "backend": settings.backend}

def _include_routers() -> None:
    for modname in ["auth", "profile", "accomplishments"]:
        mod = importlib.import_module(f"{__package__}.routers.{modname}")
        app.include_router(mod.router)
        logger.info("[routers] mounted %s", modname)

@app.on_event("startup")
def _on_startup():
    # tables are only needed by the relational backend
    if settings.backend == "sql":
        models.Base.metadata.create_all(bind=engine)
    logger.info("[startup] backend=%s", settings.backend)

# Include routers immediately (not in startup event)
_include_routers()
