import logging

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from db.base import Base
from db.session import engine

from models import catalogs  # noqa: F401  (registers catalog tables on Base)
from routers.datasets import router as datasets_router
from routers.orders import router as orders_router
from routers.planograms import router as planograms_router
from routers.pos import router as pos_router
from routers.tenants import router as tenants_router

# --------------------------------------------------
# LOGGING
# --------------------------------------------------
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


# --------------------------------------------------
# APP
# --------------------------------------------------
app = FastAPI(
    title="Planogram Tables API",
    version="1.0.0",
    swagger_ui_parameters={
        "displayRequestDuration": True,
    },
)


# --------------------------------------------------
# DB INIT
# --------------------------------------------------
@app.on_event("startup")
def _init_db():
    try:
        Base.metadata.create_all(bind=engine)
    except Exception:
        logger.exception("DB init failed")


# --------------------------------------------------
# CORS
# --------------------------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.options("/{path:path}")
def preflight(path: str, request: Request):
    return Response(status_code=204)


# --------------------------------------------------
# ROUTERS
# --------------------------------------------------
app.include_router(datasets_router)
app.include_router(planograms_router)
app.include_router(tenants_router)
app.include_router(orders_router)
app.include_router(pos_router)


# --------------------------------------------------
# HEALTH CHECK
# --------------------------------------------------
@app.get("/health")
def health():
    return {"status": "ok"}


@app.get("/")
def root():
    return {"status": "ok"}
