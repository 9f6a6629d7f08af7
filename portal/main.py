import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.orm.exc import StaleDataError

from portal.config import settings
from portal.database import engine
from portal.exceptions import PortalError
from portal.logging_config import configure_logging
from portal.models import Base
from portal.routers import auth, users, branches, pettycash, recruitment

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # 1. LOGGING Y CREACION AUTOMATICA DE TABLAS
    configure_logging()
    Base.metadata.create_all(bind=engine)
    logger.info("Kechita portal API started")
    yield


app = FastAPI(
    title="Kechita Staff Portal",
    description="Caja chica por sucursal y reclutamiento",
    version="1.0.0",
    lifespan=lifespan,
)

# 2. CONFIGURACION DE CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS or ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# 3. REGISTRO DE ROUTERS (BACKEND API)
app.include_router(auth.router, prefix="/api/auth", tags=["Auth"])
app.include_router(users.router, prefix="/api/users", tags=["Users"])
app.include_router(branches.router, prefix="/api/branches", tags=["Branches"])
app.include_router(pettycash.router, prefix="/api/pettycash", tags=["Petty Cash"])
app.include_router(recruitment.router, prefix="/api/recruitment", tags=["Recruitment"])


@app.get("/health")
def health():
    return {"ok": True}


# --- 4. MANEJO DE ERRORES ---
@app.exception_handler(PortalError)
async def portal_error_handler(request: Request, exc: PortalError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})

@app.exception_handler(StaleDataError)
async def stale_data_handler(request: Request, exc: StaleDataError):
    logger.warning("Concurrent update on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=409, content={"detail": "Record changed concurrently, please retry"})

@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error 500: %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})
