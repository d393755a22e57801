import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from moco_reports.api.absences import router as absences_router
from moco_reports.api.activities import router as activities_router
from moco_reports.api.presences import router as presences_router
from moco_reports.api.projects import router as projects_router
from moco_reports.core.config import settings
from moco_reports.core.errors import InvalidInput, MocoApiError

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if not settings.MOCO_SUBDOMAIN:
        logger.warning("MOCO_SUBDOMAIN is not set; MoCo requests will fail")
    logger.info("MoCo Reports backend started (base URL: %s)", settings.moco_base_url)

    yield

    logger.info("Shutting down MoCo Reports backend.")


app = FastAPI(
    title="MoCo Reports API",
    description="Time tracking, presence and absence summaries built from the MoCo API.",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173", "http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(MocoApiError)
async def moco_api_error_handler(request: Request, exc: MocoApiError) -> JSONResponse:
    logger.warning("%s %s -> %s: %s", request.method, request.url.path, type(exc).__name__, exc.message)
    return JSONResponse(status_code=exc.http_status, content={"detail": exc.message})


@app.exception_handler(InvalidInput)
async def invalid_input_handler(request: Request, exc: InvalidInput) -> JSONResponse:
    # Запись из MoCo не прошла проверку ядра: весь пакет отклоняется
    logger.error("%s %s: invalid record from MoCo: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content={"detail": f"MoCo returned a record that cannot be aggregated: {exc}"},
    )


app.include_router(activities_router, prefix="/api/activities", tags=["Activities"])
app.include_router(presences_router, prefix="/api/presences", tags=["Presences"])
app.include_router(absences_router, prefix="/api", tags=["Absences"])
app.include_router(projects_router, prefix="/api/projects", tags=["Projects"])


@app.get("/health", tags=["System"])
async def health_check() -> dict:
    return {"status": "ok"}
