import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from launchpad_app.api.routes import router as api_router
from launchpad_app.config import settings
from launchpad_app.services.session import SimulationSession
from launchpad_app.utils.json_safety import SafeJSONResponse


logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(
        title="Launchpad Returns Simulator",
        default_response_class=SafeJSONResponse,
    )

    # ── One in-memory scenario per process, reset on restart ──
    app.state.session = SimulationSession()

    # ── CORS (front end served from elsewhere during development) ──
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
        allow_credentials=True,
    )

    # ── API routes ──
    app.include_router(api_router, prefix="/api")

    logger.info("launchpad simulator ready (max horizon %d)", settings.MAX_TIME_HORIZON)
    return app


app = create_app()


def run():
    import uvicorn

    uvicorn.run(app, host=settings.HOST, port=settings.PORT)
