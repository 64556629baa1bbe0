"""Main FastAPI application."""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import Settings, settings as default_settings
from .database import async_session, engine, init_db, close_db
from .routers import checks_router, alerts_router, status_router, email_config_router
from .services.orchestrator import SingleFlight, build_orchestrator
from .services.scheduler import SchedulerService
from .stores import HistoryStore

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan - startup and shutdown."""
    state = app.state
    logger.info("Starting MonitorScope")

    await init_db(state.engine)
    logger.info("Database initialized")

    scheduler = None
    if state.settings.scheduler_enabled:
        scheduler = SchedulerService(
            orchestrator_factory=lambda: build_orchestrator(
                state.session_factory,
                state.settings,
                state.single_flight,
                probe_transport=state.probe_transport,
                mail_transport=state.mail_transport,
            ),
            history=HistoryStore(state.session_factory),
            check_interval_minutes=state.settings.check_interval_minutes,
            retention_days=state.settings.history_retention_days,
        )
        scheduler.start()
    state.scheduler = scheduler

    yield

    if scheduler:
        scheduler.stop()
    await close_db(state.engine)
    logger.info("Shutdown complete")


def create_app(config: Optional[Settings] = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="MonitorScope",
        description="API uptime monitoring - health checks, alerts and email notifications",
        version="1.0.0",
        lifespan=lifespan,
    )

    # Services read these at request time; tests replace them
    app.state.settings = config or default_settings
    app.state.engine = engine
    app.state.session_factory = async_session
    app.state.single_flight = SingleFlight()
    app.state.probe_transport = None
    app.state.mail_transport = None
    app.state.scheduler = None

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # In production, restrict to your domain
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(checks_router)
    app.include_router(alerts_router)
    app.include_router(status_router)
    app.include_router(email_config_router)

    @app.get("/health")
    async def health_check():
        return {"status": "healthy", "service": "monitorscope"}

    return app


# Create the application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=default_settings.web_port)
