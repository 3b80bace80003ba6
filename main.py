import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from claim_notifier.application.use_cases.notifications import NotificationScheduler
from claim_notifier.config import get_settings
from claim_notifier.infrastructure.database import SessionLocal, engine, initialize_database
from claim_notifier.interfaces.api.routes import register_routes

LOG_FORMAT = "%(asctime)s %(levelname)s [%(threadName)s] %(name)s: %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Aplica el nivel de logging configurado a la raíz."""

    logging.basicConfig(
        level=(level or get_settings().log_level).upper(),
        format=LOG_FORMAT,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Inicializa la base de datos y el scheduler al arrancar y los libera al cerrar."""

    settings = get_settings()
    configure_logging(settings.log_level)
    initialize_database()

    scheduler = NotificationScheduler(SessionLocal, settings=settings)
    app.state.notification_scheduler = scheduler
    if settings.scheduler_enabled:
        scheduler.start()
    try:
        yield
    finally:
        scheduler.stop()
        engine.dispose()


def create_app() -> FastAPI:
    """Crea y configura la aplicación principal de FastAPI."""

    app = FastAPI(title="Claim Notifier", lifespan=lifespan)
    register_routes(app)
    return app


app = create_app()
