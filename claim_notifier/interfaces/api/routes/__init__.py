from fastapi import FastAPI

from .summary_jobs import router as summary_jobs_router


def register_routes(app: FastAPI) -> None:
    """Registra todos los routers de la API en la aplicación FastAPI."""

    app.include_router(summary_jobs_router)
