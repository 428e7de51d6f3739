# counselbook/main.py
from fastapi import FastAPI

from counselbook.api.errors import register_error_handlers
from counselbook.api.routes import health, internal, meeting_requests, slots
from counselbook.core.config import get_settings
from counselbook.core.logging import configure_logging
from counselbook.db.session import init_db_for_startup


def create_app() -> FastAPI:
    """
    Application factory for the Counselbook service.
    """
    settings = get_settings()
    configure_logging(settings.LOG_LEVEL)

    app = FastAPI(
        title=settings.APP_NAME,
        description=(
            "Booking core for student/counselor meetings: counselors publish\n"
            "availability slots, students request a slot with an agenda, and\n"
            "counselors accept (with a meeting link) or reject (with a reason)."
        ),
        version="0.1.0",
    )

    register_error_handlers(app)

    # Routers
    app.include_router(health.router)
    app.include_router(slots.router)
    app.include_router(meeting_requests.router)
    app.include_router(internal.router)

    @app.on_event("startup")
    async def on_startup() -> None:  # pragma: no cover
        await init_db_for_startup()

    return app


app = create_app()
