import logging
from typing import Optional

from fastapi import FastAPI

from authsome_otp.config import settings
from authsome_otp.database import init_db
from authsome_otp.models.sql_store import SqlOtpStore
from authsome_otp.routers import health, otp
from authsome_otp.services.otp import OtpService, build_service
from authsome_otp.services.sweeper import ExpirySweeper

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


def create_app(
    service: Optional[OtpService] = None,
    sweep_interval_seconds: Optional[float] = None,
) -> FastAPI:
    app = FastAPI(title="Authsome OTP")
    uses_database = service is None
    if service is None:
        service = build_service(SqlOtpStore())
    if sweep_interval_seconds is None:
        sweep_interval_seconds = settings.otp_sweep_interval_seconds

    app.state.otp_service = service
    app.state.sweeper = (
        ExpirySweeper(service, sweep_interval_seconds)
        if sweep_interval_seconds > 0
        else None
    )

    app.include_router(health.router)
    app.include_router(otp.router)

    @app.on_event("startup")
    def startup() -> None:
        if uses_database:
            init_db()
        if app.state.sweeper is not None:
            app.state.sweeper.start()

    @app.on_event("shutdown")
    def shutdown() -> None:
        if app.state.sweeper is not None:
            app.state.sweeper.stop(timeout=5)

    @app.get("/")
    def root():
        return {"status": "OTP service running"}

    return app


app = create_app()
