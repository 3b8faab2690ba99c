# rollcall/main.py
from typing import Optional
import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from rollcall.config import Settings, settings as default_settings
from rollcall.core.clock import Clock
from rollcall.core.exceptions import RollCallError, ValidationError
from rollcall.core.logging import configure_logging
from rollcall.database import build_engine, build_sessionmaker, init_models
from rollcall.realtime.hub import ConnectionHub
from rollcall.routers import admin, checkin, realtime, status
from rollcall.services.store import AttendanceStore

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None, clock: Optional[Clock] = None) -> FastAPI:
    settings = settings or default_settings
    configure_logging(settings.LOG_LEVEL)

    app = FastAPI(title="Roll Call - Emergency Attendance", version="1.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include Routers
    app.include_router(status.router)
    app.include_router(checkin.router)
    app.include_router(admin.router)
    app.include_router(realtime.router)

    @app.on_event("startup")
    async def startup_event():
        engine = build_engine(settings)
        if settings.AUTO_CREATE_TABLES:
            await init_models(engine)
        app.state.engine = engine
        app.state.store = AttendanceStore(build_sessionmaker(engine), clock or Clock(settings.TIMEZONE))
        app.state.hub = ConnectionHub(send_timeout=settings.WS_SEND_TIMEOUT_SECONDS)
        logger.info("Roll call ready (timezone %s)", settings.TIMEZONE)

    @app.on_event("shutdown")
    async def shutdown_event():
        await app.state.hub.close()
        await app.state.engine.dispose()

    @app.exception_handler(RollCallError)
    async def rollcall_error_handler(request: Request, exc: RollCallError):
        body = {"error": exc.message}
        if isinstance(exc, ValidationError) and exc.rows:
            body["rows"] = [row.as_dict() for row in exc.rows]
        return JSONResponse(status_code=exc.status_code, content=body)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=exc.headers)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content={"error": "Invalid request body", "details": jsonable_encoder(exc.errors())},
        )

    @app.get("/")
    def read_root():
        return {"message": "Welcome to the Roll Call backend"}

    return app


app = create_app()


def run():
    import uvicorn
    uvicorn.run("rollcall.main:app", host=default_settings.HOST, port=default_settings.PORT)


if __name__ == "__main__":
    run()
