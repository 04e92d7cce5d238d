"""FastAPI application factory."""

import asyncio
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from config import load_config
from core.errors import KsuidError
from core.health import HealthChecker, create_clock_check, create_generator_check
from internal.logging import LogLevel, StructuredLogger, get_logger
from ksuid.factory import KsuidFactory
from ksuid.subsecond import Precision
from utils.crash import configure as configure_crash, create_async_handler
from web.routes import health, ksuids

VERSION = "1.0.0"


def build_factories(generator_config, clock=None, random=None):
    """One factory per generation mode, built from config."""
    precision = generator_config.precision
    if precision is not None:
        precision = Precision[precision.upper()]
    return {
        "plain": KsuidFactory.new_instance(random, clock),
        "subsecond": KsuidFactory.new_subsecond_instance(random, clock, precision),
        "monotonic": KsuidFactory.new_monotonic_instance(
            random, clock, drift_tolerance=generator_config.drift_tolerance
        ),
    }


def create_app(config=None, clock=None, random=None):
    """Create and configure the FastAPI application."""
    config = config or load_config()

    StructuredLogger.configure(min_level=LogLevel.parse(config.logging.level))
    logger_instance = get_logger()
    configure_crash(config.logging.crash_file)

    factories = build_factories(config.generator, clock, random)
    default_mode = config.generator.mode
    health_checker = HealthChecker()
    health_checker.register("generator", create_generator_check(factories[default_mode]), critical=True)
    health_checker.register("clock", create_clock_check(factories[default_mode].clock), critical=False)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger_instance.info("Application starting", version=VERSION, mode=default_mode)
        loop = asyncio.get_running_loop()
        loop.set_exception_handler(create_async_handler(logger_instance))
        yield
        logger_instance.info("Application shutdown complete")

    app = FastAPI(
        title="KSUID Service",
        version=VERSION,
        description="K-sortable unique identifier generation and inspection",
        lifespan=lifespan,
    )

    @app.exception_handler(KsuidError)
    async def ksuid_error_handler(request: Request, exc: KsuidError):
        logger_instance.debug("Rejected KSUID request", path=request.url.path, error=str(exc))
        return JSONResponse(status_code=400, content=exc.to_dict())

    ksuids.init(factories, default_mode)
    health.init(health_checker)

    app.include_router(ksuids.router)
    app.include_router(health.router)

    return app
