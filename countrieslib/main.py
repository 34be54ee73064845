import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from countrieslib.api.countries import router as countries_router
from countrieslib.engine.countries_index import CountriesIndex

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def create_app(index: CountriesIndex | None = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        if getattr(app.state, "index", None) is None:
            app.state.index = CountriesIndex()
        app.state.index.start()
        logger.info("Country index polling started")

        yield

        # Shutdown
        app.state.index.stop()
        logger.info("Country index polling stopped")

    app = FastAPI(
        title="Countries Reference Index",
        description="Pre-filtered country views and dropdown lists over the country reference dataset",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.index = index

    app.include_router(countries_router)

    @app.get("/health")
    async def health():
        return {"status": "ok", "countries": len(app.state.index.get_all_countries()) if app.state.index else 0}

    return app


app = create_app()
