from fastapi import FastAPI

from .services.tracker import get_tracker
from .services.catalog import router as catalog_router
from .services.stats import router as stats_router
from .services.submissions import router as submissions_router
from .services.debug import router as debug_router

app = FastAPI(title="Liftlog")

app.include_router(catalog_router, prefix="/api")
app.include_router(stats_router, prefix="/api")
app.include_router(submissions_router, prefix="/api")
app.include_router(debug_router, prefix="/api")


@app.get("/healthz")
async def healthz():
    return {"status": "ok"}


@app.on_event("startup")
async def on_startup() -> None:
    # Builds the store (and creates tables for the sql backend) before the first request
    get_tracker()
