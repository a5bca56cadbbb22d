from fastapi import FastAPI

from schoollife.core.app_logger import setup_logging
from schoollife.db.session import SessionLocal, init_db
from schoollife.services.neis import NeisClient
from schoollife.services.override_store import OverrideStore, OverridesChanged
from schoollife.services.shared_store import SharedStore

from schoollife.api.routes.schools import router as schools_router
from schoollife.api.routes.meals import router as meals_router
from schoollife.api.routes.timetable import router as timetable_router

logger = setup_logging()

app = FastAPI(title="SchoolLife API", version="0.1.0")

app.include_router(schools_router)
app.include_router(meals_router)
app.include_router(timetable_router)


def _log_override_change(event: OverridesChanged) -> None:
    logger.info(
        "overrides changed (%s), widget reload token %s",
        ", ".join(layer.value for layer in event.layers),
        event.reload_token,
    )


@app.on_event("startup")
def bootstrap_shared_state():
    init_db()

    shared_store = SharedStore(SessionLocal)
    override_store = OverrideStore(shared_store)
    maps = override_store.load()
    override_store.subscribe(_log_override_change)

    app.state.shared_store = shared_store
    app.state.override_store = override_store
    app.state.neis_client = NeisClient.from_settings()

    logger.info(
        "[BOOTSTRAP] overrides loaded: %d date, %d weekly, %d replace",
        len(maps.date), len(maps.weekly), len(maps.replace),
    )


@app.get("/health")
def health():
    return {"status": "ok"}
