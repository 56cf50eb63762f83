import logging

from fastapi import Depends, FastAPI

from .db import Base, engine
from .settings import settings
from .credentials import is_configured
from .store import KeyValueStore
from .routers import config
from .routers import tutor

logging.basicConfig(
	level=settings.log_level.upper(),
	format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="Lingua Tutor API")
app.include_router(config.router)
app.include_router(tutor.router)


@app.get("/info")
def root(store: KeyValueStore = Depends(config.get_store)):
	return {"status": "ok", "tutor_configured": is_configured(store)}


@app.on_event("startup")
async def startup_event():
	# Initialize DB schema
	Base.metadata.create_all(bind=engine)
