from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from ..credentials import clear_api_key, is_configured, save_api_key
from ..db import get_db
from ..store import KeyValueStore

router = APIRouter(prefix="/config", tags=["config"])


def get_store(db: Session = Depends(get_db)) -> KeyValueStore:
	return KeyValueStore(db)


class ConfigStatus(BaseModel):
	configured: bool


class ApiKeyRequest(BaseModel):
	api_key: str


@router.get("", response_model=ConfigStatus)
def get_config(store: KeyValueStore = Depends(get_store)):
	return ConfigStatus(configured=is_configured(store))


@router.put("/api-key", response_model=ConfigStatus)
def put_api_key(req: ApiKeyRequest, store: KeyValueStore = Depends(get_store)):
	if not (req.api_key or "").strip():
		raise HTTPException(status_code=400, detail="Please enter a valid API key")
	save_api_key(store, req.api_key)
	return ConfigStatus(configured=True)


@router.delete("/api-key", response_model=ConfigStatus)
def delete_api_key(store: KeyValueStore = Depends(get_store)):
	clear_api_key(store)
	return ConfigStatus(configured=is_configured(store))
