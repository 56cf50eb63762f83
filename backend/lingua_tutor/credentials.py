from __future__ import annotations
from typing import Optional

from .settings import settings
from .store import KeyValueStore

API_KEY_STORE_KEY = "openai_api_key"
# Value shipped in example env files; treated as unset
PLACEHOLDER_API_KEY = "your_openai_api_key_here"


def resolve_api_key(store: Optional[KeyValueStore]) -> Optional[str]:
	env_key = settings.openai_api_key
	if env_key and env_key != PLACEHOLDER_API_KEY:
		return env_key
	if store is None:
		return None
	return store.get(API_KEY_STORE_KEY) or None


def is_configured(store: Optional[KeyValueStore]) -> bool:
	return bool(resolve_api_key(store))


def save_api_key(store: KeyValueStore, api_key: str) -> None:
	store.set(API_KEY_STORE_KEY, api_key.strip())


def clear_api_key(store: KeyValueStore) -> bool:
	return store.delete(API_KEY_STORE_KEY)
