from __future__ import annotations
import logging
from typing import Optional
from sqlalchemy import delete
from sqlalchemy.orm import Session

from .models import StoredValue
from .progress import ProgressState, default_state, state_from_payload, state_to_json

logger = logging.getLogger(__name__)

PROGRESS_KEY = "teachingState"


class KeyValueStore:
	"""Local key-value persistence; last write wins."""

	def __init__(self, db: Session) -> None:
		self.db = db

	def get(self, key: str) -> Optional[str]:
		row = self.db.get(StoredValue, key)
		return row.value if row is not None else None

	def set(self, key: str, value: str) -> None:
		row = self.db.get(StoredValue, key)
		if row is None:
			row = StoredValue(key=key, value=value)
		else:
			row.value = value
		self.db.add(row)
		self.db.commit()

	def delete(self, key: str) -> bool:
		res = self.db.execute(delete(StoredValue).where(StoredValue.key == key))
		self.db.commit()
		return bool(res.rowcount)


def load_progress(store: KeyValueStore) -> ProgressState:
	raw = store.get(PROGRESS_KEY)
	if raw is None:
		return default_state()
	return state_from_payload(raw)


def save_progress(store: KeyValueStore, state: ProgressState) -> None:
	store.set(PROGRESS_KEY, state_to_json(state))
	logger.debug("Saved progress %s:%s:%s", state.level, state.topic, state.progress)


def reset_progress(store: KeyValueStore) -> ProgressState:
	state = default_state()
	save_progress(store, state)
	return state
