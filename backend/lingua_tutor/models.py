from __future__ import annotations
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Text
from .db import Base


class StoredValue(Base):
	__tablename__ = "stored_values"
	# Local key-value store: teaching state JSON, API key
	key = Column(String(128), primary_key=True, index=True)
	value = Column(Text, nullable=True)
	created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
	updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
