from __future__ import annotations
import logging
import httpx
from typing import Any, Dict, List, Optional, Sequence
from .settings import settings

logger = logging.getLogger(__name__)


class TutorServiceError(RuntimeError):
	"""Network, credential or model failure while talking to the tutor service."""


class TutorClient:
	def __init__(
		self,
		api_key: Optional[str] = None,
		*,
		base_url: Optional[str] = None,
		model: Optional[str] = None,
		transport: Optional[httpx.AsyncBaseTransport] = None,
	) -> None:
		self.api_key = api_key or settings.openai_api_key
		if not self.api_key:
			raise TutorServiceError("API key not configured")
		self.model = model or settings.openai_model
		self.base_url = base_url or settings.openai_base_url
		self.temperature = settings.openai_temperature
		self.max_tokens = settings.openai_max_tokens
		self._client = httpx.AsyncClient(timeout=settings.tutor_timeout_seconds, transport=transport)
		self._fallback_client: Optional[httpx.AsyncClient] = None
		self._fallback_enabled = bool(settings.openrouter_api_key)
		self._openrouter_api_key = settings.openrouter_api_key
		self._openrouter_model = settings.openrouter_model
		self._openrouter_base_url = settings.openrouter_base_url
		self._openrouter_headers = {
			"Authorization": f"Bearer {self._openrouter_api_key}" if self._openrouter_api_key else "",
			"Content-Type": "application/json",
			"HTTP-Referer": settings.openrouter_referer,
			"X-Title": settings.openrouter_title,
		}
		if self._fallback_enabled:
			self._fallback_client = httpx.AsyncClient(timeout=settings.tutor_timeout_seconds, transport=transport)

	async def complete(
		self,
		system_prompt: str,
		prior_turns: Sequence[Dict[str, str]],
		user_turn: str,
	) -> str:
		messages: List[Dict[str, str]] = [{"role": "system", "content": system_prompt}]
		messages.extend({"role": t["role"], "content": t["content"]} for t in prior_turns)
		messages.append({"role": "user", "content": user_turn})
		payload: Dict[str, Any] = {
			"model": self.model,
			"messages": messages,
			"temperature": self.temperature,
			"max_tokens": self.max_tokens,
		}
		headers = {"Authorization": f"Bearer {self.api_key}", "Content-Type": "application/json"}
		last_error: Optional[Exception] = None
		try:
			r = await self._client.post(self.base_url, headers=headers, json=payload)
			r.raise_for_status()
		except httpx.HTTPError as err:
			last_error = err
		if last_error is None:
			try:
				return _message_text(r.json())
			except (ValueError, KeyError, IndexError, TypeError):
				last_error = TutorServiceError(f"Unexpected tutor response: {r.text}")
		logger.warning("Tutor service call failed: %s", last_error)
		if not self._fallback_enabled:
			raise TutorServiceError(str(last_error)) from last_error
		return await self._fallback_complete(messages, last_error)

	async def aclose(self) -> None:
		await self._client.aclose()
		if self._fallback_client is not None:
			await self._fallback_client.aclose()

	async def _fallback_complete(self, messages: List[Dict[str, str]], primary_error: Exception) -> str:
		if not self._fallback_client or not self._openrouter_api_key:
			raise TutorServiceError("Fallback requested but OpenRouter is not configured") from primary_error
		headers = {k: v for k, v in self._openrouter_headers.items() if v}
		payload: Dict[str, Any] = {
			"model": self._openrouter_model,
			"messages": messages,
			"temperature": self.temperature,
			"max_tokens": self.max_tokens,
		}
		try:
			r = await self._fallback_client.post(
				self._openrouter_base_url,
				headers=headers,
				json=payload,
			)
			r.raise_for_status()
			return _message_text(r.json())
		except (httpx.HTTPError, ValueError, KeyError, IndexError, TypeError) as fallback_err:
			raise TutorServiceError(
				f"Tutor call failed ({primary_error}); fallback via OpenRouter also failed"
			) from fallback_err


def _message_text(data: Dict[str, Any]) -> str:
	text = data["choices"][0]["message"]["content"]
	if not isinstance(text, str) or not text.strip():
		raise ValueError("empty completion")
	return text
