from __future__ import annotations
import logging
import time
import httpx
from dataclasses import dataclass
from typing import Any, Dict, List, Optional
from .settings import settings


log = logging.getLogger(__name__)


@dataclass(slots=True)
class Completion:
	text: str
	model: str
	prompt_tokens: int = 0
	completion_tokens: int = 0
	total_tokens: int = 0


def _completion_from_response(data: Dict[str, Any], default_model: str) -> Completion:
	usage = data.get("usage") or {}
	return Completion(
		text=data["choices"][0]["message"].get("content") or "",
		model=data.get("model") or default_model,
		prompt_tokens=int(usage.get("prompt_tokens") or 0),
		completion_tokens=int(usage.get("completion_tokens") or 0),
		total_tokens=int(usage.get("total_tokens") or 0),
	)


class LLMClient:
	"""Chat-completions client (OpenAI wire format) with an optional OpenRouter fallback."""

	def __init__(
		self,
		api_key: Optional[str] = None,
		*,
		base_url: Optional[str] = None,
		model: Optional[str] = None,
		transport: Optional[httpx.AsyncBaseTransport] = None,
	) -> None:
		self.api_key = api_key or settings.openai_api_key
		self._fallback_enabled = bool(settings.openrouter_api_key)
		if not self.api_key and not self._fallback_enabled:
			raise ValueError("OPENAI_API_KEY is not configured")
		self.model = model or settings.openai_model
		self.base_url = base_url or settings.openai_base_url
		timeout = settings.llm_timeout_seconds
		self._client = httpx.AsyncClient(timeout=timeout, transport=transport)
		self._fallback_client: Optional[httpx.AsyncClient] = None
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
			self._fallback_client = httpx.AsyncClient(timeout=timeout, transport=transport)

	async def complete(
		self,
		messages: List[Dict[str, str]],
		*,
		max_tokens: Optional[int] = None,
		temperature: Optional[float] = None,
		model: Optional[str] = None,
	) -> Completion:
		payload: Dict[str, Any] = {
			"model": model or self.model,
			"messages": messages,
			"temperature": settings.openai_temperature if temperature is None else temperature,
		}
		if max_tokens is not None:
			payload["max_tokens"] = max_tokens
		started = time.monotonic()
		last_error: Optional[Exception] = None
		if self.api_key:
			try:
				r = await self._client.post(
					self.base_url,
					headers={"Authorization": f"Bearer {self.api_key}", "Content-Type": "application/json"},
					json=payload,
				)
				r.raise_for_status()
			except (httpx.HTTPStatusError, httpx.RequestError) as err:
				log.warning("Chat completion request failed: %s", err)
				last_error = err
			else:
				try:
					completion = _completion_from_response(r.json(), payload["model"])
				except (ValueError, KeyError, IndexError, TypeError):
					last_error = RuntimeError(f"Unexpected completion response: {r.text}")
				else:
					log.info(
						"Completion model=%s latency_ms=%d tokens=%d",
						completion.model,
						int((time.monotonic() - started) * 1000),
						completion.total_tokens,
					)
					return completion
		else:
			last_error = ValueError("OPENAI_API_KEY is not configured")
		if not self._fallback_enabled:
			raise last_error
		return await self._fallback_complete(payload, last_error)

	async def aclose(self) -> None:
		await self._client.aclose()
		if self._fallback_client is not None:
			await self._fallback_client.aclose()

	async def _fallback_complete(self, payload: Dict[str, Any], primary_error: Optional[Exception]) -> Completion:
		if not self._fallback_client or not self._openrouter_api_key:
			raise primary_error or RuntimeError("Fallback requested but OpenRouter is not configured")
		headers = {k: v for k, v in self._openrouter_headers.items() if v}
		fallback_payload = {**payload, "model": self._openrouter_model}
		try:
			r = await self._fallback_client.post(
				self._openrouter_base_url,
				headers=headers,
				json=fallback_payload,
			)
			r.raise_for_status()
			completion = _completion_from_response(r.json(), self._openrouter_model)
		except Exception as fallback_err:
			if primary_error is not None:
				raise RuntimeError(
					f"Primary completion call failed ({primary_error}); fallback via OpenRouter also failed"
				) from fallback_err
			raise
		log.info("Completion served by OpenRouter fallback model=%s", completion.model)
		return completion
