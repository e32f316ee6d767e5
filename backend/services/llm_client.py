"""LLM Client for the local Ollama generate endpoint."""
import asyncio
import time
from dataclasses import dataclass, field
from typing import Optional, Dict, Any
import logging

import httpx

from config import OLLAMA_API_URL, OLLAMA_MODEL, COMPLETION_TIMEOUT, ERROR_SENTINEL

logger = logging.getLogger(__name__)


@dataclass
class CompletionError:
    """Structured description of a failed completion."""
    code: str
    message: str
    details: Dict[str, Any] = field(default_factory=dict)


@dataclass
class CompletionResult:
    """Result of a completion request. On failure `text` is the error sentinel."""
    text: str
    ok: bool
    latency_ms: int
    model_used: str
    error: Optional[CompletionError] = None


class LLMClient:
    """Client for a non-streaming Ollama text completion endpoint."""

    def __init__(
        self,
        api_url: str = OLLAMA_API_URL,
        model: str = OLLAMA_MODEL,
        timeout: float = COMPLETION_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initialize the completion client.

        Args:
            api_url: Full URL of the generate endpoint
            model: Model identifier sent with every request
            timeout: Default total deadline per request, in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.api_url = api_url
        self.model = model
        self.timeout = timeout
        self._transport = transport
        logger.info(f"LLMClient initialized: model={model}, url={api_url}")

    async def complete(self, prompt: str, timeout: Optional[float] = None) -> str:
        """Return generated text, or the error sentinel if the request failed."""
        result = await self.generate(prompt, timeout=timeout)
        return result.text

    async def generate(self, prompt: str, timeout: Optional[float] = None) -> CompletionResult:
        """
        Send one prompt to the endpoint.

        Never raises for transport or endpoint failures; those come back as a
        result with ``ok=False`` and the sentinel text. Task cancellation is
        not intercepted and propagates to the caller.

        Args:
            prompt: Fully formatted prompt
            timeout: Total deadline in seconds (defaults to the client timeout)

        Returns:
            CompletionResult with text, status and latency
        """
        deadline = timeout if timeout is not None else self.timeout
        start_time = time.monotonic()

        try:
            text = await asyncio.wait_for(self._post(prompt, deadline), timeout=deadline)
            latency_ms = int((time.monotonic() - start_time) * 1000)
            logger.info(f"Generated response: model={self.model}, latency={latency_ms}ms")
            return CompletionResult(
                text=text,
                ok=True,
                latency_ms=latency_ms,
                model_used=self.model
            )

        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            return self._failure(
                "TIMEOUT_ERROR", f"Request timed out after {deadline}s", start_time, e
            )

        except httpx.HTTPStatusError as e:
            return self._failure(
                "HTTP_ERROR",
                f"Endpoint returned status {e.response.status_code}",
                start_time,
                e,
                status_code=e.response.status_code
            )

        except httpx.RequestError as e:
            return self._failure("TRANSPORT_ERROR", f"Network error: {e}", start_time, e)

        except (ValueError, KeyError, TypeError) as e:
            return self._failure("INVALID_RESPONSE", "Malformed endpoint response", start_time, e)

        except Exception as e:
            return self._failure(
                "UNKNOWN_ERROR", f"Unexpected error during generation: {e}", start_time, e
            )

    async def _post(self, prompt: str, timeout: float) -> str:
        payload = {
            "model": self.model,
            "prompt": prompt,
            "stream": False,
        }
        async with httpx.AsyncClient(timeout=timeout, transport=self._transport) as client:
            response = await client.post(self.api_url, json=payload)
            response.raise_for_status()
            body = response.json()

        text = body["response"]
        if not isinstance(text, str):
            raise TypeError(f"Expected string 'response', got {type(text).__name__}")
        return text

    def _failure(
        self,
        code: str,
        message: str,
        start_time: float,
        exc: BaseException,
        **details: Any
    ) -> CompletionResult:
        latency_ms = int((time.monotonic() - start_time) * 1000)
        error = CompletionError(
            code=code,
            message=message,
            details={
                "model": self.model,
                "latency_ms": latency_ms,
                "original_error": str(exc),
                "error_type": type(exc).__name__,
                **details
            }
        )
        logger.error(
            f"Completion failed: code={code}, model={self.model}, latency={latency_ms}ms, error={exc}",
            exc_info=exc,
            extra={"error_code": error.code, "error_details": error.details}
        )
        return CompletionResult(
            text=ERROR_SENTINEL,
            ok=False,
            latency_ms=latency_ms,
            model_used=self.model,
            error=error
        )
