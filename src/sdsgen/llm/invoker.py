# src/sdsgen/llm/invoker.py
from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import Awaitable, Callable, Mapping
from typing import Any, Protocol, TypeVar

from sdsgen.config import Settings
from sdsgen.errors import AIProviderError, NetworkError, ParsingError, ValidationError
from .providers.http import Transport, post_json
from .registry import AvailableProvider, ProviderRegistry

logger = logging.getLogger(__name__)

T = TypeVar("T")

Sleep = Callable[[float], Awaitable[Any]]


class CompletionClient(Protocol):
    """Minimal interface used by the pipeline stages.

    complete() selects a provider for the task type, sends the prompt, and
    optionally runs `parse` on the text inside the retry loop.
    """

    async def complete(
        self,
        prompt: str,
        *,
        task_type: str = "general",
        parse: Callable[[str], Any] | None = None,
    ) -> Any: ...


class ResilientInvoker:
    """Sends prompts to a provider with timeout, fixed-backoff retry and error classification.

    Attempt accounting is inclusive of the first try: max_retries=1 means up
    to two attempts. Transient failures (NetworkError, which includes non-2xx
    responses and timeouts) are retried; a response with an unexpected shape
    (ValidationError) is raised immediately since retrying would not help.
    After the last failed attempt an AIProviderError naming the provider is
    raised, wrapping the last cause.
    """

    def __init__(
        self,
        *,
        settings: Settings | None = None,
        registry: ProviderRegistry | None = None,
        transport: Transport = post_json,
        environ: Mapping[str, str] | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.settings = settings or Settings()
        self.registry = registry or ProviderRegistry()
        self.transport = transport
        self.environ = environ
        self.sleep = sleep

    def select(self, task_type: str = "general") -> AvailableProvider:
        env = os.environ if self.environ is None else self.environ
        return self.registry.select(task_type, environ=env, preferred=self.settings.preferred_provider)

    async def _send_once(self, prompt: str, provider: AvailableProvider) -> str:
        descriptor = provider.descriptor
        request = descriptor.build_request(prompt, provider.credential)
        timeout_s = float(self.settings.timeout_s)

        try:
            result = await asyncio.wait_for(
                asyncio.to_thread(
                    self.transport,
                    url=request.url,
                    payload=request.payload,
                    headers=request.headers,
                    timeout_s=timeout_s,
                ),
                timeout=timeout_s,
            )
        except asyncio.TimeoutError as e:
            raise NetworkError(
                f"Request timeout after {timeout_s:g} seconds", endpoint=request.url, status_code=408
            ) from e

        if result.status < 200 or result.status >= 300:
            detail = (result.raw_text or "").strip()[:500] or "Unknown error"
            raise NetworkError(
                f"{descriptor.display} API error: {result.status}. {detail}",
                endpoint=request.url,
                status_code=result.status,
            )

        return descriptor.extract_text(result.body)

    async def invoke(
        self,
        prompt: str,
        provider: AvailableProvider,
        *,
        max_retries: int | None = None,
        parse: Callable[[str], T] | None = None,
    ) -> Any:
        """Calls one provider, retrying transient failures.

        When `parse` is given it runs on every successful response; a
        ParsingError counts as a failed attempt and leads to a fresh call while
        attempts remain. The last ParsingError is re-raised as-is.
        """
        retries = self.settings.max_retries if max_retries is None else max(0, int(max_retries))
        attempts = retries + 1
        display = provider.descriptor.display
        last_error: Exception | None = None

        for attempt in range(1, attempts + 1):
            try:
                text = await self._send_once(prompt, provider)
                return parse(text) if parse is not None else text
            except ValidationError as e:
                logger.error("%s API returned an unexpected response shape: %s", display, e)
                raise
            except (NetworkError, ParsingError) as e:
                last_error = e
                if attempt >= attempts:
                    break
                logger.warning(
                    "%s API attempt %d/%d failed (%s), retrying in %.1fs",
                    display,
                    attempt,
                    attempts,
                    e,
                    self.settings.retry_backoff_s,
                )
                await self.sleep(self.settings.retry_backoff_s)

        if isinstance(last_error, ParsingError):
            raise last_error

        logger.error("%s API failed after %d attempts: %s", display, attempts, last_error)
        raise AIProviderError(
            f"{display} API failed: {last_error}",
            provider=provider.name,
            cause=last_error,
        ) from last_error

    async def complete(
        self,
        prompt: str,
        *,
        task_type: str = "general",
        parse: Callable[[str], T] | None = None,
        max_retries: int | None = None,
    ) -> Any:
        provider = self.select(task_type)
        logger.info("Using %s API for %s task", provider.descriptor.display, task_type)
        return await self.invoke(prompt, provider, max_retries=max_retries, parse=parse)
