"""Sends one chat-completion request per agent call."""

import asyncio
import logging
from typing import Any, Callable

import openai
from openai import AsyncOpenAI

from .config import Settings
from .errors import AgentTimeoutError, UpstreamError
from .resolver import InvocationConfig

logger = logging.getLogger("agents_mcp.invoker")

ClientFactory = Callable[[str, str, float], Any]

# Headroom so the client's own read timeout never fires before wait_for
CLIENT_TIMEOUT_GRACE_S = 5.0


def _default_client_factory(base_url: str, api_key: str, timeout: float) -> AsyncOpenAI:
    # Failed calls are reported to the caller as-is, never retried
    return AsyncOpenAI(
        base_url=base_url,
        api_key=api_key,
        timeout=timeout + CLIENT_TIMEOUT_GRACE_S,
        max_retries=0,
    )


class AgentInvoker:
    """Runs a resolved ``InvocationConfig`` against its endpoint.

    Keeps one client per base URL so connections are reused between calls.
    """

    def __init__(self, settings: Settings, client_factory: ClientFactory | None = None):
        self.settings = settings
        self._client_factory = client_factory or _default_client_factory
        self._clients: dict[str, Any] = {}

    def get_client(self, base_url: str) -> Any:
        # No await between lookup and insert, so this is atomic on the loop
        client = self._clients.get(base_url)
        if client is None:
            client = self._client_factory(
                base_url, self.settings.api_key, self.settings.timeout_s
            )
            self._clients[base_url] = client
        return client

    async def invoke(self, config: InvocationConfig) -> str:
        """Return the first choice's text ("" when the endpoint sends none).

        Raises ``AgentTimeoutError`` when the request outlives
        ``settings.timeout_ms`` (the request is cancelled) and
        ``UpstreamError`` for any failure reported by the client.
        """
        client = self.get_client(config.base_url)
        kwargs: dict[str, Any] = {
            "model": config.model,
            "messages": [
                {"role": "system", "content": config.system_prompt},
                {"role": "user", "content": config.query},
            ],
            "stream": False,
        }
        if config.effort:
            kwargs["reasoning_effort"] = config.effort

        logger.debug(
            "Calling %s model=%s effort=%s", config.base_url, config.model, config.effort or "-"
        )
        try:
            response = await asyncio.wait_for(
                client.chat.completions.create(**kwargs),
                timeout=self.settings.timeout_s,
            )
        except (asyncio.TimeoutError, openai.APITimeoutError):
            raise AgentTimeoutError(
                f"Agent call timed out after {self.settings.timeout_ms} ms"
            ) from None
        except openai.OpenAIError as exc:
            raise UpstreamError(str(exc) or type(exc).__name__) from exc

        return _first_content(response)

    async def aclose(self) -> None:
        clients, self._clients = self._clients, {}
        for client in clients.values():
            close = getattr(client, "close", None)
            if close is not None:
                await close()


def _first_content(response: Any) -> str:
    try:
        choices = response.choices
    except AttributeError:
        raise UpstreamError("Malformed completion response: no choices field") from None
    if not choices:
        return ""
    message = getattr(choices[0], "message", None)
    return getattr(message, "content", None) or ""
