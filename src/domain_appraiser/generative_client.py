"""
Generative Client for the external analysis and image services.

This module provides an async client for an OpenAI-compatible service:
chat completions for narrative and structured data, image generations for
branding. Transport and HTTP failures are mapped to UpstreamServiceError;
an unusable response envelope is reported as MalformedResponseError so the
caller can fall back to locally generated data.

In simulation mode no network requests are made.
"""

from typing import Any, Optional

import httpx

from .audit_logger import AuditLogger
from .config import GenerativeServiceConfig
from .enums import LogLevel, MalformedResponseCode, UpstreamErrorCode
from .exceptions import MalformedResponseError, UpstreamServiceError


SIMULATED_MARKER = "[SIMULATED]"


class GenerativeClient:
    """
    Async client for text completions and image generations.

    Use as an async context manager; the underlying httpx.AsyncClient is
    opened on entry and closed on exit.
    """

    COMPLETIONS_PATH = "/chat/completions"
    IMAGES_PATH = "/images/generations"

    PLACEHOLDER_IMAGE_URL = "https://placehold.co/1024x1024/png?text=Logo+Concept"

    def __init__(
        self,
        config: GenerativeServiceConfig,
        simulation_mode: bool = False,
        logger: Optional[AuditLogger] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Initialize the generative client.

        Args:
            config: Service endpoint, credentials and model settings
            simulation_mode: If True, no real network requests are made
            logger: Optional audit logger
            transport: Optional httpx transport (e.g. httpx.MockTransport)
        """
        self._config = config
        self._simulation_mode = simulation_mode
        self._logger = logger
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> "GenerativeClient":
        """Async context manager entry."""
        self._client = self._create_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()

    @property
    def simulation_mode(self) -> bool:
        return self._simulation_mode

    def _create_client(self) -> httpx.AsyncClient:
        headers = {"Content-Type": "application/json"}
        if self._config.api_key:
            headers["Authorization"] = f"Bearer {self._config.api_key}"
        return httpx.AsyncClient(
            base_url=self._config.base_url,
            headers=headers,
            timeout=httpx.Timeout(self._config.timeout_seconds),
            transport=self._transport,
        )

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        json_mode: bool = False,
        max_tokens: Optional[int] = None,
    ) -> str:
        """
        Request a chat completion and return the message content.

        Args:
            system_prompt: Instructions for the model
            user_prompt: The request itself
            json_mode: Ask for a JSON object response
            max_tokens: Overrides the configured token limit

        Returns:
            The content of the first choice

        Raises:
            UpstreamServiceError: On transport failure or HTTP status >= 400
            MalformedResponseError: If the response envelope has no content
        """
        if self._simulation_mode:
            return self._simulated_completion(user_prompt, json_mode)

        payload: dict[str, Any] = {
            "model": self._config.text_model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "temperature": self._config.temperature,
            "max_tokens": max_tokens or self._config.max_tokens,
        }
        if json_mode:
            payload["response_format"] = {"type": "json_object"}

        body = await self._post(self.COMPLETIONS_PATH, payload)

        try:
            content = body["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            raise MalformedResponseError(
                code=MalformedResponseCode.SCHEMA_MISMATCH.value,
                message="Completion response has no choices[0].message.content",
                details={"keys": sorted(body) if isinstance(body, dict) else []},
            )

        if not isinstance(content, str):
            raise MalformedResponseError(
                code=MalformedResponseCode.EMPTY_CONTENT.value,
                message="Completion response content is not text",
                details={"type": type(content).__name__},
            )
        return content

    async def generate_image(self, prompt: str) -> str:
        """
        Request one generated image and return its URL.

        Raises:
            UpstreamServiceError: On failure, or when no image URL is returned
        """
        if self._simulation_mode:
            return self.PLACEHOLDER_IMAGE_URL

        payload = {
            "model": self._config.image_model,
            "prompt": prompt,
            "n": 1,
            "size": self._config.image_size,
        }

        try:
            body = await self._post(self.IMAGES_PATH, payload)
        except MalformedResponseError as e:
            raise UpstreamServiceError(
                code=UpstreamErrorCode.EMPTY_RESULT.value,
                message="Image service returned an unreadable response",
                details=e.details,
            )

        try:
            url = body["data"][0]["url"]
        except (KeyError, IndexError, TypeError):
            url = None

        if not isinstance(url, str) or not url.strip():
            self._log(LogLevel.ERROR, "Image service returned no image URL", {})
            raise UpstreamServiceError(
                code=UpstreamErrorCode.EMPTY_RESULT.value,
                message="Image service returned no image URL",
            )
        return url.strip()

    async def _post(self, path: str, payload: dict) -> Any:
        """POST a JSON payload and return the decoded JSON body."""
        if self._client is None:
            self._client = self._create_client()

        request_url = f"{self._config.base_url.rstrip('/')}{path}"
        self._log(LogLevel.DEBUG, "Sending request", {
            "url": request_url,
            "model": payload.get("model"),
        })

        try:
            response = await self._client.post(path, json=payload)
        except httpx.TimeoutException as e:
            raise self._upstream_error(
                UpstreamErrorCode.TIMEOUT,
                f"Request timed out after {self._config.timeout_seconds}s",
                request_url,
                error=e,
            )
        except httpx.HTTPError as e:
            raise self._upstream_error(
                UpstreamErrorCode.NETWORK_ERROR,
                f"Connection error: {e}",
                request_url,
                error=e,
            )

        status = response.status_code
        if status == 429:
            raise self._upstream_error(
                UpstreamErrorCode.RATE_LIMITED,
                "Rate limited by generative service",
                request_url,
                status=status,
            )
        if status in (401, 403):
            raise self._upstream_error(
                UpstreamErrorCode.AUTH_ERROR,
                f"Generative service rejected credentials: {status}",
                request_url,
                status=status,
            )
        if status >= 400:
            raise self._upstream_error(
                UpstreamErrorCode.SERVER_ERROR,
                f"Generative service error: {status}",
                request_url,
                status=status,
            )

        try:
            return response.json()
        except ValueError as e:
            raise MalformedResponseError(
                code=MalformedResponseCode.PARSE_ERROR.value,
                message=f"Failed to parse service response: {e}",
                details={"request_url": request_url},
            )

    def _upstream_error(
        self,
        code: UpstreamErrorCode,
        message: str,
        request_url: str,
        status: Optional[int] = None,
        error: Optional[Exception] = None,
    ) -> UpstreamServiceError:
        details: dict[str, Any] = {"request_url": request_url}
        if status is not None:
            details["status_code"] = status

        if self._logger:
            self._logger.log_error(
                "generative_client",
                message,
                error=error,
                request_url=request_url,
                response_status_code=status,
            )
        return UpstreamServiceError(code=code.value, message=message, details=details)

    def _simulated_completion(self, user_prompt: str, json_mode: bool) -> str:
        # An empty object makes structured callers take the fallback path
        if json_mode:
            return "{}"
        return (
            f"{SIMULATED_MARKER} Narrative analysis is not available in "
            f"simulation mode.\n\nRequest: {user_prompt}"
        )

    def _log(self, level: LogLevel, message: str, data: dict) -> None:
        if self._logger:
            self._logger.log(level, "generative_client", message, data)

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None
