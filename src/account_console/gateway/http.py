"""HTTP implementation of the account gateway."""

from types import TracebackType
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

import httpx
import orjson
from structlog import get_logger

from account_console.exceptions import (
    GatewayConnectionError,
    GatewayError,
    GatewayTimeoutError,
    MalformedResponseError,
)
from account_console.models import AccountType, Status


if TYPE_CHECKING:
    from account_console.config.settings import GatewaySettings


logger = get_logger(__name__)

_MESSAGE_KEYS = ("detail", "message", "error")


def _truncate_error_text(response_text: str) -> str:
    """Truncate response text for compact error logging.

    Args:
        response_text: Full response text

    Returns:
        Truncated text suitable for logging

    """
    if len(response_text) > 200:
        return f"{response_text[:100]}...{response_text[-50:]}"
    if len(response_text) > 100:
        return f"{response_text[:100]}..."
    return response_text


def _extract_error_message(response: httpx.Response) -> str:
    """Pull the server supplied message out of an error body, if any."""
    try:
        body = orjson.loads(response.content)
    except orjson.JSONDecodeError:
        return ""
    if isinstance(body, dict):
        for key in _MESSAGE_KEYS:
            value = body.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()
            if isinstance(value, dict):
                nested = value.get("message")
                if isinstance(nested, str) and nested.strip():
                    return nested.strip()
    return ""


def _segment(value: str) -> str:
    return quote(value, safe="")


class HttpAccountGateway:
    """Account gateway client talking JSON over HTTP.

    Supports connection pooling by reusing an injected httpx.AsyncClient.
    When no client is injected one is created lazily and closed by
    ``aclose()`` or on leaving the async context manager.
    """

    def __init__(
        self,
        config: "GatewaySettings | None" = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the gateway client.

        Args:
            config: Gateway settings, uses defaults if not provided
            http_client: Optional shared httpx client for connection pooling

        """
        # Lazy import to avoid circular dependency
        if config is None:
            from account_console.config.settings import GatewaySettings

            config = GatewaySettings()
        self.config = config
        self._client = http_client
        self._owns_client = http_client is None

    async def __aenter__(self) -> "HttpAccountGateway":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the HTTP client if this gateway created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.config.base_url,
                timeout=self.config.request_timeout,
                verify=self.config.verify_tls,
            )
        return self._client

    def _get_common_headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.config.api_token:
            headers["Authorization"] = f"Bearer {self.config.api_token}"
        return headers

    def _log_http_error(self, operation: str, response: httpx.Response) -> None:
        if self.config.verbose_api:
            logger.error(
                "gateway_request_failed",
                operation=operation,
                status_code=response.status_code,
                response_text=response.text,
            )
        else:
            logger.error(
                "gateway_request_failed_compact",
                operation=operation,
                status_code=response.status_code,
                response_preview=_truncate_error_text(response.text),
            )

    async def _request(
        self,
        operation: str,
        method: str,
        path: str,
        *,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> httpx.Response:
        client = self._get_client()
        try:
            response = await client.request(
                method,
                path,
                json=json,
                params=params,
                headers=self._get_common_headers(),
            )
        except httpx.TimeoutException as e:
            logger.warning("gateway_request_timeout", operation=operation)
            raise GatewayTimeoutError() from e
        except httpx.RequestError as e:
            logger.warning("gateway_connection_failed", operation=operation, error=str(e))
            raise GatewayConnectionError(f"Could not connect to gateway: {e}") from e

        if response.is_error:
            self._log_http_error(operation, response)
            raise GatewayError(
                _extract_error_message(response),
                status_code=response.status_code,
                details={"operation": operation},
            )

        logger.debug(
            "gateway_request_completed",
            operation=operation,
            status_code=response.status_code,
        )
        return response

    @staticmethod
    def _decode(operation: str, response: httpx.Response) -> Any:
        """Decode a JSON body, unwrapping a top-level ``data`` envelope."""
        try:
            body = orjson.loads(response.content)
        except orjson.JSONDecodeError as e:
            raise MalformedResponseError(
                f"Gateway returned invalid JSON for {operation}",
                details={"operation": operation},
            ) from e
        if (
            isinstance(body, dict)
            and "data" in body
            and not body.keys() & {"accounts", "auth_url"}
        ):
            return body["data"]
        return body

    async def list_accounts(self) -> Any:
        response = await self._request("list_accounts", "GET", "/api/accounts")
        return self._decode("list_accounts", response)

    async def get_authorization_url(self, account_type: AccountType) -> dict[str, Any]:
        response = await self._request(
            "get_authorization_url",
            "GET",
            "/api/oauth/authorize",
            params={"is_shared": int(account_type)},
        )
        body = self._decode("get_authorization_url", response)
        if not isinstance(body, dict):
            raise MalformedResponseError(
                "Authorization response is not an object",
                details={"operation": "get_authorization_url"},
            )
        return body

    async def submit_authorization_callback(self, callback_url: str) -> None:
        await self._request(
            "submit_authorization_callback",
            "POST",
            "/api/oauth/callback",
            json={"callback_url": callback_url},
        )

    async def update_account_status(self, cookie_id: str, status: Status) -> None:
        await self._request(
            "update_account_status",
            "PATCH",
            f"/api/accounts/{_segment(cookie_id)}/status",
            json={"status": int(status)},
        )

    async def delete_account(self, cookie_id: str) -> None:
        await self._request(
            "delete_account", "DELETE", f"/api/accounts/{_segment(cookie_id)}"
        )

    async def list_account_quotas(self, cookie_id: str) -> Any:
        response = await self._request(
            "list_account_quotas",
            "GET",
            f"/api/accounts/{_segment(cookie_id)}/quotas",
        )
        return self._decode("list_account_quotas", response)

    async def update_quota_status(
        self, cookie_id: str, model_name: str, status: Status
    ) -> None:
        await self._request(
            "update_quota_status",
            "PATCH",
            f"/api/accounts/{_segment(cookie_id)}/quotas/{_segment(model_name)}/status",
            json={"status": int(status)},
        )
