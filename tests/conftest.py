"""Shared fixtures: an in-memory gateway and a notifier that records."""

import asyncio
from typing import Any

import pytest

from account_console.config.settings import config_manager
from account_console.exceptions import GatewayError
from account_console.models import AccountType, Status
from account_console.notifications import Notification


class FakeGateway:
    """In-memory gateway recording every call.

    ``failures`` maps a method name to an exception raised on its next call.
    ``gates`` maps a method name to an asyncio.Event the call waits on, so
    tests can hold a request in flight.
    """

    def __init__(
        self,
        accounts: Any = None,
        quotas: dict[str, Any] | None = None,
        auth_url: str = "https://auth.example.com/authorize?state=abc",
    ) -> None:
        self.accounts: Any = accounts if accounts is not None else []
        self.quotas: dict[str, Any] = quotas or {}
        self.auth_url = auth_url
        self.authorize_response: Any = None
        self.calls: list[tuple[str, tuple[Any, ...]]] = []
        self.failures: dict[str, BaseException] = {}
        self.gates: dict[str, asyncio.Event] = {}
        self.closed = False

    def calls_to(self, name: str) -> list[tuple[Any, ...]]:
        return [args for method, args in self.calls if method == name]

    async def _enter(self, name: str, *args: Any) -> None:
        self.calls.append((name, args))
        gate = self.gates.get(name)
        if gate is not None:
            await gate.wait()
        error = self.failures.pop(name, None)
        if error is not None:
            raise error

    async def list_accounts(self) -> Any:
        await self._enter("list_accounts")
        return self.accounts

    async def get_authorization_url(self, account_type: AccountType) -> Any:
        await self._enter("get_authorization_url", account_type)
        if self.authorize_response is not None:
            return self.authorize_response
        return {"auth_url": self.auth_url}

    async def submit_authorization_callback(self, callback_url: str) -> None:
        await self._enter("submit_authorization_callback", callback_url)

    async def update_account_status(self, cookie_id: str, status: Status) -> None:
        await self._enter("update_account_status", cookie_id, status)

    async def delete_account(self, cookie_id: str) -> None:
        await self._enter("delete_account", cookie_id)

    async def list_account_quotas(self, cookie_id: str) -> Any:
        await self._enter("list_account_quotas", cookie_id)
        return self.quotas.get(cookie_id, [])

    async def update_quota_status(
        self, cookie_id: str, model_name: str, status: Status
    ) -> None:
        await self._enter("update_quota_status", cookie_id, model_name, status)

    async def aclose(self) -> None:
        self.closed = True


class RecordingNotifier:
    def __init__(self) -> None:
        self.notifications: list[Notification] = []

    def show(self, notification: Notification) -> None:
        self.notifications.append(notification)

    @property
    def last(self) -> Notification:
        return self.notifications[-1]


@pytest.fixture
def account_payload() -> list[dict[str, Any]]:
    return [
        {
            "cookie_id": "acc-1",
            "is_shared": 0,
            "status": 1,
            "created_at": "2024-03-01T10:00:00Z",
            "last_used_at": "2024-03-05T08:30:00Z",
        },
        {
            "cookie_id": "acc-2",
            "is_shared": 1,
            "status": 0,
            "created_at": "2024-03-02T11:00:00Z",
            "last_used_at": None,
        },
    ]


@pytest.fixture
def quota_payload() -> list[dict[str, Any]]:
    return [
        {
            "quota_id": 1,
            "model_name": "gemini-2.5-pro",
            "quota": "0.75",
            "status": 1,
            "reset_time": "2024-03-06T00:00:00Z",
        },
        {
            "quota_id": 2,
            "model_name": "claude-sonnet-4-5",
            "quota": "0.5",
            "status": 0,
            "reset_time": None,
        },
    ]


@pytest.fixture
def gateway(account_payload, quota_payload) -> FakeGateway:
    return FakeGateway(
        accounts=account_payload,
        quotas={"acc-1": quota_payload},
    )


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def gateway_error() -> GatewayError:
    return GatewayError("Gateway unavailable", status_code=503)


@pytest.fixture(autouse=True)
def reset_config_manager():
    """Drop cached settings between tests."""
    config_manager.reset()
    yield
    config_manager.reset()


@pytest.fixture
def make_gateway():
    """Factory for gateways with custom payloads."""
    return FakeGateway
