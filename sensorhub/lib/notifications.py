"""Alert notifications through a messaging gateway.

Provides an abstract gateway interface with a Fonnte (WhatsApp) backend and
a no-op backend used when notifications are disabled, plus the dispatcher
that resolves the destination and delivers a batch of alert texts.

Delivery is best-effort: alerts are sent one by one, in order, and a failed
send is logged and reported as a Failed outcome without retry.
"""

import asyncio
import http.client
import json
import urllib.error
import urllib.request
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, override

from sensorhub.lib.config import GatewaySettings
from sensorhub.lib.exceptions import DispatchError, GatewayResolutionError
from sensorhub.logging import get_logger

logger = get_logger("lib.notifications")


@dataclass(frozen=True, slots=True)
class AlertMessage:
    """A single alert text addressed to a gateway destination."""

    text: str
    destination: str


@dataclass(frozen=True, slots=True)
class Sent:
    message: AlertMessage


@dataclass(frozen=True, slots=True)
class Failed:
    message: AlertMessage
    reason: str


type DispatchOutcome = Sent | Failed


class AbstractGateway(ABC):
    """Abstract base class for messaging gateway backends."""

    @abstractmethod
    async def resolve_destination(self) -> str | None:
        """Return the current destination identifier, or None if unset.

        Raises:
            GatewayResolutionError: If the lookup itself failed.
        """

    @abstractmethod
    async def send(self, message: AlertMessage) -> None:
        """Send one message.

        Raises:
            DispatchError: If the gateway did not accept the message.
        """


class FonnteGateway(AbstractGateway):
    """Fonnte WhatsApp gateway backend."""

    def __init__(self, settings: GatewaySettings) -> None:
        self._settings = settings

    def _post(self, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        """POST a JSON payload and return the decoded JSON response.

        Raises:
            OSError: On network errors (URLError and HTTPError included).
            http.client.HTTPException: On a truncated or garbled HTTP response.
            ValueError: If the response is not a JSON object or reports failure.
        """
        url = f"{self._settings.api_url}/{path}"
        req = urllib.request.Request(
            url,
            data=json.dumps(payload).encode("utf-8"),
            headers={
                "Content-Type": "application/json",
                "Authorization": self._settings.token.get_secret_value(),
            },
            method="POST",
        )
        with urllib.request.urlopen(req, timeout=self._settings.timeout_sec) as resp:
            body = json.loads(resp.read().decode("utf-8"))
        if not isinstance(body, dict):
            raise ValueError(f"Unexpected response from {path}: {body!r}")
        if body.get("status") is False:
            raise ValueError(body.get("reason") or f"{path} rejected the request")
        return body

    @override
    async def resolve_destination(self) -> str | None:
        """Return the configured target, or look up the group by name."""
        if self._settings.target:
            return self._settings.target
        if not self._settings.group_name:
            return None

        try:
            body = await asyncio.to_thread(self._post, "get-whatsapp-group", {})
        except (OSError, ValueError, http.client.HTTPException) as e:
            raise GatewayResolutionError(f"Group lookup failed: {e}") from e

        groups = body.get("data") or []
        for group in groups:
            if isinstance(group, dict) and group.get("name") == self._settings.group_name:
                return group.get("id") or None

        logger.warning(
            "Group %r not found among %d gateway groups",
            self._settings.group_name,
            len(groups),
        )
        return None

    @override
    async def send(self, message: AlertMessage) -> None:
        """Send the alert text to the destination."""
        payload = {"target": message.destination, "message": message.text}
        try:
            body = await asyncio.to_thread(self._post, "send", payload)
        except (OSError, ValueError, http.client.HTTPException) as e:
            raise DispatchError(str(e)) from e
        logger.info("Gateway accepted alert for %s: %s", message.destination, body)


class NoOpGateway(AbstractGateway):
    """No-op gateway that logs but doesn't send notifications."""

    @override
    async def resolve_destination(self) -> str | None:
        logger.info("Notifications disabled, no destination to resolve")
        return None

    @override
    async def send(self, message: AlertMessage) -> None:
        logger.info("Notifications disabled, skipping alert: %s", message.text)


def get_gateway(settings: GatewaySettings) -> AbstractGateway:
    """Factory function to get the configured gateway."""
    if not settings.enabled:
        return NoOpGateway()
    return FonnteGateway(settings)


class AlertDispatcher:
    """Delivers alert texts to the destination resolved from the gateway."""

    def __init__(self, gateway: AbstractGateway) -> None:
        self._gateway = gateway

    async def resolve_destination(self) -> str | None:
        """Resolve the destination, returning None if it is unavailable."""
        try:
            destination = await self._gateway.resolve_destination()
        except GatewayResolutionError as e:
            logger.error("Could not resolve alert destination: %s", e)
            return None
        return destination or None

    async def dispatch_all(
        self, alerts: Sequence[str], destination: str
    ) -> list[DispatchOutcome]:
        """Send each alert in order, continuing past individual failures."""
        outcomes: list[DispatchOutcome] = []
        for text in alerts:
            message = AlertMessage(text=text, destination=destination)
            logger.info("Sending alert to %s: %s", destination, text)
            try:
                await self._gateway.send(message)
            except DispatchError as e:
                logger.error("Failed to send alert to %s: %s", destination, e)
                outcomes.append(Failed(message, str(e)))
            except Exception as e:
                logger.exception("Unexpected error sending alert to %s", destination)
                outcomes.append(Failed(message, str(e)))
            else:
                outcomes.append(Sent(message))
        return outcomes

    async def notify(self, alerts: Sequence[str]) -> list[DispatchOutcome]:
        """Resolve the destination and dispatch the alerts to it."""
        if not alerts:
            logger.debug("No alerts to send")
            return []

        destination = await self.resolve_destination()
        if destination is None:
            logger.warning(
                "No alert destination available, skipping %d alert(s)",
                len(alerts),
            )
            return []

        outcomes = await self.dispatch_all(alerts, destination)
        failed = sum(isinstance(o, Failed) for o in outcomes)
        if failed:
            logger.warning("%d of %d alert(s) failed to send", failed, len(outcomes))
        return outcomes
