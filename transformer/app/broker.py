import asyncio
import logging
from collections import deque
from typing import Deque, Protocol

import httpx

from .errors import BrokerError
from .schemas import InboundMessage, OutboundMessage
from .settings import Settings

logger = logging.getLogger(__name__)

TYPE_HEADER = "reportType"


class Consumer(Protocol):
    async def read_message(self) -> InboundMessage: ...


class Provider(Protocol):
    async def write_message(self, message: OutboundMessage) -> None: ...


def _json_body(r: httpx.Response, action: str):
    """Decoded JSON body of a 2xx reply; an empty body decodes to None."""
    if not r.content.strip():
        return None
    try:
        return r.json()
    except ValueError as e:
        raise BrokerError(f"broker sent a non-JSON reply while {action}: {e}") from e


def _record_to_message(record: dict) -> InboundMessage:
    raw_headers = record.get("headers") or []
    if not isinstance(raw_headers, list) or not all(isinstance(h, dict) for h in raw_headers):
        raise BrokerError(f"record headers must be a list of objects, got {type(raw_headers).__name__}")
    headers = []
    for h in raw_headers:
        headers.append((str(h.get("key", "")), str(h.get("value", "")).encode("utf-8")))
    value = record.get("value") or ""
    if not isinstance(value, str):
        raise BrokerError(f"record value must be a string, got {type(value).__name__}")
    return InboundMessage(payload=value.encode("utf-8"), headers=headers)


class RestConsumer:
    """
    Reads records from a topic through the broker's REST consume endpoint.
    A poll can return several records; they are buffered and handed out one
    at a time. Offsets are auto-committed by the broker on consume.
    """

    def __init__(self, client: httpx.AsyncClient, topic: str, group: str, instance: str, poll_timeout_ms: int = 1000):
        self.client = client
        self.topic = topic
        self.group = group
        self.instance = instance
        self.poll_timeout_ms = poll_timeout_ms
        self._pending: Deque[InboundMessage] = deque()

    @classmethod
    def from_settings(cls, client: httpx.AsyncClient, cfg: Settings) -> "RestConsumer":
        return cls(client, cfg.consumer_topic, cfg.consumer_group, cfg.consumer_instance, cfg.poll_timeout_ms)

    async def _poll(self) -> list:
        url = f"/consume/{self.group}/{self.instance}/{self.topic}"
        headers = {
            "Kafka-Auto-Commit": "true",
            "Kafka-Timeout": str(self.poll_timeout_ms),
        }

        # Retry on 5xx
        delays = [0.5, 1.0, 2.0]
        for delay in [0.0] + delays:
            if delay:
                await asyncio.sleep(delay)

            try:
                r = await self.client.get(url, headers=headers)
            except httpx.HTTPError as e:
                raise BrokerError(f"failed to read message from topic {self.topic}: {e}") from e
            if 500 <= r.status_code < 600:
                logger.debug("consume returned %s, retrying", r.status_code)
                continue
            if r.is_error:
                raise BrokerError(f"failed to read message from topic {self.topic}: HTTP {r.status_code}")

            data = _json_body(r, f"reading topic {self.topic}")
            if isinstance(data, dict) and data.get("error"):
                raise BrokerError(f"failed to read message from topic {self.topic}: {data['error']}")
            if data is None:
                return []
            if not isinstance(data, list) or not all(isinstance(rec, dict) for rec in data):
                raise BrokerError(f"unexpected consume response from topic {self.topic}: {type(data).__name__}")
            return data

        raise BrokerError(f"broker unavailable while reading topic {self.topic}")

    async def read_message(self) -> InboundMessage:
        while not self._pending:
            messages = [_record_to_message(record) for record in await self._poll()]
            self._pending.extend(messages)
        return self._pending.popleft()


class RestProvider:
    """Publishes messages to a topic through the broker's REST produce endpoint."""

    def __init__(self, client: httpx.AsyncClient, topic: str):
        self.client = client
        self.topic = topic

    @classmethod
    def from_settings(cls, client: httpx.AsyncClient, cfg: Settings) -> "RestProvider":
        return cls(client, cfg.provider_topic)

    async def write_message(self, message: OutboundMessage) -> None:
        report_type = dict(message.headers).get(TYPE_HEADER, b"").decode("utf-8")
        if not report_type:
            raise BrokerError("payload type cannot be empty")
        if not message.payload:
            raise BrokerError("payload body cannot be empty")

        body = {
            "value": message.payload.decode("utf-8"),
            "headers": [{"key": k, "value": v.decode("utf-8")} for k, v in message.headers],
        }
        logger.debug("writing message type=%s topic=%s", report_type, self.topic)
        try:
            r = await self.client.post(f"/produce/{self.topic}", json=body)
        except httpx.HTTPError as e:
            raise BrokerError(f"failed to write message to topic {self.topic}: {e}") from e
        if r.is_error:
            raise BrokerError(f"failed to write message to topic {self.topic}: HTTP {r.status_code}")

        data = _json_body(r, f"writing topic {self.topic}")
        if isinstance(data, dict) and data.get("error"):
            raise BrokerError(f"failed to write message to topic {self.topic}: {data['error']}")


def make_client(cfg: Settings) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        base_url=cfg.kafka_address,
        auth=(cfg.kafka_user, cfg.kafka_password),
        timeout=cfg.http_timeout_seconds,
    )
