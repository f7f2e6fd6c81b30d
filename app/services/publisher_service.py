# app/services/publisher_service.py
import asyncio
import json
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Optional

import aio_pika
from aio_pika.abc import AbstractExchange, AbstractRobustConnection
from aio_pika.exceptions import AMQPError

from app.schemas.notification import Capability, NotificationMessage

logger = logging.getLogger("tasktrack.publisher")

NOTIFICATION_TAG = "tasktrack-reminder"


class NotificationSink(ABC):
    """
    Contratto in due passi: prima si controlla la capability, poi si emette.

    Il permesso parte "non concesso" e passa a GRANTED o DENIED solo con
    request_permission(); un DENIED non viene più richiesto.
    """

    def __init__(self, enabled: bool = False):
        self.enabled = enabled
        self._permission: Optional[Capability] = None

    @property
    def supported(self) -> bool:
        return True

    @property
    def requested(self) -> bool:
        return self._permission is not None

    def probe(self) -> Capability:
        if not self.supported:
            return Capability.UNSUPPORTED
        return self._permission or Capability.DENIED

    async def request_permission(self) -> Capability:
        if not self.supported:
            logger.info("Notifiche non supportate da questo sink")
            return Capability.UNSUPPORTED
        if self._permission in (Capability.GRANTED, Capability.DENIED):
            return self._permission
        self._permission = Capability.GRANTED if self.enabled else Capability.DENIED
        return self._permission

    def _message(self, title: str, body: str) -> NotificationMessage:
        return NotificationMessage(
            tag=NOTIFICATION_TAG,
            title=title,
            body=body,
            requireInteraction=True,
            sentAt=datetime.now(timezone.utc),
        )

    @abstractmethod
    async def notify(self, title: str, body: str) -> Optional[NotificationMessage]:
        raise NotImplementedError

    async def close(self) -> None:
        return None


class LogNotificationSink(NotificationSink):
    """Sink di ripiego quando il broker non è configurato: scrive solo nei log."""

    async def notify(self, title: str, body: str) -> Optional[NotificationMessage]:
        if self.probe() is not Capability.GRANTED:
            return None
        message = self._message(title, body)
        logger.info("[%s] %s :: %s", message.tag, title, body)
        return message


class ReminderPublisher(NotificationSink):
    def __init__(
        self,
        rabbitmq_url: str,
        exchange: str,
        routing_key: str,
        heartbeat: int = 30,
        enabled: bool = False,
    ):
        super().__init__(enabled=enabled)
        self.rabbitmq_url = rabbitmq_url
        self.exchange_name = exchange
        self.routing_key = routing_key
        self.heartbeat = heartbeat
        self._connection: Optional[AbstractRobustConnection] = None
        self._exchange: Optional[AbstractExchange] = None

    @property
    def supported(self) -> bool:
        return self._exchange is not None and self._connection is not None and not self._connection.is_closed

    async def connect(self, max_retries: int = 10, delay: float = 5) -> None:
        last_error: Optional[Exception] = None
        for attempt in range(1, max_retries + 1):
            try:
                self._connection = await aio_pika.connect_robust(
                    self.rabbitmq_url, heartbeat=self.heartbeat
                )
                channel = await self._connection.channel()
                self._exchange = await channel.declare_exchange(
                    self.exchange_name, aio_pika.ExchangeType.TOPIC, durable=True
                )
                logger.info("Connesso a RabbitMQ, exchange=%s", self.exchange_name)
                return
            except (AMQPError, OSError) as e:
                last_error = e
                logger.warning("Connessione RabbitMQ fallita (tentativo %d/%d): %s", attempt, max_retries, e)
                await asyncio.sleep(delay)
        # niente broker: il sink risulta "unsupported" e il reminder viene saltato
        logger.error("RabbitMQ non raggiungibile dopo %d tentativi: %s", max_retries, last_error)

    async def notify(self, title: str, body: str) -> Optional[NotificationMessage]:
        if self.probe() is not Capability.GRANTED:
            return None
        message = self._message(title, body)
        payload = json.dumps(message.model_dump(mode="json")).encode("utf-8")
        await self._exchange.publish(
            aio_pika.Message(
                body=payload,
                content_type="application/json",
                delivery_mode=aio_pika.DeliveryMode.PERSISTENT,
            ),
            routing_key=self.routing_key,
        )
        logger.debug("Reminder pubblicato su %s: %s", self.routing_key, body)
        return message

    async def close(self) -> None:
        if self._connection is not None and not self._connection.is_closed:
            await self._connection.close()
        self._connection = None
        self._exchange = None
