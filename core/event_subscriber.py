"""
Push-channel subscription for board updates.

Listens on an MQTT topic for snapshot payloads and hands each decoded
snapshot to the asyncio loop that owns the board store. The paho network
thread never touches application state directly.
"""
import asyncio
import json
import logging
from typing import Any, Callable, Optional

import paho.mqtt.client as mqtt

from .data_models import BoardSnapshot, SnapshotError

logger = logging.getLogger(__name__)

SnapshotHandler = Callable[[BoardSnapshot], None]
ClientFactory = Callable[[], Any]


class PushSubscription:
    """
    Handle for a subscription whose setup may still be in flight.

    ``cancel()`` is synchronous and idempotent: the teardown hook runs at
    most once, whether or not the subscription has resolved yet.
    """

    def __init__(self, on_cancel: Callable[[], None]) -> None:
        self._on_cancel = on_cancel
        self._cancelled = False
        self._resolved = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def resolved(self) -> bool:
        return self._resolved

    def mark_resolved(self) -> None:
        if not self._cancelled:
            self._resolved = True

    def cancel(self) -> bool:
        """
        Detach the subscription.

        Returns:
            True if this call performed the detach, False if already cancelled
        """
        if self._cancelled:
            return False
        self._cancelled = True
        try:
            self._on_cancel()
        except Exception as exc:
            logger.error("Error while detaching push subscription: %s", exc)
        return True


class BoardEventSubscriber:
    """MQTT subscriber for the ``board-updates`` channel."""

    def __init__(
        self,
        host: str = "127.0.0.1",
        port: int = 1883,
        topic: str = "board-updates",
        *,
        transport: str = "tcp",
        keepalive: int = 60,
        client_factory: Optional[ClientFactory] = None,
    ) -> None:
        self.host = host
        self.port = port
        self.topic = topic
        self.transport = transport
        self.keepalive = keepalive
        self._client_factory = client_factory or self._default_client
        self.mqtt_client: Optional[Any] = None
        self._subscription: Optional[PushSubscription] = None
        self._handler: Optional[SnapshotHandler] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self.messages_received = 0
        self.messages_dropped = 0

    def _default_client(self) -> mqtt.Client:
        return mqtt.Client(mqtt.CallbackAPIVersion.VERSION2, transport=self.transport)

    def subscribe(self, handler: SnapshotHandler, loop: asyncio.AbstractEventLoop) -> PushSubscription:
        """
        Start listening for snapshots.

        Connection and SUBACK complete in the background; snapshots that
        arrive at any point after this call are delivered in order on ``loop``.

        Args:
            handler: Called on the loop thread with each decoded snapshot
            loop: Event loop that owns the board store

        Returns:
            Cancellable subscription handle
        """
        if self._subscription is not None and not self._subscription.cancelled:
            raise RuntimeError("BoardEventSubscriber is already subscribed")

        self._handler = handler
        self._loop = loop
        subscription = PushSubscription(self._teardown)
        self._subscription = subscription

        client = self._client_factory()
        client.on_connect = self._on_mqtt_connect
        client.on_disconnect = self._on_mqtt_disconnect
        client.on_subscribe = self._on_mqtt_subscribe
        client.on_message = self._on_mqtt_message
        self.mqtt_client = client

        logger.info("Subscribing to %s on %s:%d", self.topic, self.host, self.port)
        try:
            client.connect_async(self.host, self.port, keepalive=self.keepalive)
            client.loop_start()
        except Exception as exc:
            # paho keeps retrying once the loop runs; only setup errors land here
            logger.error("MQTT setup error: %s", exc)
        return subscription

    @property
    def subscription(self) -> Optional[PushSubscription]:
        return self._subscription

    def _teardown(self) -> None:
        client = self.mqtt_client
        self.mqtt_client = None
        self._handler = None
        if client is None:
            return
        try:
            client.disconnect()
            client.loop_stop()
        except Exception as exc:
            logger.error("Error during MQTT disconnect: %s", exc)
        logger.info("Unsubscribed from %s", self.topic)

    # ------------------------------------------------------------------
    # paho callbacks, run on the network thread
    # ------------------------------------------------------------------
    def _on_mqtt_connect(self, client, userdata, connect_flags, reason_code, properties=None):
        rc = reason_code.value if hasattr(reason_code, "value") else reason_code
        if self._subscription is None or self._subscription.cancelled:
            logger.debug("Connected after cancellation, not subscribing")
            return
        if rc != 0:
            logger.error("MQTT connection failed with code %s", rc)
            return

        result = client.subscribe(self.topic)
        if result[0] != mqtt.MQTT_ERR_SUCCESS:
            logger.error("Failed to subscribe to %s: %s", self.topic, result[0])
        else:
            logger.info("MQTT connected, subscribed to %s", self.topic)

    def _on_mqtt_subscribe(self, client, userdata, mid, reason_code_list, properties=None):
        if self._subscription is not None:
            self._subscription.mark_resolved()
        logger.debug("Subscription to %s acknowledged", self.topic)

    def _on_mqtt_disconnect(self, client, userdata, disconnect_flags, reason_code, properties=None):
        rc = reason_code.value if hasattr(reason_code, "value") else reason_code
        if rc == 0:
            logger.info("MQTT disconnected normally")
        else:
            logger.warning("MQTT disconnected unexpectedly with code %s", rc)

    def _on_mqtt_message(self, client, userdata, message, properties=None):
        subscription = self._subscription
        if subscription is None or subscription.cancelled:
            return

        if not message.payload:
            return
        logger.debug("MQTT %s: %s", message.topic, message.payload)

        try:
            snapshot = BoardSnapshot.from_wire(json.loads(message.payload.decode("utf-8")))
        except (UnicodeDecodeError, json.JSONDecodeError, SnapshotError) as exc:
            self.messages_dropped += 1
            logger.error("Dropping undecodable board update: %s", exc)
            return

        self.messages_received += 1
        loop = self._loop
        if loop is None or loop.is_closed():
            return
        try:
            loop.call_soon_threadsafe(self._deliver, snapshot)
        except RuntimeError:
            # loop closed after the check above
            logger.debug("Event loop closed, dropping board update")

    def _deliver(self, snapshot: BoardSnapshot) -> None:
        subscription = self._subscription
        handler = self._handler
        if subscription is None or subscription.cancelled or handler is None:
            logger.debug("Subscription cancelled, dropping board update")
            return
        handler(snapshot)
