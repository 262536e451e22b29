"""
MQTT Client Wrapper for the Smart Parking Allotment engine

This module provides the MQTT connection used to announce slot assignments,
releases and analytics to dashboards and gate displays.
"""

import json
import logging
from typing import Any, Callable, Dict, List
import paho.mqtt.client as mqtt
from datetime import datetime

logger = logging.getLogger(__name__)


class MQTTClient:
    """
    MQTT client for the parking facility: publishes events and lets
    dashboards or gate controllers subscribe to slot topics.

    The network loop runs in paho's background thread once started.
    """

    def __init__(self, broker: str = "localhost", port: int = 1883, client_id: str = None,
                 on_message_callback: Callable[[str, Any], None] = None):
        """
        Initialize MQTT client.

        Args:
            broker: MQTT broker hostname
            port: MQTT broker port
            client_id: Unique client identifier
            on_message_callback: Fallback for messages no subscription callback claims
        """
        self.broker = broker
        self.port = port
        self.client_id = client_id or f"parking_allotment_{datetime.now().timestamp()}"

        self.client = mqtt.Client(
            mqtt.CallbackAPIVersion.VERSION2,
            client_id=self.client_id,
            protocol=mqtt.MQTTv311
        )
        self.client.on_connect = self._on_connect
        self.client.on_disconnect = self._on_disconnect
        self.client.on_message = self._on_message

        self._topic_callbacks: Dict[str, Callable[[str, Any], None]] = {}
        self._user_on_message = on_message_callback
        self._pending: List[mqtt.MQTTMessageInfo] = []
        self._connected = False

        logger.info(f"MQTT Client initialized with ID: {self.client_id}")

    def _on_connect(self, client, userdata, flags, reason_code, properties=None):
        self._connected = not reason_code.is_failure
        if self._connected:
            logger.info(f"Connected to MQTT broker at {self.broker}:{self.port}")

            # Re-subscribe to topics after reconnection
            for topic in self._topic_callbacks.keys():
                self.client.subscribe(topic)
                logger.debug(f"Re-subscribed to topic: {topic}")
        else:
            logger.error(f"Connection failed: {reason_code}")

    def _on_disconnect(self, client, userdata, flags, reason_code, properties=None):
        self._connected = False
        if reason_code.is_failure:
            logger.warning(f"Unexpected disconnection from MQTT broker ({reason_code})")
        else:
            logger.info("Disconnected from MQTT broker")

    def _on_message(self, client, userdata, msg):
        topic = msg.topic
        try:
            payload = json.loads(msg.payload.decode('utf-8'))
        except ValueError:
            payload = msg.payload.decode('utf-8', errors='replace')

        logger.debug(f"Received message on topic '{topic}': {payload}")

        for subscribed_topic, callback in self._topic_callbacks.items():
            if mqtt.topic_matches_sub(subscribed_topic, topic):
                callback(topic, payload)
                return

        if self._user_on_message:
            self._user_on_message(topic, payload)

    def connect(self) -> bool:
        """
        Connect to the MQTT broker.

        Returns:
            True if connection initiated successfully, False otherwise
        """
        try:
            logger.info(f"Connecting to MQTT broker at {self.broker}:{self.port}...")
            self.client.connect(self.broker, self.port, keepalive=60)
            return True
        except OSError as e:
            logger.error(f"Failed to connect to MQTT broker: {e}")
            return False

    def disconnect(self):
        self.client.disconnect()
        self._connected = False

    def start(self):
        """Start the network loop in a background thread"""
        self.client.loop_start()

    def stop(self):
        self.client.loop_stop()

    def subscribe(self, topic: str, callback: Callable[[str, Any], None] = None, qos: int = 1) -> bool:
        """
        Subscribe to an MQTT topic.

        Subscriptions are remembered and renewed on every reconnect.

        Args:
            topic: Topic pattern to subscribe to (supports wildcards)
            callback: Called with (topic, payload) for matching messages
            qos: Quality of Service level (0, 1, or 2)
        """
        if callback:
            self._topic_callbacks[topic] = callback

        result, mid = self.client.subscribe(topic, qos)
        if result == mqtt.MQTT_ERR_SUCCESS:
            logger.info(f"Subscribed to topic: {topic}")
            return True
        logger.error(f"Failed to subscribe to topic: {topic}")
        return False

    def unsubscribe(self, topic: str):
        self._topic_callbacks.pop(topic, None)
        self.client.unsubscribe(topic)
        logger.info(f"Unsubscribed from topic: {topic}")

    def publish(self, topic: str, payload: Any, qos: int = 1, retain: bool = False) -> bool:
        """
        Publish a message.

        Args:
            topic: Topic to publish to
            payload: Message payload, JSON encoded if dict/list
            qos: Quality of Service level
            retain: Whether the broker keeps the message for new subscribers

        Returns:
            True if paho queued the message
        """
        message = json.dumps(payload) if isinstance(payload, (dict, list)) else str(payload)
        result = self.client.publish(topic, message, qos=qos, retain=retain)

        if result.rc == mqtt.MQTT_ERR_SUCCESS:
            logger.debug(f"Published to '{topic}': {message[:100]}")
            if qos > 0:
                self._pending.append(result)
            return True
        logger.error(f"Failed to publish to '{topic}': rc={result.rc}")
        return False

    def flush(self, timeout: float = 5.0) -> int:
        """
        Wait for queued QoS 1/2 messages to be acknowledged by the broker.

        Call before stopping the network loop, which would otherwise drop
        anything still in flight.

        Args:
            timeout: Seconds to wait for each pending message

        Returns:
            Number of messages still unacknowledged
        """
        unacked = 0
        for info in self._pending:
            try:
                info.wait_for_publish(timeout)
            except (RuntimeError, ValueError) as e:
                logger.warning(f"Message {info.mid} was not delivered: {e}")
                unacked += 1
                continue
            if not info.is_published():
                unacked += 1
        self._pending.clear()
        if unacked:
            logger.warning(f"{unacked} MQTT message(s) unacknowledged after {timeout}s")
        return unacked

    @property
    def is_connected(self) -> bool:
        return self._connected


class ParkingMQTTTopics:
    """
    Centralized definition of MQTT topics used by the parking facility.
    """

    SLOT_STATUS = "parking/{facility_id}/slots/{slot_id}/status"
    EVENTS = "parking/{facility_id}/events"
    ANALYTICS = "parking/{facility_id}/analytics"

    @classmethod
    def get_slot_topic(cls, facility_id: str, slot_id: int) -> str:
        return cls.SLOT_STATUS.format(facility_id=facility_id, slot_id=slot_id)

    @classmethod
    def get_events_topic(cls, facility_id: str) -> str:
        return cls.EVENTS.format(facility_id=facility_id)

    @classmethod
    def get_analytics_topic(cls, facility_id: str) -> str:
        return cls.ANALYTICS.format(facility_id=facility_id)

    @classmethod
    def get_all_slots_topic(cls, facility_id: str) -> str:
        """Wildcard topic matching every slot's status"""
        return f"parking/{facility_id}/slots/+/status"
