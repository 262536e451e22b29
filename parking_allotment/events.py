"""
Event notifications for the parking facility.

Publishes slot status, parking events and analytics over MQTT after each
successful mutation. Notification failures are logged and never undo or
block the mutation that triggered them.
"""

import logging
from datetime import datetime
from typing import Any, Dict

from .analytics import AnalyticsSummary
from .models import HistoryRecord, Slot
from .mqtt_client import MQTTClient, ParkingMQTTTopics

logger = logging.getLogger(__name__)


class ParkingEventPublisher:
    """Announces facility changes on MQTT topics"""

    def __init__(self, mqtt_client: MQTTClient, facility_id: str = "main"):
        self.mqtt_client = mqtt_client
        self.facility_id = facility_id

    def _publish(self, topic: str, payload: Dict[str, Any], retain: bool = False):
        try:
            self.mqtt_client.publish(topic, payload, retain=retain)
        except Exception as e:
            logger.error(f"Failed to publish parking event to '{topic}': {e}")

    def _event(self, event: str, **details) -> Dict[str, Any]:
        return {
            "event": event,
            "facility_id": self.facility_id,
            "timestamp": datetime.now().isoformat(),
            **details
        }

    def publish_slot_status(self, slot: Slot):
        """Retained status of one slot"""
        topic = ParkingMQTTTopics.get_slot_topic(self.facility_id, slot.id)
        self._publish(topic, slot.to_dict(), retain=True)

    def vehicle_parked(self, slot: Slot):
        self.publish_slot_status(slot)
        self._publish(
            ParkingMQTTTopics.get_events_topic(self.facility_id),
            self._event(
                "vehicle_parked",
                slot_id=slot.id,
                vehicle=slot.to_dict()["vehicle"],
                entry_time=slot.session.entry_time
            )
        )

    def vehicle_released(self, slot: Slot, record: HistoryRecord):
        self.publish_slot_status(slot)
        self._publish(
            ParkingMQTTTopics.get_events_topic(self.facility_id),
            self._event("vehicle_released", record=record.to_dict())
        )

    def facility_reset(self, total_slots: int):
        self._publish(
            ParkingMQTTTopics.get_events_topic(self.facility_id),
            self._event("facility_reset", total_slots=total_slots)
        )

    def analytics(self, summary: AnalyticsSummary):
        self._publish(
            ParkingMQTTTopics.get_analytics_topic(self.facility_id),
            summary.to_dict(),
            retain=True
        )
