"""Announcing new AppImage versions over MQTT."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from urllib.parse import quote_plus, urlparse

import paho.mqtt.client as paho_mqtt

MQTT_SERVER_URI = "http://broker.hivemq.com:1883"
# Every topic begins with this namespace.
MQTT_NAMESPACE = "p9q358t"
_DEFAULT_PORT = 1883
_CLIENT_ID = "pub"


@dataclass
class PubSubData:
    """The message exchanged between AppImage authoring and desktop integration tools."""

    name: str
    version: str
    fs_time: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_json(self) -> str:
        """Serialise with the field names Name, Version and FSTime."""
        return json.dumps(
            {"Name": self.name, "Version": self.version, "FSTime": self.fs_time.isoformat()}
        )

    @classmethod
    def from_json(cls, text: str) -> PubSubData:
        """Build a PubSubData from the JSON form written by to_json."""
        data = json.loads(text)
        stamp = data["FSTime"]
        if stamp.endswith("Z"):
            stamp = stamp[:-1] + "+00:00"
        return cls(data["Name"], data["Version"], datetime.fromisoformat(stamp))


def topic_for(update_information: str) -> str | None:
    """Return the version topic for *update_information*, or None if it is empty."""
    escaped = quote_plus(update_information)
    if not escaped:
        return None
    return f"{MQTT_NAMESPACE}/{escaped}/version"


def _new_client() -> paho_mqtt.Client:
    api_version = getattr(paho_mqtt, "CallbackAPIVersion", None)
    if api_version is not None:
        return paho_mqtt.Client(api_version.VERSION2, client_id=_CLIENT_ID)
    return paho_mqtt.Client(client_id=_CLIENT_ID)


def publish_mqtt_message(update_information: str, version: str) -> None:
    """Publish *version* as the retained QoS 2 message for *update_information*."""
    topic = topic_for(update_information)
    if topic is None:
        return
    uri = urlparse(MQTT_SERVER_URI)
    client = _new_client()
    if uri.username:
        client.username_pw_set(uri.username, uri.password or "")
    client.connect(uri.hostname or "localhost", uri.port or _DEFAULT_PORT)
    client.loop_start()
    try:
        print(f"Publishing version {version} for {update_information}")
        info = client.publish(topic, version, qos=2, retain=True)
        info.wait_for_publish()
    finally:
        client.loop_stop()
        client.disconnect()