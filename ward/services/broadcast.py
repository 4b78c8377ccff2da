from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.db import transaction
from django.utils import timezone

GROUP = "ward"


def _send(event: dict) -> None:
    channel_layer = get_channel_layer()
    if channel_layer is not None:
        async_to_sync(channel_layer.group_send)(GROUP, event)


def publish_change(kind: str, obj_id) -> None:
    """Tell connected dashboards to re-read ``kind`` once the current transaction commits."""
    event = {"type": "ward.changed", "kind": kind, "id": obj_id, "ts": timezone.now().isoformat()}
    transaction.on_commit(lambda: _send(event))
