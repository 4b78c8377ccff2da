import json
from channels.generic.websocket import AsyncWebsocketConsumer

from ward.services.broadcast import GROUP


class WardUpdatesConsumer(AsyncWebsocketConsumer):

    async def connect(self):
        user = self.scope.get("user")
        if not (user and user.is_authenticated):
            await self.close()
            return
        await self.channel_layer.group_add(GROUP, self.channel_name)
        await self.accept()
        await self.send(json.dumps({"type": "welcome", "message": "connected"}))

    async def disconnect(self, close_code):
        await self.channel_layer.group_discard(GROUP, self.channel_name)

    async def ward_changed(self, event):
        # event: {"type": "ward.changed", "kind": "patient"|"room"|..., "id": ..., "ts": "..."}
        await self.send(json.dumps(event))
