"""
Registry of WebSocket clients following their own surroundings.

Every client reports its position (and optionally an alert radius); the
manager keeps the latest one as the client's watch area. When a new crime
report comes in it is announced to everybody, and clients whose watch
area contains the report additionally get a radius alert for it.
"""

import asyncio
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from types import SimpleNamespace
from typing import Dict, List, Optional, Tuple

from fastapi import WebSocket

from streetsafety.services.proximity.evaluator import (
    DEFAULT_ALERT_RADIUS_M,
    alert_to_dict,
    find_radius_alerts,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WatchArea:
    latitude: float
    longitude: float
    radius_m: float = DEFAULT_ALERT_RADIUS_M


class WebSocketManager:
    """Tracks connected clients and the area each of them is watching."""

    def __init__(self):
        self.active_connections: Dict[str, WebSocket] = {}
        self.watch_areas: Dict[str, WatchArea] = {}
        self._lock = asyncio.Lock()

    async def connect(self, websocket: WebSocket, client_id: Optional[str] = None) -> str:
        """Accept the socket and register it under a new (or given) client id."""
        await websocket.accept()

        if client_id is None:
            client_id = str(uuid.uuid4())

        async with self._lock:
            self.active_connections[client_id] = websocket

        logger.info(f"WebSocket client connected: {client_id}")
        return client_id

    async def disconnect(self, client_id: str):
        async with self._lock:
            self.active_connections.pop(client_id, None)
            self.watch_areas.pop(client_id, None)

        logger.info(f"WebSocket client disconnected: {client_id}")

    async def update_position(
        self,
        client_id: str,
        lat: float,
        lng: float,
        radius_m: float = DEFAULT_ALERT_RADIUS_M,
    ) -> WatchArea:
        """Remember where a client is, so new reports around it can be pushed."""
        area = WatchArea(lat, lng, radius_m)
        async with self._lock:
            if client_id in self.active_connections:
                self.watch_areas[client_id] = area
        return area

    async def send_personal_message(self, message: dict, client_id: str):
        websocket = self.active_connections.get(client_id)
        if websocket is None:
            logger.warning(f"Client {client_id} not found in active connections")
            return

        try:
            await websocket.send_json(message)
        except Exception as e:
            logger.error(f"Error sending message to client {client_id}: {str(e)}")
            await self.disconnect(client_id)

    async def broadcast(self, message: dict):
        """Send a message to every client; clients that fail to receive it are dropped."""
        async with self._lock:
            recipients = list(self.active_connections.items())

        failed = []
        for client_id, websocket in recipients:
            try:
                await websocket.send_json(message)
            except Exception as e:
                logger.error(f"Error broadcasting to client {client_id}: {str(e)}")
                failed.append(client_id)

        for client_id in failed:
            await self.disconnect(client_id)

    async def send_proximity_alerts(self, client_id: str, alerts: list):
        await self.send_personal_message(
            {"type": "proximity_alerts", "data": alerts, "timestamp": _now()},
            client_id,
        )

    async def broadcast_crime_reported(self, crime_data: dict):
        """
        Announce a newly submitted report.

        Every client gets a "crime_reported" message. Clients whose watch
        area contains the report also get a "new_crime_nearby" alert with
        their distance to it.

        Args:
            crime_data: JSON-ready crime report (camelCase keys, as served by the API)
        """
        await self.broadcast({"type": "crime_reported", "data": crime_data, "timestamp": _now()})

        nearby = await self._clients_near(crime_data)
        for client_id, alert in nearby:
            await self.send_personal_message(
                {"type": "new_crime_nearby", "data": alert, "timestamp": _now()},
                client_id,
            )

        logger.info(
            f"Crime report {crime_data.get('id')} announced to {len(self.active_connections)} clients, "
            f"{len(nearby)} within their alert radius"
        )

    async def _clients_near(self, crime_data: dict) -> List[Tuple[str, dict]]:
        record = SimpleNamespace(**crime_data)
        async with self._lock:
            areas = list(self.watch_areas.items())

        nearby = []
        for client_id, area in areas:
            alerts = find_radius_alerts(area.latitude, area.longitude, [record], area.radius_m)
            if alerts:
                nearby.append((client_id, alert_to_dict(alerts[0])))
        return nearby

    async def send_heartbeat(self, client_id: str):
        await self.send_personal_message({"type": "heartbeat", "timestamp": _now()}, client_id)

    async def send_error(self, client_id: str, error_message: str):
        await self.send_personal_message(
            {"type": "error", "data": {"message": error_message}, "timestamp": _now()},
            client_id,
        )


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


_manager: Optional[WebSocketManager] = None


def get_websocket_manager() -> WebSocketManager:
    """Process-wide WebSocket manager."""
    global _manager
    if _manager is None:
        _manager = WebSocketManager()
    return _manager
