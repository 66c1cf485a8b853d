"""Real-time WebSocket endpoint for proximity alerts."""

import asyncio
import logging

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect
from sqlalchemy.orm import Session

from streetsafety.core.config import get_settings
from streetsafety.db.session import get_db
from streetsafety.services.crimes.store import CrimeStore
from streetsafety.services.proximity.evaluator import alert_to_dict, find_radius_alerts
from streetsafety.services.realtime.websocket_manager import get_websocket_manager

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/realtime", tags=["Realtime"])
settings = get_settings()


@router.websocket("/alerts")
async def websocket_proximity_alerts(websocket: WebSocket, db: Session = Depends(get_db)):
    """
    WebSocket endpoint for radius alerts around a moving user.

    The client sends {"lat": ..., "lng": ...} whenever its position
    changes and gets back the reports within the alert radius. New
    submissions are pushed to everyone, with an extra alert for clients
    whose last position is within radius of them; heartbeats are periodic.
    """
    if not settings.realtime_enabled:
        await websocket.close(code=1003, reason="Real-time updates disabled")
        return

    websocket_manager = get_websocket_manager()
    client_id = await websocket_manager.connect(websocket)

    heartbeat_task = asyncio.create_task(
        _heartbeat_loop(websocket_manager, client_id, settings.websocket_heartbeat_interval)
    )

    try:
        while True:
            message = await websocket.receive_json()
            try:
                lat = float(message["lat"])
                lng = float(message["lng"])
                radius_m = float(message.get("radius_m") or settings.proximity_alert_radius_m)
            except (KeyError, TypeError, ValueError):
                await websocket_manager.send_error(client_id, "Expected a message like {\"lat\": 0.0, \"lng\": 0.0}")
                continue

            await websocket_manager.update_position(client_id, lat, lng, radius_m)
            crimes = CrimeStore(db).list_all()
            alerts = find_radius_alerts(lat, lng, crimes, radius_m)
            await websocket_manager.send_proximity_alerts(
                client_id,
                [_jsonable(alert_to_dict(alert)) for alert in alerts],
            )
    except WebSocketDisconnect:
        logger.info(f"Client {client_id} disconnected")
    except Exception as e:
        logger.error(f"WebSocket error for client {client_id}: {str(e)}", exc_info=True)
        await websocket_manager.send_error(client_id, f"Server error: {str(e)}")
    finally:
        heartbeat_task.cancel()
        try:
            await heartbeat_task
        except asyncio.CancelledError:
            pass
        await websocket_manager.disconnect(client_id)


def _jsonable(alert: dict) -> dict:
    alert["crime_id"] = str(alert["crime_id"])
    return alert


async def _heartbeat_loop(websocket_manager, client_id: str, interval: int):
    """
    Send periodic heartbeat messages to a client.

    Args:
        websocket_manager: WebSocket manager instance
        client_id: Client ID
        interval: Heartbeat interval in seconds
    """
    try:
        while True:
            await asyncio.sleep(interval)
            await websocket_manager.send_heartbeat(client_id)
    except asyncio.CancelledError:
        logger.debug(f"Heartbeat loop cancelled for client {client_id}")
