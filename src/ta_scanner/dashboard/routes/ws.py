"""WebSocket hub broadcasting scan events to dashboard clients as JSON."""

from __future__ import annotations

import json

import structlog
from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from ta_scanner.dashboard.serializers import to_jsonable
from ta_scanner.market_data.models import ScanEvent

log = structlog.get_logger(__name__)

router = APIRouter()


class DashboardHub:
    """Manages WebSocket connections and broadcasts messages to all clients."""

    def __init__(self) -> None:
        self.connections: list[WebSocket] = []

    async def connect(self, ws: WebSocket) -> None:
        """Accept a WebSocket connection and add it to the active connections list."""
        await ws.accept()
        self.connections.append(ws)
        log.info("dashboard_ws_connected", total=len(self.connections))

    def disconnect(self, ws: WebSocket) -> None:
        if ws in self.connections:
            self.connections.remove(ws)
        log.info("dashboard_ws_disconnected", total=len(self.connections))

    async def broadcast(self, message: str) -> None:
        """Send a text message to all connected clients, dropping broken connections."""
        for ws in self.connections.copy():
            try:
                await ws.send_text(message)
            except Exception:
                self.connections.remove(ws)
                log.warning("dashboard_ws_broadcast_error", remaining=len(self.connections))

    async def publish_scan_event(self, event: ScanEvent) -> None:
        """Scanner listener: forward a ScanEvent to every client."""
        if not self.connections:
            return
        await self.broadcast(json.dumps(to_jsonable(event)))


@router.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket) -> None:
    """WebSocket endpoint for live scan events."""
    ws_hub: DashboardHub = websocket.app.state.hub
    await ws_hub.connect(websocket)
    try:
        while True:
            # Consume messages to keep connection alive
            await websocket.receive_text()
    except WebSocketDisconnect:
        ws_hub.disconnect(websocket)
