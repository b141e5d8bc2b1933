"""
Log WebSocket Management Module
================================

Real-time operational log streaming for the lighting dashboard.

Every console log line produced through log_from_thread() is printed and,
when monitoring clients are connected to ``/logs/stream``, broadcast to them.
Device state transitions are additionally published as structured messages
so the dashboard can update a lamp tile without polling.

Message Format:
--------------
Log lines:
    {"msg_type": "log" | "error" | "warning", "message": "..."}

Transitions:
    {
        "msg_type": "transition",
        "device_id": "LAMP-001",
        "action": "ON" | "OFF" | "MODE_CHANGE",
        "mode": "AUTO" | "MANUAL",
        "actor": "operator-7" | null,
        "details": "Auto control: light intensity 350 > threshold 300",
        "timestamp": "2026-10-17T10:30:00+00:00"
    }

Usage Example:
-------------
    from src.Core import log_ws

    log_ws.log_from_thread("[INGEST] Device 'LAMP-001' reading stored")
    log_ws.log_from_thread("[DB] Commit failed", "error")
"""

from typing import Dict, Any, Optional
from datetime import datetime
from fastapi import WebSocket
from .wsBase import WebSocketManager


def log_from_thread(message: str, msg_type: str = "log"):
    """
    Print a log line and forward it to connected monitoring clients.

    Safe to call from the request thread pool; the broadcast is scheduled
    on the main event loop by the manager.

    Args:
        message: Log line, conventionally prefixed with a [TAG]
        msg_type: "log", "warning" or "error"
    """
    print(message)

    if log_ws_manager.has_clients:
        payload: Dict[str, Any] = {"msg_type": msg_type, "message": str(message)}
        log_ws_manager.send_from_thread(payload)


def publish_transition(
    device_id: str,
    action: str,
    mode: str,
    actor: Optional[str],
    details: str,
    timestamp: Optional[datetime],
):
    """
    Publish a committed device transition to monitoring clients.

    Must only be called after the transaction holding the transition has
    been committed, so subscribers never see a rolled-back change.
    """
    if not log_ws_manager.has_clients:
        return

    log_ws_manager.send_from_thread({
        "msg_type": "transition",
        "device_id": device_id,
        "action": action,
        "mode": mode,
        "actor": actor,
        "details": details,
        "timestamp": timestamp.isoformat() if timestamp else None,
    })


class LogWebSocketManager(WebSocketManager):
    """WebSocket manager for the operational log and transition stream."""

    async def handle_message(self, ws: WebSocket, message: str):
        # Clients only listen; "ping" is answered so browsers can keep the
        # connection alive through idle proxies.
        if message.strip().lower() == "ping":
            await ws.send_text('{"msg_type": "pong"}')


# ============================================================
# GLOBAL LOG WEBSOCKET MANAGER INSTANCE
# ============================================================
log_ws_manager = LogWebSocketManager()
