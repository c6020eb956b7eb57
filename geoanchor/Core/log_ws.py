"""
Log WebSocket Management Module
================================

Real-time log streaming over the /logs WebSocket.

Anchoring decisions, degraded collaborators and persistence failures are
pushed here so operators can watch the event stream live. A degraded
collaborator is always reported with msg_type "warning": the decision core
fails open on purpose, and this stream is where such outages become visible.

Message Format:
--------------
    {
        "msg_type": "log" | "error" | "warning",
        "message": "The log message content"
    }

Usage Example:
-------------
    from geoanchor.Core import log_ws

    log_ws.log_from_thread("[ANCHOR] GABC...: 1 event(s) surfaced", "log")
    log_ws.log_from_thread("[ANCHOR] ledger unavailable, filtering skipped", "warning")
"""

from typing import Dict, Any
from fastapi import WebSocket
from .wsBase import WebSocketManager


def log_from_thread(message: str, msg_type: str = "log"):
    """
    Thread-safe entry point for broadcasting log messages to all connected clients.

    Args:
        message: The log message content to broadcast
        msg_type: "log" (default), "warning" or "error"

    Behavior:
        - If clients are connected: message is queued for broadcast
        - If no clients connected: message is printed to the console only
    """
    if log_ws_manager.has_clients:
        payload: Dict[str, Any] = {"msg_type": msg_type, "message": str(message)}
        log_ws_manager.send_from_thread(payload)
    else:
        print(f"[LOG-BROADCAST] ({msg_type}) {message}")


class LogWebSocketManager(WebSocketManager):
    """
    WebSocket manager for the /logs endpoint.

    Clients only listen; anything they send is echoed to the console.
    """

    async def handle_message(self, ws: WebSocket, message: str):
        print(f"[LOG-WS] Received message from client: {message}")


# ============================================================
# GLOBAL LOG WEBSOCKET MANAGER INSTANCE
# ============================================================
log_ws_manager = LogWebSocketManager()
