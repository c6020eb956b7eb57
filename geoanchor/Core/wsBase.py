"""
WebSocket Base Manager Module
==============================

Thread-safe registry of WebSocket clients with JSON broadcasting.

Request handlers run in FastAPI's threadpool (sync endpoints), so messages
produced there are scheduled onto the main event loop with
send_from_thread() instead of being awaited directly.

Lifecycle:
    1. Instantiate manager (one per endpoint type)
    2. Call set_main_loop() during application startup
    3. Call register() when a client connects
    4. Call broadcast() / send_from_thread() to push messages
    5. Call unregister() when the client disconnects (idempotent)
"""

from fastapi import WebSocket
import asyncio
from typing import List, Optional, Dict, Any
import json
import threading


class WebSocketManager:
    """
    Base WebSocket manager for handling multiple concurrent client connections.

    Attributes:
        clients: Currently active WebSocket connections
        main_loop: FastAPI's main event loop (set at startup)
        _lock: Protects the client list across threads
    """

    def __init__(self):
        self.clients: List[WebSocket] = []
        self.main_loop: Optional[asyncio.AbstractEventLoop] = None
        self._lock = threading.Lock()

    def set_main_loop(self, loop: asyncio.AbstractEventLoop):
        """
        Register the running event loop so worker threads can schedule broadcasts.
        """
        self.main_loop = loop

    async def register(self, ws: WebSocket):
        """
        Accept and register a new WebSocket client connection.

        The client is appended before accept() so no broadcast issued during
        the handshake is lost; a failed handshake unregisters it again.
        """
        with self._lock:
            if ws not in self.clients:
                self.clients.append(ws)

        try:
            await ws.accept()
            print(f"[WSBase] Client registered. Total clients: {len(self.clients)}")
        except Exception:
            self.unregister(ws)
            raise

    def unregister(self, ws: WebSocket):
        """Remove a client; safe to call more than once."""
        with self._lock:
            if ws in self.clients:
                self.clients.remove(ws)
                print(f"[WSBase] Client unregistered. Total clients: {len(self.clients)}")

    @property
    def has_clients(self) -> bool:
        with self._lock:
            return len(self.clients) > 0

    async def broadcast(self, message: Dict[str, Any]):
        """
        Send a JSON message to every connected client.

        Clients whose send fails are dropped after the loop. The lock is only
        held while copying the client list, never during I/O.
        """
        payload = json.dumps(message, default=str)

        with self._lock:
            current_clients = list(self.clients)

        dead = []
        for ws in current_clients:
            try:
                await ws.send_text(payload)
            except Exception:
                dead.append(ws)

        for ws in dead:
            self.unregister(ws)

    def send_from_thread(self, message: Dict[str, Any]):
        """
        Schedule broadcast() on the main loop from a non-async context.

        Fire and forget: the calling thread never waits for delivery.
        """
        if not self.has_clients:
            print(f"[WSBase] No clients connected. Message not sent: {message}")
            return

        if self.main_loop:
            asyncio.run_coroutine_threadsafe(
                self.broadcast(message), self.main_loop
            )

    async def handle_message(self, ws: WebSocket, message: str):
        """
        Handle an incoming client message. Subclasses override this.
        """
        print(f"[WSBase] Received message from client: {message}")
