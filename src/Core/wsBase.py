"""
WebSocket Base Manager Module
==============================

Thread-safe foundation for WebSocket connection management.

FastAPI runs the synchronous control and ingest endpoints in a thread pool,
so events produced there cannot await a WebSocket directly. The manager
keeps a reference to the main event loop and schedules broadcasts on it
with asyncio.run_coroutine_threadsafe().

Lifecycle:
    1. Instantiate manager (module-level singleton)
    2. set_main_loop() during application startup
    3. register() when a client connects
    4. broadcast() / send_from_thread() to publish
    5. unregister() when the client disconnects (automatic on send error)
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
        clients (List[WebSocket]): Currently active WebSocket connections
        main_loop (Optional[asyncio.AbstractEventLoop]): FastAPI's main event loop
        _lock (threading.Lock): Protects the client list across threads
    """

    def __init__(self):
        self.clients: List[WebSocket] = []
        self.main_loop: Optional[asyncio.AbstractEventLoop] = None
        self._lock = threading.Lock()

    def set_main_loop(self, loop: asyncio.AbstractEventLoop):
        """Register FastAPI's running loop; required for send_from_thread()."""
        self.main_loop = loop

    async def register(self, ws: WebSocket):
        """
        Accept and register a new WebSocket client connection.

        The client is added before accept() so no message published during
        the handshake is lost. A failed handshake unregisters it again.
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
        """Remove a client from the active list. Idempotent."""
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

        The client list is snapshotted under the lock and released before any
        I/O. Clients whose send fails are unregistered afterwards.
        """
        to_remove = []

        with self._lock:
            current_clients = list(self.clients)

        for ws in current_clients:
            try:
                await ws.send_text(json.dumps(message, default=str))
            except Exception:
                to_remove.append(ws)

        for ws in to_remove:
            self.unregister(ws)

    def send_from_thread(self, message: Dict[str, Any]):
        """
        Schedule a broadcast from a non-async context (fire and forget).

        Does nothing when no client is connected or the main loop has not
        been registered yet (e.g. before lifespan startup, or in tests).
        """
        if not self.has_clients:
            return

        if self.main_loop and self.main_loop.is_running():
            asyncio.run_coroutine_threadsafe(
                self.broadcast(message), self.main_loop
            )

    async def handle_message(self, ws: WebSocket, message: str):
        """Template hook for incoming client messages. Subclasses override."""
        print(f"[WSBase] Received message: {message}")
