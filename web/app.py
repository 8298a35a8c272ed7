"""
FastAPI web application for the grid capture game.

Exposes one WebSocket endpoint (/ws) over which every browser shares a single
live game, a small REST surface for inspecting and resetting it, and the
browser client as static files.

Architecture notes:
- Async handlers only: every route that touches the game is a coroutine, so
  all engine access happens on the event loop and is serialized by it. A sync
  handler would run in FastAPI's thread pool and race with the WebSocket loop.
- Explicit ownership: create_app() builds the SessionCoordinator and keeps it
  on app.state. Nothing reaches the game through module globals, and tests get
  a fresh game per app.
- Per-connection writer: outbound messages go onto an unbounded queue drained
  by a task owned by that connection. Broadcasting only enqueues, so one slow
  browser never holds up the others.
- Static files mounted LAST: route registration is first-match, so the API
  and WebSocket routes must be registered before the StaticFiles mount.
"""

import asyncio
import contextlib
import logging
import os
from pathlib import Path
from typing import Any

from fastapi import FastAPI, Request, WebSocket, WebSocketDisconnect
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles
from fastapi.websockets import WebSocketState

from web.session import SessionCoordinator

# ---------------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------------

logging.basicConfig(level=logging.INFO)
_log = logging.getLogger(__name__)

# Absolute path resolved at import time: immune to working-directory changes.
_STATIC_DIR = Path(__file__).parent / "static"


# ---------------------------------------------------------------------------
# WebSocket connection
# ---------------------------------------------------------------------------


class WebSocketConnection:
    """
    Coordinator-facing wrapper around one accepted WebSocket.

    send_nowait() never blocks: it appends to an unbounded queue that run_writer()
    drains in its own task. Once a send fails the connection is marked closed
    and the coordinator stops broadcasting to it.
    """

    def __init__(self, websocket: WebSocket) -> None:
        self._websocket = websocket
        self._outbox: asyncio.Queue[dict] = asyncio.Queue()
        self._closed = False

    @property
    def is_open(self) -> bool:
        return (
            not self._closed
            and self._websocket.client_state == WebSocketState.CONNECTED
            and self._websocket.application_state == WebSocketState.CONNECTED
        )

    def send_nowait(self, message: dict) -> None:
        self._outbox.put_nowait(message)

    def close(self) -> None:
        self._closed = True

    async def run_writer(self) -> None:
        while True:
            message = await self._outbox.get()
            try:
                await self._websocket.send_json(message)
            except Exception as exc:
                _log.info("Stopping writer after failed send: %r", exc)
                self._closed = True
                return


# ---------------------------------------------------------------------------
# Application factory
# ---------------------------------------------------------------------------


def create_app(coordinator: SessionCoordinator | None = None) -> FastAPI:
    """
    Build the web app around one game session.

    Args:
        coordinator: Session to serve. A new game is created when omitted.

    Returns:
        A FastAPI app with the coordinator available as app.state.coordinator.
    """
    app = FastAPI(title="Grid Capture", version="1.0.0")
    app.state.coordinator = coordinator if coordinator is not None else SessionCoordinator()

    # -----------------------------------------------------------------------
    # API routes (registered BEFORE StaticFiles mount)
    # -----------------------------------------------------------------------

    @app.websocket("/ws")
    async def game_socket(websocket: WebSocket) -> None:
        """
        Join the shared game.

        The client receives "init" immediately, then "update"/"gameOver"
        broadcasts and its own "invalidMove" replies for as long as it stays
        connected. Every text frame it sends is handed to the coordinator.
        """
        session: SessionCoordinator = websocket.app.state.coordinator
        await websocket.accept()

        connection = WebSocketConnection(websocket)
        writer = asyncio.create_task(connection.run_writer())
        session.connect(connection)

        try:
            while True:
                frame = await websocket.receive()
                if frame["type"] == "websocket.disconnect":
                    break
                raw = frame.get("text")
                if raw is None:
                    raw = frame.get("bytes") or b""
                session.handle_text(connection, raw)
        except WebSocketDisconnect:
            pass
        except Exception:
            _log.exception("Unexpected error on game socket")
        finally:
            connection.close()
            session.disconnect(connection)
            writer.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await writer

    @app.get("/api/state")
    async def api_state(request: Request) -> dict[str, Any]:
        """Current game state, same shape as the WebSocket "state" payload."""
        session: SessionCoordinator = request.app.state.coordinator
        return session.current_state().to_dict()

    @app.post("/api/reset")
    async def api_reset(request: Request) -> dict[str, Any]:
        """
        Start a new game.

        Every connected client receives an "update" with the starting board.

        Returns:
            The fresh game state.
        """
        session: SessionCoordinator = request.app.state.coordinator
        return session.reset().to_dict()

    @app.get("/", include_in_schema=False)
    async def serve_root() -> FileResponse:
        """Serve the game UI."""
        return FileResponse(_STATIC_DIR / "index.html")

    # -----------------------------------------------------------------------
    # Static file mount: MUST be last (catch-all for /static/* assets)
    # -----------------------------------------------------------------------

    app.mount("/static", StaticFiles(directory=_STATIC_DIR), name="static")
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        app,
        host=os.environ.get("HOST", "0.0.0.0"),
        port=int(os.environ.get("PORT", "3000")),
    )
