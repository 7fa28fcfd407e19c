"""Starlette ASGI application answering decoration queries."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from starlette.applications import Starlette
from starlette.concurrency import run_in_threadpool
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route, WebSocketRoute
from starlette.websockets import WebSocket, WebSocketDisconnect

from ..table import Decoration, FileCountTable, file_identity
from ..tracker import FileTracker
from .broadcast import StaleBroadcaster

logger = logging.getLogger(__name__)


def create_app(table: FileCountTable, tracker: FileTracker) -> Starlette:
    """Build the Starlette application wired to *table* and *tracker*.

    Routes:
        GET  /api/decorations   every current decoration
        GET  /api/decoration    one decoration, ``?path=...``
        POST /api/active        active-file switch, ``{"path": ...}``
        POST /api/refresh       manual recount of the active file or ``{"path": ...}``
        WS   /ws                ``{"type": "stale", "path": ...}`` per change
    """
    broadcaster = StaleBroadcaster()

    async def api_decorations(request: Request) -> JSONResponse:
        counts = table.snapshot()
        return JSONResponse(
            {path: Decoration.for_count(n).to_dict() for path, n in counts.items()}
        )

    async def api_decoration(request: Request) -> JSONResponse:
        path = request.query_params.get("path")
        if not path:
            return JSONResponse({"error": "Missing 'path' query parameter"}, status_code=400)
        identity = file_identity(path)
        decoration = table.decoration_for(identity)
        if decoration is None:
            return JSONResponse({"path": identity, "decoration": None}, status_code=404)
        return JSONResponse({"path": identity, **decoration.to_dict()})

    async def api_active(request: Request) -> JSONResponse:
        body = await _json_body(request)
        if body is None or not isinstance(body.get("path"), str) or not body["path"]:
            return JSONResponse({"error": "Body must be {\"path\": ...}"}, status_code=400)
        count = await run_in_threadpool(tracker.switch_active, body["path"])
        return JSONResponse({"active": tracker.active_file, "count": count})

    async def api_refresh(request: Request) -> JSONResponse:
        body = await _json_body(request) or {}
        path = body.get("path") if isinstance(body.get("path"), str) else None
        path = path or tracker.active_file
        if path is None:
            return JSONResponse(
                {"error": "No active file; pass {\"path\": ...}"},
                status_code=409,
            )
        count = await run_in_threadpool(tracker.update_file, path)
        decoration = table.decoration_for(path)
        return JSONResponse(
            {
                "path": file_identity(path),
                "count": count,
                "decoration": decoration.to_dict() if decoration else None,
            }
        )

    async def websocket_endpoint(websocket: WebSocket) -> None:
        queue: asyncio.Queue[Any] = asyncio.Queue(maxsize=256)
        # Subscribe before accepting so no signal after the handshake is missed
        broadcaster.subscribe(queue)
        disconnected: asyncio.Task[None] | None = None
        try:
            await websocket.accept()
            logger.debug("Decoration stream client connected (%d open)", len(broadcaster))
            disconnected = asyncio.create_task(_wait_for_disconnect(websocket))
            while not disconnected.done():
                getter = asyncio.ensure_future(queue.get())
                done, _ = await asyncio.wait(
                    {getter, disconnected},
                    timeout=60,
                    return_when=asyncio.FIRST_COMPLETED,
                )
                if getter in done:
                    await websocket.send_json(getter.result())
                    continue
                getter.cancel()
                if not done:
                    # Keepalive on idle connections
                    await websocket.send_json({"type": "ping"})
        except (WebSocketDisconnect, asyncio.CancelledError):
            pass
        finally:
            broadcaster.unsubscribe(queue)
            if disconnected is not None:
                disconnected.cancel()

    @asynccontextmanager
    async def lifespan(app: Starlette) -> AsyncIterator[None]:
        try:
            yield
        finally:
            table.remove_listener(broadcaster)

    routes = [
        Route("/api/decorations", api_decorations),
        Route("/api/decoration", api_decoration),
        Route("/api/active", api_active, methods=["POST"]),
        Route("/api/refresh", api_refresh, methods=["POST"]),
        WebSocketRoute("/ws", websocket_endpoint),
    ]

    table.add_listener(broadcaster)
    app = Starlette(routes=routes, lifespan=lifespan)
    app.state.broadcaster = broadcaster
    return app


async def _wait_for_disconnect(websocket: WebSocket) -> None:
    """Consume client frames until the client goes away."""
    while True:
        message = await websocket.receive()
        if message["type"] == "websocket.disconnect":
            return


async def _json_body(request: Request) -> dict[str, Any] | None:
    raw = await request.body()
    if not raw:
        return None
    try:
        data = json.loads(raw)
    except ValueError:
        return None
    return data if isinstance(data, dict) else None
