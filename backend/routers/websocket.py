"""WebSocket endpoint for real-time snapshots."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import orjson
from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from backend.state_payloads import compress_payload

if TYPE_CHECKING:
    from backend.app_factory import AppContext

logger = logging.getLogger(__name__)

CONTROL_COMMANDS = ("start", "stop")


def _wants_compression(websocket: WebSocket) -> bool:
    return websocket.query_params.get("compress", "").lower() in ("1", "true", "yes")


def _client_label(websocket: WebSocket) -> str:
    forwarded_for = websocket.headers.get("x-forwarded-for")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    if websocket.client:
        return websocket.client.host
    return "unknown"


async def _handle_command(ctx: "AppContext", websocket: WebSocket, raw_text: str) -> None:
    try:
        payload = orjson.loads(raw_text)
    except orjson.JSONDecodeError:
        await websocket.send_json({"success": False, "error": "Invalid JSON payload."})
        return
    if not isinstance(payload, dict):
        await websocket.send_json({"success": False, "error": "Expected a JSON object."})
        return

    command = payload.get("command")
    if command not in CONTROL_COMMANDS:
        await websocket.send_json({"success": False, "error": f"Unknown command: {command!r}"})
        return

    runner = ctx.ensure_runner()
    if command == "start":
        runner.start()
    else:
        runner.stop()
    await websocket.send_json({"success": True, "command": command})


async def _handle_websocket(websocket: WebSocket, ctx: "AppContext") -> None:
    client = _client_label(websocket)
    compressed = _wants_compression(websocket)
    observer = None

    try:
        await websocket.accept()

        # Send the latest snapshot so new clients render immediately
        initial = ctx.ensure_runner().latest_snapshot
        await websocket.send_bytes(compress_payload(initial) if compressed else initial)

        observer = ctx.observers.add(websocket, compressed=compressed)
        logger.info("WebSocket client %s connected (compressed=%s)", client, compressed)

        while True:
            try:
                message = await websocket.receive()
            except WebSocketDisconnect:
                break

            if message["type"] == "websocket.disconnect":
                break
            if message["type"] != "websocket.receive":
                continue

            raw_text = message.get("text")
            if raw_text is None and message.get("bytes"):
                try:
                    raw_text = message["bytes"].decode("utf-8")
                except UnicodeDecodeError:
                    await websocket.send_json({"success": False, "error": "Invalid message encoding."})
                    continue
            if raw_text:
                await _handle_command(ctx, websocket, raw_text)
    except WebSocketDisconnect:
        logger.debug("WebSocket client %s disconnected during setup", client)
    except Exception:
        logger.exception("WebSocket error for client %s", client)
    finally:
        if observer is not None:
            ctx.observers.remove(observer)


def setup_router(ctx: "AppContext") -> APIRouter:
    """Create the websocket router bound to an app context."""
    router = APIRouter()

    @router.websocket("/ws")
    async def websocket_endpoint(websocket: WebSocket) -> None:
        await _handle_websocket(websocket, ctx)

    return router
