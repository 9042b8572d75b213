"""
Interactive search session over WebSocket.

The client sends raw field events, page requests, selections and ECL row
edits; the server pushes loading state, results, errors and re-rendered
ECL expressions as they happen. Each connection gets its own SearchSession.
"""

import asyncio
from collections.abc import Sequence
from typing import Any

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from terminology_search.config.logging import get_logger
from terminology_search.errors import TerminologySearchError
from terminology_search.models.ecl import EclExpression, FilterRow
from terminology_search.models.search import ErrorPayload, SearchResult, Surface
from terminology_search.models.session import EclAction, MessageType, SessionMessage
from terminology_search.services.gateway import get_gateway
from terminology_search.services.session import SearchSession
from terminology_search.services.subscription import FieldEvent, FieldEventKind

logger = get_logger(__name__)

router = APIRouter(tags=["session"])


class WebSocketListener:
    """Pushes search outcomes to the client as JSON messages."""

    def __init__(self, websocket: WebSocket):
        self.websocket = websocket
        self._send_lock = asyncio.Lock()

    async def send(self, message: dict[str, Any]) -> None:
        async with self._send_lock:
            await self.websocket.send_json(message)

    async def on_loading(self, surface: Surface, active: bool) -> None:
        await self.send({"type": "loading", "surface": surface.value, "active": active})

    async def on_result(self, surface: Surface, result: SearchResult) -> None:
        await self.send({"type": "results", **result.to_dict()})

    async def on_error(self, surface: Surface, error: ErrorPayload) -> None:
        await self.send({"type": "error", "surface": surface.value, "error": error.model_dump()})

    async def on_ecl_changed(self, expression: EclExpression, rows: Sequence[FilterRow]) -> None:
        await self.send(
            {
                "type": "ecl",
                "short_form": expression.short_form,
                "long_form": expression.long_form,
                "rows": [
                    {"operator": row.operator_long, "code": row.code, "label": row.label}
                    for row in rows
                ],
            }
        )


async def handle_message(
    session: SearchSession, listener: WebSocketListener, message: SessionMessage
) -> None:
    """
    Apply one client message to the session.

    Raises:
        TerminologySearchError: For invalid pages, rows or operators
        ValueError: For messages missing required fields
    """
    if message.type == MessageType.FIELD:
        if message.surface is None:
            raise ValueError("Field messages require a surface")
        session.handle_event(
            FieldEvent(message.surface, FieldEventKind(message.event), message.value, message.key)
        )

    elif message.type == MessageType.PAGE:
        if message.surface is None or message.page is None:
            raise ValueError("Page messages require a surface and a page")
        session.request_page(message.surface, message.page)

    elif message.type == MessageType.VALUE_SET:
        session.set_value_set_url(message.url)

    elif message.type == MessageType.SELECT:
        entry = session.find_entry(message.surface, message.id) if message.surface else None
        if entry is None:
            raise ValueError(f"No result with id '{message.id}' on surface {message.surface}")
        if message.surface == Surface.CODE_SYSTEM:
            session.select_code_system(entry)
        elif message.surface == Surface.VALUE_SET:
            session.select_value_set(entry)
        await listener.send(
            {
                "type": "selected",
                "surface": message.surface.value,
                "id": entry.identifier,
                "value_set_url": session.value_set_url,
            }
        )

    elif message.type == MessageType.ECL:
        await _handle_ecl(session, message)


async def _handle_ecl(session: SearchSession, message: SessionMessage) -> None:
    action = message.action
    if action == EclAction.APPEND:
        await session.append_ecl_row(message.operator, message.code or "", message.label or "")
    elif action == EclAction.UPDATE:
        if message.index is None:
            raise ValueError("ECL update requires an index")
        await session.update_ecl_row(message.index, message.operator, message.code, message.label)
    elif action == EclAction.REMOVE:
        if message.index is None:
            raise ValueError("ECL remove requires an index")
        await session.remove_ecl_row(message.index)
    elif action == EclAction.REPLACE:
        await session.replace_ecl_rows(message.rows)
    elif action in (EclAction.CHILDREN, EclAction.PARENTS):
        if not message.code:
            raise ValueError("ECL shortcuts require a concept code")
        if action == EclAction.CHILDREN:
            await session.children_of(message.code, message.label or "")
        else:
            await session.parents_of(message.code, message.label or "")
    else:
        raise ValueError("ECL messages require an action")


@router.websocket("/ws/search")
async def search_session(websocket: WebSocket) -> None:
    """Run an interactive search session for one client."""
    await websocket.accept()
    listener = WebSocketListener(websocket)
    session = SearchSession(get_gateway(), listener)
    logger.info("Search session opened")

    try:
        while True:
            text = await websocket.receive_text()
            try:
                message = SessionMessage.model_validate_json(text)
                await handle_message(session, listener, message)
            except (TerminologySearchError, ValueError, IndexError) as e:
                await listener.send({"type": "invalid", "message": str(e)})
    except WebSocketDisconnect:
        logger.info("Search session closed")
    finally:
        await session.close()
