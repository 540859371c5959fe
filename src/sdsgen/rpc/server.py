# src/sdsgen/rpc/server.py
from __future__ import annotations

import asyncio
import json
import logging
import sys
from collections.abc import Mapping
from typing import IO, Any

from sdsgen.config import Settings
from sdsgen.data.session_store import MemorySessionStore
from sdsgen.data.tech_stacks import TechStackCatalog, load_catalog
from sdsgen.errors import ErrorKind, ValidationError, classify, rpc_error
from sdsgen.llm.invoker import CompletionClient, ResilientInvoker
from sdsgen.llm.providers.http import Transport, post_json
from sdsgen.pipeline.assembler import SpecificationAssembler
from .handlers import BaseToolHandler, ToolContext, default_handlers
from .tools import PROTOCOL_VERSION, SERVER_INFO, TOOLS

logger = logging.getLogger(__name__)

PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601


class MethodNotFound(Exception):
    """Raised by dispatch() for a method the server does not implement."""


def _envelope_result(request_id: object, result: object) -> dict[str, object]:
    return {"jsonrpc": "2.0", "id": request_id, "result": result}


def _envelope_error(request_id: object, code: int, message: str, data: object | None = None) -> dict[str, object]:
    error: dict[str, object] = {"code": code, "message": message}
    if data is not None:
        error["data"] = data
    return {"jsonrpc": "2.0", "id": request_id, "error": error}


def _dump_line(envelope: Mapping[str, object]) -> str:
    # Without indent, newlines are escaped so one envelope is one line.
    # ASCII output keeps lone surrogates echoed from a request writable.
    return json.dumps(envelope, ensure_ascii=True)


class RpcServer:
    """Line-delimited JSON-RPC front door.

    One request line in produces exactly one response line out, except for
    notifications (no id, method under notifications/), which produce none.
    Every exception raised while dispatching is turned into an error envelope;
    the read loop never stops because of a single request.
    """

    def __init__(
        self,
        *,
        ctx: ToolContext,
        handlers: Mapping[str, BaseToolHandler] | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.ctx = ctx
        self.handlers = dict(handlers) if handlers is not None else default_handlers()
        self.settings = settings or Settings()

    @staticmethod
    def from_settings(
        settings: Settings,
        *,
        llm: CompletionClient | None = None,
        transport: Transport = post_json,
        environ: Mapping[str, str] | None = None,
        catalog: TechStackCatalog | None = None,
    ) -> "RpcServer":
        client = llm or ResilientInvoker(settings=settings, transport=transport, environ=environ)
        cat = catalog or load_catalog()
        ctx = ToolContext(
            store=MemorySessionStore(max_sessions=settings.max_sessions),
            assembler=SpecificationAssembler(llm=client, settings=settings, catalog=cat),
            catalog=cat,
        )
        return RpcServer(ctx=ctx, settings=settings)

    async def dispatch(self, method: str, params: Mapping[str, object]) -> Any:
        if method == "initialize":
            return {
                "protocolVersion": PROTOCOL_VERSION,
                "capabilities": {"tools": {}},
                "serverInfo": dict(SERVER_INFO),
            }
        if method == "tools/list":
            return {"tools": TOOLS}
        if method == "tools/call":
            name = params.get("name")
            handler = self.handlers.get(name) if isinstance(name, str) else None
            if handler is None:
                raise ValidationError(f"Unknown tool: {name}", field="name")
            arguments = params.get("arguments")
            if arguments is None:
                arguments = {}
            if not isinstance(arguments, Mapping):
                raise ValidationError("Tool arguments must be an object", field="arguments")
            logger.info("Calling tool %s", name)
            return await handler(arguments=arguments, ctx=self.ctx)
        raise MethodNotFound(method)

    async def handle_request(self, request: object) -> dict[str, object] | None:
        if not isinstance(request, Mapping):
            return _envelope_error(None, INVALID_REQUEST, "Invalid Request")

        request_id = request.get("id")
        method = request.get("method")
        if not isinstance(method, str) or not method:
            return _envelope_error(request_id, INVALID_REQUEST, "Invalid Request: missing method")

        if "id" not in request and method.startswith("notifications/"):
            logger.debug("Notification %s", method)
            return None

        params = request.get("params")
        if params is None:
            params = {}
        if not isinstance(params, Mapping):
            return _envelope_error(request_id, INVALID_REQUEST, "Invalid Request: params must be an object")

        try:
            result = await self.dispatch(method, params)
        except MethodNotFound:
            return _envelope_error(request_id, METHOD_NOT_FOUND, f"Method not found: {method}")
        except Exception as e:
            return self._error_envelope(request_id, e)
        return _envelope_result(request_id, result)

    def _error_envelope(self, request_id: object, exc: Exception) -> dict[str, object]:
        code, message, data = rpc_error(exc, development=self.settings.development)
        if classify(exc) is ErrorKind.INTERNAL:
            logger.exception("Unexpected error while handling request %r", request_id)
        else:
            logger.error("Request %r failed (%s): %s", request_id, classify(exc).value, exc)
        return _envelope_error(request_id, code, message, data)

    async def handle_line(self, line: str | bytes) -> str | None:
        """Returns the response line for one input line, or None when nothing is owed.

        Bytes are decoded as UTF-8 with invalid sequences replaced.
        """
        if isinstance(line, bytes):
            line = line.decode("utf-8", errors="replace")
        text = line.strip()
        if not text:
            return None
        try:
            request = json.loads(text)
        except json.JSONDecodeError as e:
            logger.warning("Malformed request line: %s", e)
            return _dump_line(_envelope_error(None, PARSE_ERROR, f"Parse error: {e.msg}"))
        except RecursionError:
            logger.warning("Request line nests too deeply")
            return _dump_line(_envelope_error(None, PARSE_ERROR, "Parse error: nesting too deep"))

        envelope = await self.handle_request(request)
        return _dump_line(envelope) if envelope is not None else None

    async def serve(self, instream: IO[Any] | None = None, outstream: IO[str] | None = None) -> None:
        """Reads requests until EOF; stdout carries nothing but response lines.

        stdin is read as raw bytes so a badly encoded line gets a parse error
        instead of ending the loop. Responses are ASCII-only JSON.
        """
        src = instream if instream is not None else sys.stdin.buffer
        dst = outstream if outstream is not None else sys.stdout
        logger.info("SDS generator RPC server started")
        while True:
            line = await asyncio.to_thread(src.readline)
            if not line:
                break
            out = await self.handle_line(line)
            if out is not None:
                dst.write(out + "\n")
                dst.flush()
        logger.info("Input closed, server stopping")
