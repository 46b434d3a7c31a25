"""HTTP request surface for the command pipeline."""

from __future__ import annotations

import contextlib
import json
import logging
from typing import Awaitable, Callable, Optional

from aiohttp import web

from .errors import InputRejected, MethodNotSupported, UnexpectedFailure
from .pipeline import CommandPipeline, PipelineOutcome

LOGGER = logging.getLogger(__name__)

USER_ID_HEADER = "X-User-Id"

PIPELINE_KEY = web.AppKey("pipeline", CommandPipeline)

Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]


def _outcome_response(outcome: PipelineOutcome) -> web.Response:
    return web.json_response(outcome.body, status=outcome.status_code)


def _user_id_from(request: web.Request) -> Optional[int]:
    raw = request.headers.get(USER_ID_HEADER)
    if raw is None or not raw.strip():
        return None
    try:
        user_id = int(raw.strip())
    except ValueError as exc:
        raise InputRejected(f"{USER_ID_HEADER} must be an integer") from exc
    if user_id < 0:
        raise InputRejected(f"{USER_ID_HEADER} must not be negative")
    return user_id


@web.middleware
async def error_middleware(request: web.Request, handler: Handler) -> web.StreamResponse:
    """Map uncaught faults onto JSON error responses."""

    try:
        return await handler(request)
    except web.HTTPException:
        raise
    except (InputRejected, MethodNotSupported) as exc:
        return web.json_response({"error": str(exc)}, status=exc.status_code)
    except Exception as exc:
        LOGGER.exception("Unhandled error processing %s %s", request.method, request.path)
        failure = UnexpectedFailure(f"Internal server error: {type(exc).__name__}")
        return web.json_response({"error": str(failure)}, status=failure.status_code)


async def handle_root(request: web.Request) -> web.Response:
    pipeline = request.app[PIPELINE_KEY]

    if request.method == "POST":
        raw = await request.text()
        try:
            body = json.loads(raw) if raw.strip() else None
        except ValueError as exc:
            # JSONDecodeError, or an integer literal past the int digit limit.
            raise InputRejected("Invalid JSON body") from exc
        outcome = await pipeline.dispatch(
            "POST", body=body, user_id=_user_id_from(request)
        )
    else:
        outcome = await pipeline.dispatch(
            request.method, action=request.query.get("action")
        )

    return _outcome_response(outcome)


async def handle_unknown(request: web.Request) -> web.Response:
    raise MethodNotSupported("Invalid request method")


def create_app(pipeline: CommandPipeline) -> web.Application:
    """Build the aiohttp application serving ``pipeline``."""

    app = web.Application(middlewares=[error_middleware])
    app[PIPELINE_KEY] = pipeline
    app.router.add_route("*", "/", handle_root)
    app.router.add_route("*", "/{tail:.*}", handle_unknown)
    return app


class CommandServer:
    """Runs the command application on a TCP site."""

    def __init__(self, pipeline: CommandPipeline, host: str, port: int) -> None:
        self._pipeline = pipeline
        self._host = host
        self._port = port
        self._runner: Optional[web.AppRunner] = None
        self._site: Optional[web.TCPSite] = None

    async def start(self) -> None:
        self._runner = web.AppRunner(create_app(self._pipeline))
        await self._runner.setup()
        self._site = web.TCPSite(self._runner, self._host, self._port)
        await self._site.start()
        LOGGER.info("Command endpoint listening on http://%s:%s/", self._host, self._port)

    async def stop(self) -> None:
        with contextlib.suppress(Exception):
            if self._site is not None:
                await self._site.stop()
        if self._runner is not None:
            await self._runner.cleanup()
        self._site = None
        self._runner = None
