"""
Request telemetry middleware.

Measures every HTTP request and reports its duration once the last body chunk
of the response has been sent, or once the request has failed with an
unhandled exception.
"""

import logging
import time

from starlette.types import ASGIApp, Message, Receive, Scope, Send

logger = logging.getLogger(__name__)


class RequestMetricsMiddleware:
    """
    Pure ASGI middleware recording one duration and one count metric per request.

    The telemetry emitter is looked up on ``app.state.telemetry`` at request
    time; requests are served normally when none is configured.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        start = time.perf_counter()
        recorded = False

        async def send_and_record(message: Message) -> None:
            nonlocal recorded
            await send(message)
            if message["type"] == "http.response.body" and not message.get("more_body", False):
                recorded = True
                self._record(scope, (time.perf_counter() - start) * 1000.0)

        try:
            await self.app(scope, receive, send_and_record)
        finally:
            # An unhandled exception gets its 500 from ServerErrorMiddleware,
            # which sits outside this middleware and answers after this point.
            if not recorded:
                self._record(scope, (time.perf_counter() - start) * 1000.0)

    @staticmethod
    def _record(scope: Scope, duration_ms: float) -> None:
        app = scope.get("app")
        telemetry = getattr(app.state, "telemetry", None) if app is not None else None
        if telemetry is None:
            return
        try:
            telemetry.record_request(scope["path"], duration_ms)
        except Exception as e:
            logger.error(f"Failed to record request metrics for {scope['path']}: {e}")
