"""
FarmerAid - ASGI request logging and JSON error responses.
"""
import json
import time
import uuid

from app_logging import get_logger

logger = get_logger("http")

INTERNAL_ERROR_MESSAGE = "Internal server error"


def new_request_id() -> str:
    return uuid.uuid4().hex


class RequestLoggingMiddleware:
    """
    Logs each HTTP request with its status and duration and echoes the request id
    back in an X-Request-ID header. An incoming X-Request-ID is reused.
    """

    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            return await self.app(scope, receive, send)

        incoming = dict(scope.get("headers") or []).get(b"x-request-id")
        request_id = incoming.decode("latin-1") if incoming else new_request_id()
        scope["request_id"] = request_id

        method = scope.get("method", "")
        path = scope.get("path", "")
        start = time.perf_counter()
        status = {"code": None}

        async def send_wrapper(message):
            if message["type"] == "http.response.start":
                status["code"] = message.get("status", 0)
                headers = list(message.get("headers", []))
                headers.append((b"x-request-id", request_id.encode("latin-1")))
                message["headers"] = headers
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            logger.info(
                "%s %s", method, path,
                extra={
                    "request_id": request_id,
                    "method": method,
                    "path": path,
                    "status_code": status["code"],
                    "duration_ms": round((time.perf_counter() - start) * 1000, 2),
                },
            )


class ErrorResponseMiddleware:
    """
    Turns an unhandled exception into a JSON 500 that carries the request id,
    so a farmer-facing error can be matched to its stack trace in the logs.
    If the response has already started the exception is re-raised instead.
    """

    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            return await self.app(scope, receive, send)

        started = {"value": False}

        async def send_wrapper(message):
            if message["type"] == "http.response.start":
                started["value"] = True
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        except Exception:
            request_id = scope.get("request_id")
            logger.exception(
                "Unhandled exception in request",
                extra={"request_id": request_id, "method": scope.get("method"), "path": scope.get("path")},
            )
            if started["value"]:
                raise
            body = json.dumps({"detail": INTERNAL_ERROR_MESSAGE, "request_id": request_id}).encode("utf-8")
            await send({
                "type": "http.response.start",
                "status": 500,
                "headers": [
                    (b"content-type", b"application/json"),
                    (b"content-length", str(len(body)).encode("latin-1")),
                ],
            })
            await send({"type": "http.response.body", "body": body})
