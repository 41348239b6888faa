from starlette.types import ASGIApp, Message, Receive, Scope, Send

from app.metrics.registry import MetricsRegistry


class RequestMetricsMiddleware:
    """
    Counts every HTTP response once it has been handled.

    The hook runs in a ``finally`` block so requests that blow up in a handler
    are still counted, as 500 unless a response had already started.
    """

    def __init__(self, app: ASGIApp, metrics: MetricsRegistry):
        self.app = app
        self.metrics = metrics

    async def __call__(self, scope: Scope, receive: Receive, send: Send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        status_code = 500

        async def send_wrapper(message: Message):
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            self.metrics.observe(scope["method"], _route_label(scope), status_code)


def _route_label(scope: Scope) -> str:
    # FastAPI puts the matched route into the scope during routing
    route = scope.get("route")
    path = getattr(route, "path", None)
    return path or scope["path"]
