"""
Route guard - protect Sanic handlers served by this application
"""

from functools import wraps

from sanic import Request
from sanic.response import HTTPResponse

from models import GuardedResponse, RequestContext


def to_guarded(sanic_response: HTTPResponse) -> GuardedResponse:
    body = sanic_response.body or b""
    headers = {
        key: value for key, value in sanic_response.headers.items()
        if key.lower() not in ("content-type", "content-length")
    }
    return GuardedResponse(
        body=body.decode("utf-8", errors="replace"),
        status=sanic_response.status,
        headers=headers,
        content_type=sanic_response.content_type or "",
    )


def guard(handler):
    """Run detection before a handler and prevention around it.

    Expects ``app.ctx.server``, ``app.ctx.parser`` and ``app.ctx.responder``
    as set up in main.create_app.
    """

    @wraps(handler)
    async def guarded_handler(request: Request, *args, **kwargs):
        app_ctx = request.app.ctx
        server = app_ctx.server
        if not server.config.enabled:
            return await handler(request, *args, **kwargs)

        guardian = server.guardian
        ctx = app_ctx.parser.parse_request(request)
        app_ctx.stats.increment_total()

        if guardian.skip_reason(ctx):
            app_ctx.stats.record_decision(False, "skipped")
            return await handler(request, *args, **kwargs)

        result = await guardian.analyze(ctx)

        async def next_handler(_: RequestContext) -> GuardedResponse:
            return to_guarded(await handler(request, *args, **kwargs))

        if result.is_detected():
            decision = await guardian.prevent(ctx, next_handler, result)
            app_ctx.stats.record_decision(True, decision.strategy)
            return app_ctx.responder.send_guarded(decision.response)

        app_ctx.stats.record_decision(False, "none")
        guarded = await next_handler(ctx)
        if guarded.is_html():
            guarded.body = guardian.protect_content(guarded.body)
        return app_ctx.responder.send_guarded(guarded)

    return guarded_handler
