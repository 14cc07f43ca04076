"""
Response Builder module - Build auth and protected-route responses
"""

from sanic import response

from models import DetectionResponse, GuardedResponse


NO_CACHE_HEADERS = {
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "X-Content-Type-Options": "nosniff",
}


class ResponseBuilder:
    """Turn Guardian outcomes into Sanic responses"""

    def send_auth_response(self, detection: DetectionResponse, status: int, debug: bool = False):
        """Answer an nginx auth_request subrequest"""
        headers = {
            "X-Guardian-Score": str(detection.score),
            "X-Guardian-Confidence": detection.confidence,
            "X-Guardian-Strategy": detection.strategy,
            "X-Response-Time": f"{detection.response_time_ms}ms",
            **NO_CACHE_HEADERS,
        }

        if debug:
            return response.json(detection.model_dump(), status=status, headers=headers)
        if status == 200:
            return response.text("OK", status=status, headers=headers)
        return response.text("Blocked", status=status, headers=headers)

    def send_guarded(self, guarded: GuardedResponse):
        """Convert a GuardedResponse into a Sanic HTTPResponse"""
        return response.text(
            guarded.body,
            status=guarded.status,
            headers=dict(guarded.headers),
            content_type=guarded.content_type,
        )

    def send_json(self, data: dict, status: int = 200):
        """Send JSON response"""
        return response.json(data, status=status, headers=NO_CACHE_HEADERS)
