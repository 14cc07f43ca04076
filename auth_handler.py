"""
Auth Handler module - nginx auth_request and client report endpoints
"""

import logging
from datetime import datetime
from sanic import Request, response
from guardian_server import GuardianServer
from request_parser import RequestParser
from response_builder import ResponseBuilder
from server_stats import StatsCollector
from models import DetectionResponse
from guardian_modules.prevention_engine import MIN_DELAY_SECONDS


class AuthHandler:
    """Handle auth subrequests and client-side reports"""

    def __init__(self, server: GuardianServer, parser: RequestParser,
                 responder: ResponseBuilder, stats: StatsCollector, mode: str):
        self.server = server
        self.parser = parser
        self.responder = responder
        self.stats = stats
        self.mode = mode
        self.logger = logging.getLogger(__name__)

    async def handle_auth(self, request: Request):
        """Handle an nginx auth_request subrequest"""
        start_time = datetime.now()
        self.stats.increment_total()

        # Handle preflight OPTIONS request
        if request.method == "OPTIONS":
            return response.text("", status=200, headers=self._get_mode_specific_headers())

        ctx = self.parser.parse_nginx_request(request)

        if self.server.config.debug:
            self.logger.info(
                f"🔍 [{self.mode.upper()}] Auth request: {ctx.method} {ctx.path} "
                f"from {ctx.client_ip} (UA: {ctx.user_agent})"
            )

        guardian = self.server.guardian
        skip_reason = guardian.skip_reason(ctx)
        if not self.server.config.enabled or skip_reason:
            result = guardian.detector.new_result()
        else:
            result = await guardian.analyze(ctx)

        if skip_reason and self.server.config.debug:
            self.logger.info(f"⏭️  [{self.mode.upper()}] Skipped detection ({skip_reason}): {ctx.path}")

        strategy = "skipped" if skip_reason else "none"
        status = 200
        if result.is_detected():
            strategy = guardian.engine.choose_strategy(result)
            if strategy == "block":
                status = 403
            elif strategy == "delay":
                await guardian.engine.sleep(max(MIN_DELAY_SECONDS, self.server.config.prevention.delay_seconds))

        self.stats.record_decision(result.is_detected(), strategy)

        detection = DetectionResponse(
            score=result.score,
            signals=result.signals,
            detected=result.is_detected(),
            confidence=result.confidence_level(),
            strategy=strategy,
            response_time_ms=int((datetime.now() - start_time).total_seconds() * 1000),
        )

        if self.server.config.debug:
            verdict = "BLOCKED" if status == 403 else "ALLOWED"
            self.logger.info(
                f"🛡️  [{self.mode.upper()}] Request {verdict}: {ctx.method} {ctx.path} "
                f"(Score: {detection.score}, Strategy: {strategy})"
            )

        sanic_response = self.responder.send_auth_response(detection, status, self.server.config.debug)
        for key, value in self._get_mode_specific_headers().items():
            sanic_response.headers[key] = value
        return sanic_response

    async def handle_report(self, request: Request):
        """Handle a client-side detection report"""
        ctx = self.parser.parse_request(request)
        outcome = await self.server.guardian.process_client_report(ctx, ctx.body)
        self.stats.record_report(outcome["success"])

        if self.server.config.debug:
            self.logger.info(f"📨 [{self.mode.upper()}] Client report from {ctx.client_ip}: {outcome}")

        # Scores stay server side
        return self.responder.send_json({"success": outcome["success"]})

    def _get_mode_specific_headers(self) -> dict:
        """Get headers based on mode"""
        common_headers = {
            "X-Auth-Server": "guardian",
            "X-Auth-Mode": self.mode
        }

        if self.mode == "remote":
            common_headers["Access-Control-Expose-Headers"] = (
                "X-Guardian-Score, X-Guardian-Confidence, X-Guardian-Strategy"
            )

        return common_headers
