"""
Health Monitor module - Health and status endpoints
"""

import time
from datetime import datetime
from sanic import Request
from guardian_server import GuardianServer
from response_builder import ResponseBuilder
from server_stats import StatsCollector
from guardian_modules.crawler_detector import ANALYZER_ORDER


class HealthMonitor:
    """Monitor server health and provide status endpoints"""

    def __init__(self, server: GuardianServer, responder: ResponseBuilder, stats: StatsCollector):
        self.server = server
        self.responder = responder
        self.stats = stats

    async def handle_health(self, request: Request):
        """Handle health check endpoint"""
        uptime_seconds = (datetime.now() - self.server.stats.start_time).total_seconds()

        health = {
            "status": "healthy",
            "timestamp": int(time.time()),
            "detection": "active" if self.server.config.detection.server_enabled else "disabled",
            "store": self.server.config.store.backend,
            "uptime": uptime_seconds
        }
        return self.responder.send_json(health)

    async def handle_status(self, request: Request):
        """Handle detailed status endpoint"""
        config = self.server.config
        uptime_seconds = (datetime.now() - self.server.stats.start_time).total_seconds()

        status = {
            "timestamp": int(time.time()),
            "server_stats": {
                "total_requests": self.server.stats.total_requests,
                "detected_count": self.server.stats.detected_count,
                "passed_count": self.server.stats.passed_count,
                "start_time": self.server.stats.start_time.isoformat()
            },
            "detection": {
                "server_enabled": config.detection.server_enabled,
                "client_enabled": config.detection.client_enabled,
                "threshold": config.detection.threshold,
                "analyzers": {
                    name: config.detection.analyzers.is_enabled(name)
                    for name in ANALYZER_ORDER
                },
            },
            "prevention": {
                "strategy": config.prevention.strategy,
                "adaptive": config.prevention.adaptive,
                "protect_content": config.prevention.protect_content,
            },
            "whitelist": {
                "paths": len(config.whitelist.paths),
                "ips": len(config.whitelist.ips),
                "ip_ranges": len(config.whitelist.ip_ranges),
                "protect_api": config.api.protect_api,
            },
            "uptime": uptime_seconds,
            "config": {
                "debug_mode": config.debug,
                "port": config.port
            }
        }
        return self.responder.send_json(status)

    async def handle_stats(self, request: Request):
        """Handle statistics endpoint"""
        stats_data = self.stats.get_stats()
        return self.responder.send_json(stats_data)
