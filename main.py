#!/usr/bin/env python3
"""
Guardian Server - AI crawler detection for nginx and Sanic
Main entry point for the application
"""

import logging
import sys
from dataclasses import replace
from sanic import Sanic, response
from sanic_cors import CORS

from config import Config
from guardian_server import GuardianServer
from request_parser import RequestParser
from response_builder import ResponseBuilder
from server_stats import StatsCollector
from auth_handler import AuthHandler
from health_monitor import HealthMonitor
from route_guard import guard


def print_startup_info(config: Config, mode: str):
    """Print startup information"""
    print("🛡️  Guardian Server (Python)")
    print("=" * 40)
    print(f"✅ Mode: {mode}")
    print(f"✅ Port: {config.port}")
    print(f"✅ Debug: {config.debug}")
    print(f"✅ Store: {config.store.backend}")
    print(f"✅ Threshold: {config.detection.threshold}")
    print(f"✅ Strategy: {config.prevention.strategy} (adaptive: {config.prevention.adaptive})")
    print()
    print("📊 Available Endpoints:")
    print(f"   http://localhost:{config.port}/auth   - nginx auth_request endpoint")
    print(f"   http://localhost:{config.port}{config.report_endpoint} - Client report endpoint")
    print(f"   http://localhost:{config.port}/health - Health check")
    print(f"   http://localhost:{config.port}/status - Detection status")
    print(f"   http://localhost:{config.port}/stats  - Server statistics")
    print()


def print_nginx_config(port: str, mode: str):
    """Print nginx configuration"""
    upstream = f"127.0.0.1:{port}" if mode == "local" else f"your-remote-server:{port}"
    print("🔧 Nginx Configuration:")
    print("=" * 30)
    print("location = /auth {")
    print("    internal;")
    print(f"    proxy_pass http://{upstream}/auth;")
    print("    proxy_pass_request_body off;")
    print('    proxy_set_header Content-Length "";')
    print("    proxy_set_header X-Original-URI $request_uri;")
    print("    proxy_set_header X-Original-Method $request_method;")
    print("    proxy_set_header X-Original-Remote-Addr $remote_addr;")
    print("    proxy_set_header X-Original-User-Agent $http_user_agent;")
    print("    proxy_set_header X-Original-Referer $http_referer;")
    print("    proxy_set_header X-Original-Cookie $http_cookie;")
    print("    proxy_set_header X-Original-Host $host;")
    print("    proxy_set_header X-Original-Accept $http_accept;")
    print("    proxy_set_header X-Original-Accept-Language $http_accept_language;")
    print("    proxy_set_header X-Original-Accept-Encoding $http_accept_encoding;")
    print("}")
    print()
    print("location /app/ {")
    print("    auth_request /auth;")
    print("    auth_request_set $guardian_score $upstream_http_x_guardian_score;")
    print("    auth_request_set $guardian_strategy $upstream_http_x_guardian_strategy;")
    print("    proxy_set_header X-Guardian-Score $guardian_score;")
    print("    proxy_set_header X-Guardian-Strategy $guardian_strategy;")
    print("    proxy_pass http://your-app-backend;")
    print("}")
    print()


def create_app(config: Config, mode: str = "local") -> Sanic:
    """Create and configure the Sanic application"""
    app = Sanic("guardian")

    @app.before_server_start
    async def setup_server(app, loop):
        """Setup server components before starting"""
        server = await GuardianServer.create(config)
        parser = RequestParser()
        responder = ResponseBuilder()
        stats = StatsCollector(server.stats)

        app.ctx.server = server
        app.ctx.auth_handler = AuthHandler(server, parser, responder, stats, mode)
        app.ctx.health_monitor = HealthMonitor(server, responder, stats)
        app.ctx.parser = parser
        app.ctx.responder = responder
        app.ctx.stats = stats

    @app.after_server_stop
    async def teardown_server(app, loop):
        await app.ctx.server.close()

    app.add_route(handle_auth, "/auth", methods=["GET", "POST", "OPTIONS"])
    app.add_route(handle_report, config.report_endpoint, methods=["POST"])
    app.add_route(handle_health, "/health", methods=["GET"])
    app.add_route(handle_status, "/status", methods=["GET"])
    app.add_route(handle_stats, "/stats", methods=["GET"])
    app.add_route(handle_demo, "/guardian/demo", methods=["GET"])

    return app


# Route handlers that use app context
async def handle_auth(request):
    return await request.app.ctx.auth_handler.handle_auth(request)

async def handle_report(request):
    return await request.app.ctx.auth_handler.handle_report(request)

async def handle_health(request):
    return await request.app.ctx.health_monitor.handle_health(request)

async def handle_status(request):
    return await request.app.ctx.health_monitor.handle_status(request)

async def handle_stats(request):
    return await request.app.ctx.health_monitor.handle_stats(request)

@guard
async def handle_demo(request):
    return response.html(
        "<!DOCTYPE html><html><head><title>Guardian demo</title></head>"
        "<body><main><article><h1>Protected article</h1>"
        "<p>This page is served through the Guardian route guard.</p>"
        "</article></main></body></html>"
    )


def parse_args(argv, config: Config):
    """Apply command line mode switches to the configuration"""
    mode = "local"
    if len(argv) > 1:
        arg = argv[1]
        if arg == "debug":
            config = replace(config, debug=True)
            print("🐛 Debug mode enabled")
        elif arg == "production":
            config = replace(config, debug=False)
            print("🚀 Production mode enabled")
        elif arg == "local":
            print("🏠 Local mode selected")
        elif arg == "local-debug":
            config = replace(config, debug=True)
            print("🏠🐛 Local debug mode enabled")
        elif arg == "remote":
            mode = "remote"
            print("☁️  Remote mode selected")
        elif arg == "remote-debug":
            mode = "remote"
            config = replace(config, debug=True)
            print("☁️🐛 Remote debug mode enabled")
        else:
            print(f"Unknown argument: {arg}")
            print("Available options: local, remote, debug, production, local-debug, remote-debug")
            sys.exit(1)
    return config, mode


def main():
    """Main entry point"""
    config, mode = parse_args(sys.argv, Config.from_env())

    logging.basicConfig(
        level=logging.DEBUG if config.debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    print_startup_info(config, mode)
    print_nginx_config(config.port, mode)
    print(f"🚀 Server starting on port {config.port}")

    app = create_app(config, mode)

    CORS(app,
         origins="*" if mode == "remote" else ["http://localhost:*"],
         methods=["GET", "POST", "OPTIONS", "HEAD"],
         headers=["Content-Type", "Authorization", "X-Requested-With"])

    try:
        app.run(
            host="0.0.0.0",
            port=int(config.port),
            debug=config.debug,
            access_log=config.debug,
            single_process=True  # Use single process to avoid the multiprocess issue
        )
    except KeyboardInterrupt:
        print("\n🛑 Server stopped")


if __name__ == "__main__":
    main()
