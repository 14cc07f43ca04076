"""
Request Filter

Decides which requests bypass detection: whitelisted paths, whitelisted IPs
and CIDR ranges, and API requests while API protection is off.
"""

import ipaddress
import logging
import re
from typing import List, Optional

from config import ApiConfig, WhitelistConfig
from models import RequestContext


logger = logging.getLogger(__name__)

API_PATH_PREFIX = "/api/"


def ip_in_range(ip: str, network) -> bool:
    """True when ip parses and falls inside network"""
    try:
        address = ipaddress.ip_address(ip)
    except ValueError:
        return False
    # IPv4 addresses are never inside IPv6 networks and vice versa
    return address in network


def is_api_request(ctx: RequestContext) -> bool:
    if ctx.path.startswith(API_PATH_PREFIX):
        return True

    accept = ctx.header("Accept")
    if accept and "application/json" in accept and "text/html" not in accept:
        return True

    return ctx.header("X-Requested-With") == "XMLHttpRequest"


class RequestFilter:
    """Whitelist and API checks applied before detection"""

    def __init__(self, whitelist: Optional[WhitelistConfig] = None, api: Optional[ApiConfig] = None):
        whitelist = whitelist or WhitelistConfig()
        self.protect_api = (api or ApiConfig()).protect_api
        self.ips = set(whitelist.ips)
        self.path_patterns = self._compile_paths(whitelist.paths)
        self.networks = self._parse_ranges(whitelist.ip_ranges)

    def skip_reason(self, ctx: RequestContext) -> Optional[str]:
        """Why detection is skipped for ctx, None when it should run"""
        if self.is_whitelisted_path(ctx.path):
            return "whitelisted_path"
        if self.is_whitelisted_ip(ctx.client_ip):
            return "whitelisted_ip"
        if not self.protect_api and is_api_request(ctx):
            return "api_request"
        return None

    def is_whitelisted_path(self, path: str) -> bool:
        return any(pattern.search(path) for pattern in self.path_patterns)

    def is_whitelisted_ip(self, ip: str) -> bool:
        if ip in self.ips:
            return True
        return any(ip_in_range(ip, network) for network in self.networks)

    @staticmethod
    def _compile_paths(paths) -> List[re.Pattern]:
        patterns = []
        for path in paths:
            try:
                patterns.append(re.compile(path))
            except re.error as e:
                logger.warning(f"Ignoring invalid whitelist path pattern {path!r}: {e}")
        return patterns

    @staticmethod
    def _parse_ranges(ranges) -> list:
        networks = []
        for ip_range in ranges:
            try:
                networks.append(ipaddress.ip_network(ip_range, strict=False))
            except ValueError as e:
                logger.warning(f"Ignoring invalid whitelist range {ip_range!r}: {e}")
        return networks
