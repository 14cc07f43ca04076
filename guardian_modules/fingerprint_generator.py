"""
Client Fingerprint Generator module

Fingerprints are cache keys, not identities: md5 is used for speed and
collisions are tolerated. Detailed mode narrows the cache to one
(client, headers, method, path) combination; basic mode shares one entry
per (client, user-agent).

Empty parts are dropped before joining, so two requests that differ only in
which header is missing (say no Accept-Language versus no Accept-Encoding,
with the remaining values equal) can share a detailed fingerprint.
"""

import hashlib
from dataclasses import dataclass

from models import RequestContext


@dataclass
class ClientFingerprint:
    """Client fingerprint data"""
    ip_address: str
    user_agent: str
    accept: str = ""
    accept_language: str = ""
    accept_encoding: str = ""
    method: str = ""
    path: str = ""

    def components(self, detailed: bool) -> list:
        parts = [self.ip_address, self.user_agent]
        if detailed:
            parts += [self.accept, self.accept_language, self.accept_encoding, self.method, self.path]
        return parts

    def generate_hash(self, detailed: bool = False) -> str:
        """Generate hash from fingerprint data"""
        data = "|".join(part for part in self.components(detailed) if part)
        return hashlib.md5(data.encode()).hexdigest()


class FingerprintGenerator:
    """Generate client fingerprints"""

    def __init__(self, detailed: bool = False):
        self.detailed = detailed

    def create_fingerprint(self, ctx: RequestContext) -> ClientFingerprint:
        """Create client fingerprint"""
        return ClientFingerprint(
            ip_address=ctx.client_ip,
            user_agent=ctx.user_agent,
            accept=ctx.header("Accept"),
            accept_language=ctx.header("Accept-Language"),
            accept_encoding=ctx.header("Accept-Encoding"),
            method=ctx.method,
            path=ctx.trimmed_path,
        )

    def generate(self, ctx: RequestContext) -> str:
        """Fingerprint in the configured mode"""
        return self.create_fingerprint(ctx).generate_hash(self.detailed)

    def visitor_id(self, ctx: RequestContext) -> str:
        """Basic fingerprint, stable across paths"""
        return self.create_fingerprint(ctx).generate_hash(detailed=False)
