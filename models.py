"""
Data models for the Guardian server
"""

import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


@dataclass
class ServerStats:
    """Server statistics"""
    total_requests: int = 0
    detected_count: int = 0
    passed_count: int = 0
    client_reports: int = 0
    rejected_reports: int = 0
    strategy_counts: Dict[str, int] = field(default_factory=dict)
    start_time: datetime = field(default_factory=datetime.now)


@dataclass
class GuardedResponse:
    """Framework-neutral HTTP response passed through the prevention engine"""
    body: str = ""
    status: int = 200
    headers: Dict[str, str] = field(default_factory=dict)
    content_type: str = "text/html; charset=utf-8"

    def is_html(self) -> bool:
        content_type = (self.content_type or "").lower()
        if "text/html" in content_type or "application/xhtml+xml" in content_type:
            return True
        return not content_type and "<!doctype html" in self.body.lower()


@dataclass
class PreventionDecision:
    """Strategy chosen for one request and the response it produced"""
    strategy: str
    response: GuardedResponse


class RequestContext(BaseModel):
    """Read-only view of an inbound request"""
    model_config = ConfigDict(frozen=True)

    client_ip: str
    method: str = "GET"
    path: str = "/"
    headers: Dict[str, str] = Field(default_factory=dict)
    has_guardian_cookie: bool = False
    timestamp: float = Field(default_factory=time.time)
    query: Dict[str, Any] = Field(default_factory=dict)
    body: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("headers", mode="before")
    @classmethod
    def _lowercase_headers(cls, value):
        return {str(k).lower(): str(v) for k, v in (value or {}).items()}

    @field_validator("method", mode="before")
    @classmethod
    def _uppercase_method(cls, value):
        return str(value or "GET").upper()

    def header(self, name: str, default: str = "") -> str:
        """Case-insensitive header lookup"""
        return self.headers.get(name.lower(), default)

    @property
    def user_agent(self) -> str:
        return self.header("User-Agent")

    @property
    def trimmed_path(self) -> str:
        """Path without its leading slash, "" for the root"""
        return self.path.lstrip("/")

    def input(self, key: str, default: Any = None) -> Any:
        """Look up a dotted key in the JSON body, then the query string"""
        for source in (self.body, self.query):
            value: Any = source
            found = True
            for part in key.split("."):
                if isinstance(value, dict) and part in value:
                    value = value[part]
                else:
                    found = False
                    break
            if found:
                return value
        return default

    def has(self, key: str) -> bool:
        return self.input(key, _MISSING) is not _MISSING


_MISSING = object()


class WeightedSignal(BaseModel):
    """Client-side signal object; the weight is informational only"""
    name: str
    weight: Optional[int] = Field(default=None, ge=0)


class ClientReport(BaseModel):
    """Browser-side detection report"""
    signals: List[Union[str, WeightedSignal]]
    path: Optional[str] = None
    url: Optional[str] = None

    @field_validator("signals")
    @classmethod
    def _require_signals(cls, value):
        if not value:
            raise ValueError("signals must not be empty")
        return value


class DetectionResponse(BaseModel):
    """Detection outcome as exposed over HTTP"""
    score: int
    signals: Dict[str, Any]
    detected: bool
    confidence: str
    strategy: str = ""
    response_time_ms: int = 0
