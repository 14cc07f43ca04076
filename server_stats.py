"""
Server Statistics module
"""

from datetime import datetime
from models import ServerStats


class StatsCollector:
    """Collect and manage server statistics"""

    def __init__(self, stats: ServerStats):
        self.stats = stats

    def increment_total(self):
        """Increment total request count"""
        self.stats.total_requests += 1

    def record_decision(self, detected: bool, strategy: str):
        """Count one analyzed request and the strategy applied to it"""
        if detected:
            self.stats.detected_count += 1
        else:
            self.stats.passed_count += 1
        self.stats.strategy_counts[strategy] = self.stats.strategy_counts.get(strategy, 0) + 1

    def record_report(self, accepted: bool):
        """Count a client-side report"""
        if accepted:
            self.stats.client_reports += 1
        else:
            self.stats.rejected_reports += 1

    def get_stats(self) -> dict:
        """Get current statistics as dictionary"""
        detection_rate = 0.0
        if self.stats.total_requests > 0:
            detection_rate = (self.stats.detected_count / self.stats.total_requests) * 100

        uptime_seconds = (datetime.now() - self.stats.start_time).total_seconds()
        requests_per_sec = self.stats.total_requests / uptime_seconds if uptime_seconds > 0 else 0

        return {
            "total_requests": self.stats.total_requests,
            "detected_count": self.stats.detected_count,
            "passed_count": self.stats.passed_count,
            "client_reports": self.stats.client_reports,
            "rejected_reports": self.stats.rejected_reports,
            "strategies": dict(self.stats.strategy_counts),
            "detection_rate": detection_rate,
            "uptime_seconds": uptime_seconds,
            "requests_per_sec": requests_per_sec
        }
