"""
Analytics derived from a projection — danger ranges, summary statistics, health report.
"""

from .health import HealthReport, build_health_report
from .metrics import SummaryStats, compute_summary_stats, investment_inclusive_balances
from .ranges import DangerRange, get_danger_ranges

__all__ = [
    "HealthReport",
    "build_health_report",
    "SummaryStats",
    "compute_summary_stats",
    "investment_inclusive_balances",
    "DangerRange",
    "get_danger_ranges",
]
