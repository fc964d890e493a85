"""Ports implemented by the infrastructure layer."""

from battle_voting.application.interfaces.analytics import AnalyticsSink, log_event_safely

__all__ = [
    "AnalyticsSink",
    "log_event_safely",
]
