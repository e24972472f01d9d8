"""
bincache - Observability Module

Structured logging setup for the bincache logger hierarchy.

Usage:
    from bincache.observability import setup_logging

    setup_logging("DEBUG")  # cache HIT/MISS/SET traces become visible
"""

from .logs import JSONFormatter, bind_run_id, get_run_id, setup_logging

__all__ = [
    "JSONFormatter",
    "bind_run_id",
    "get_run_id",
    "setup_logging",
]
