"""Logging for compute-firewall."""

from compute_firewall.observability.logger import logger
from compute_firewall.observability.logging import LogConfig, setup_logging, teardown_logging

__all__ = ["LogConfig", "logger", "setup_logging", "teardown_logging"]
