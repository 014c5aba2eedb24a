"""
Run Logging Module

Provides per-run logging for the pipeline simulator.
"""
from flowdesk.logging.run_logger import RunLogEntry, RunLogger, get_run_logger

__all__ = ['RunLogEntry', 'RunLogger', 'get_run_logger']
