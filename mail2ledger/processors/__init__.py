"""Mailbox processors."""

from .base import BaseProcessor
from .poller import Poller, run_cycle, select_window

__all__ = ["BaseProcessor", "Poller", "run_cycle", "select_window"]
