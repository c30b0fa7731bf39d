"""Utilities for the design pattern detector."""

from .logger import ConsoleReporter, setup_logging

__all__ = ['ConsoleReporter', 'setup_logging']
