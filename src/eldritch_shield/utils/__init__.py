"""Utility modules for configuration, logging, timing and geometry."""
from .clock import FrameClock
from .config import load_config
from .logger import setup_logging

__all__ = ["FrameClock", "load_config", "setup_logging"]
