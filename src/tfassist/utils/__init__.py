"""Utility functions for tfassist."""

from tfassist.utils.logging_setup import setup_logging
from tfassist.utils.llm_client import OpenAIChatModel

__all__ = ["setup_logging", "OpenAIChatModel"]
