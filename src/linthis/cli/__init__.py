#!/usr/bin/env python3
"""
linthis plugin CLI package.
"""

from .parsers import build_parser, main
from .utils import console, custom_style

__all__ = ["build_parser", "console", "custom_style", "main"]
