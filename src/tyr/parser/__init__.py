"""
Parser module for Tyr assembly.
"""

from .parser import Parser

__all__ = ["Parser"]
