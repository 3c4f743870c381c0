"""
Command-line interface for the fleetmon server.
"""

from .main import main_cli

__all__ = ["main_cli"]
