"""
rudder CLI.

Usage:
    rudder routes myproject.app:app
    rudder serve myproject.app:app --port 8000 --reload
    rudder version
"""

from .. import __version__

__cli_name__ = "rudder"
