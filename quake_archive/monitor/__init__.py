"""
Station monitoring support: the picking flag and the redraw tick.
"""

from .redraw import RedrawTicker
from .station import MonitoredStation

__all__ = ["MonitoredStation", "RedrawTicker"]
