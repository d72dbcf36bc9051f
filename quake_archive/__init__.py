"""
quake-archive: archive of finalized seismic events with asynchronous
enrichment and display filtering.
"""

__version__ = "0.1.0"
