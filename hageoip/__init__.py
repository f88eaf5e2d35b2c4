"""
ha-geo-ip: keep a filtered, verified copy of the HAProxy geo-ip feed.
"""

__version__ = "0.3.0"
