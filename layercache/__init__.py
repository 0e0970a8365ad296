"""Layered caching: stores, codec statistics, chained caches, gauge metrics and msgpack marshaling."""

__version__ = "0.1.0"

__all__ = [
    "bigcache",
    "cache",
    "chain",
    "codec",
    "freecache",
    "marshaler",
    "metrics",
    "store",
]