"""Building blocks for small distributed programs: a key-value store and TCP server, a squaring stream, and mining messages, a miner and a work scheduler."""

__version__ = "0.1.0"
__all__ = ["kvstore", "squarer", "kvserver", "message", "miner", "scheduler"]