"""feedguard: reliability, admission control and caching for unreliable content feeds."""

__version__ = "1.0.0"
