"""Crypto Tracker -- cryptocurrency prices in a local currency, served as a web dashboard."""

__version__ = "0.1.0"
