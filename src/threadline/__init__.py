"""Threadline: communities, threaded discussions, votes and ranked feeds."""

__version__ = "0.1.0"
