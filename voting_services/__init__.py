"""Voter, poll and votes REST services plus a file-backed todo CLI."""

__version__ = '2.0.0'
