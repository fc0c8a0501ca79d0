"""Attention engine - ranks what needs a user's attention across workspace sources."""

__version__ = "0.1.0"
