"""VFast guest-house booking workflow service."""

__version__ = "0.1.0"
