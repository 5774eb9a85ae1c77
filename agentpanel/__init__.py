"""Agent Panel - a polling monitor for AI assistant sessions running in kitty."""

__version__ = "0.1.0"
