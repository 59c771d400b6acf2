"""Authenticated reverse-proxy gateway for the Gemini generateContent API."""

__version__ = "1.0.0"
