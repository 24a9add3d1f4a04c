"""
Workday Voice Agent.

A push-to-talk voice assistant ("Viki") on the OpenAI Realtime API that can
look up the user's workday events from per-date JSON documents.
"""

__version__ = "0.1.0"
