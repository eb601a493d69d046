"""
Interfaces module - adapters for the annotation core.

Provides adapters to connect the core annotation logic with event
sources such as a browser bridge or a recorded event script.
"""

from .event_adapter import EventScriptAdapter

__all__ = ['EventScriptAdapter']
