"""
Services Package - caller-facing workflows built on the session layer.
"""

from langgraph_bridge.services.turns import TurnService

__all__ = ["TurnService"]
