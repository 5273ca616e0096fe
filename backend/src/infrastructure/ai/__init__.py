"""AI Infrastructure - Adapters for extraction engines.

This module contains concrete implementations of AI domain ports.
"""

from .anthropic_provider import AnthropicProvider

__all__ = [
    "AnthropicProvider",
]
