"""
Generative model provider implementations
"""

from .gemini import GeminiModel

__all__ = ['GeminiModel']
