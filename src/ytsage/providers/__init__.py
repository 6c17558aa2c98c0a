"""Text-generation providers.

Concrete providers are imported lazily by :func:`create_generator` so that
only the selected SDK is loaded.
"""

from .base import TextGenerator
from .factory import create_generator

__all__ = [
    "TextGenerator",
    "create_generator",
]
