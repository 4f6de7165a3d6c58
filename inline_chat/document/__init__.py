"""Document sink implementations."""

from .markers import MarkerRegistry
from .text_document import TextDocument

__all__ = ["MarkerRegistry", "TextDocument"]
