from __future__ import annotations

from .base import Translator
from .google import GoogleTranslator

__all__ = ["Translator", "GoogleTranslator"]
