"""
Live input masks built on QLineEdit's input-mask engine.
"""

from .mask_registry import MaskInstance, MaskRegistry

__all__ = ["MaskInstance", "MaskRegistry"]
