from doctemplater.rendering.engine import TreeRenderer

__all__ = ["TreeRenderer"]
