"""
Directive evaluation: scope chains and the comments resolver.
"""

from doctemplater.execution.resolution import (
    CommentsResolver,
    ResolvedValue,
    ScalarValue,
    SequenceValue,
)
from doctemplater.execution.scopes import ScopeChain

__all__ = [
    "ScopeChain",
    "CommentsResolver",
    "ResolvedValue",
    "ScalarValue",
    "SequenceValue",
]
