"""
Directive parsing for doctemplater.
"""

from doctemplater.parsing.directives import (
    CallDirective,
    Directive,
    DirectiveType,
    EmptyDirective,
    ForeachDirective,
    KeyDirective,
    NumberDirective,
    TextDirective,
)
from doctemplater.parsing.parser import DirectiveParser, parse_directive

__all__ = [
    "Directive",
    "DirectiveType",
    "EmptyDirective",
    "NumberDirective",
    "TextDirective",
    "KeyDirective",
    "ForeachDirective",
    "CallDirective",
    "DirectiveParser",
    "parse_directive",
]
