"""
doctemplater - render .docx templates driven by reviewer comments

Each comment in a template is a small directive: a key to print, a collection
to repeat the commented range for, or a function call.
"""

from importlib.metadata import version

from doctemplater.execution import CommentsResolver, ScopeChain
from doctemplater.models import RenderOptions
from doctemplater.parsing import parse_directive
from doctemplater.template import Template, open_template

__version__ = version("doctemplater")

__all__ = [
    "__version__",
    "Template",
    "open_template",
    "RenderOptions",
    "ScopeChain",
    "CommentsResolver",
    "parse_directive",
]
