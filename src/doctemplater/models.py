"""
Configuration models for doctemplater.
"""

from pydantic import BaseModel, ConfigDict


class RenderOptions(BaseModel):
    """Knobs controlling directive evaluation and text output.

    Attributes:
      - falsy_as_missing: Treat false-equivalent scalars (``False``, ``0``,
        ``""``) met during a dotted lookup as misses, like ``None`` and absent
        keys, so the lookup falls back to the enclosing scope. Empty
        collections still count as found. This is the legacy policy and the
        default.
      - strict_call_arguments: Reject function arguments that resolve to a
        collection instead of silently passing ``None``.
      - preserve_space: Mark rewritten text runs with ``xml:space="preserve"``
        when the new text has leading or trailing whitespace.
    """

    model_config = ConfigDict(frozen=True)

    falsy_as_missing: bool = True
    strict_call_arguments: bool = False
    preserve_space: bool = True
