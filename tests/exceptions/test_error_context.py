"""
Tests for error context and exception formatting.
"""

from doctemplater.exceptions import (
    DirectiveEvaluationError,
    DirectiveSyntaxError,
    DocTemplaterError,
    ErrorContext,
    MalformedDocumentError,
    PackageError,
    TemplateStateError,
    UndefinedFunctionError,
)


class TestErrorContext:
    """Tests for ErrorContext dataclass."""

    def test_empty_context_formats_to_nothing(self):
        """Test that a context without information adds no lines."""
        assert ErrorContext().format_location() == ""

    def test_full_context(self):
        """Test that every known detail is listed."""
        ctx = ErrorContext(
            comment_id="4",
            directive_text="money(total)",
            function_name="money",
            part_name="word/document.xml",
        )
        formatted = ctx.format_location()

        assert "in comment 4" in formatted
        assert "calling function: money" in formatted
        assert "part: word/document.xml" in formatted
        assert "directive: money(total)" in formatted


class TestExceptionMessages:
    """Tests for messages of the exception types."""

    def test_syntax_error_message(self):
        """Test that syntax errors show reason, directive and position."""
        error = DirectiveSyntaxError("Unexpected char: )", "a)", 1)

        assert str(error) == "Unexpected char: ) in directive 'a)' at position 1"
        assert error.reason == "Unexpected char: )"

    def test_syntax_error_with_context(self):
        """Test that with_context keeps the original details."""
        error = DirectiveSyntaxError("Invalid key: 'a..b'", "a..b", 0)
        enriched = error.with_context(ErrorContext(comment_id="9"))

        assert enriched.raw == "a..b"
        assert enriched.position == 0
        assert "in comment 9" in str(enriched)

    def test_undefined_function_message(self):
        """Test that the function name is reported."""
        error = UndefinedFunctionError("money")

        assert str(error) == "Undefined function: money"
        assert error.name == "money"

    def test_hierarchy(self):
        """Test that every error derives from DocTemplaterError."""
        for error_type in (
            DirectiveSyntaxError,
            UndefinedFunctionError,
            DirectiveEvaluationError,
            MalformedDocumentError,
            PackageError,
            TemplateStateError,
        ):
            assert issubclass(error_type, DocTemplaterError)

    def test_malformed_document_context(self):
        """Test that structural errors carry the comment id."""
        error = MalformedDocumentError(
            "Comment range has no end marker", ErrorContext(comment_id="3")
        )

        assert "in comment 3" in str(error)
        assert error.context.comment_id == "3"
