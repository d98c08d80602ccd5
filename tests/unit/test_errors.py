"""
Unit tests for error types.
"""

from docschema.errors import (
    AttachmentUnavailable,
    DocSchemaError,
    InvalidSchemaUsage,
    UnsupportedFormat,
    WriteRejected,
)


class TestErrors:
    """All errors share the DocSchemaError shape."""

    def test_write_rejected(self):
        err = WriteRejected("store is read-only", "/posts/1")

        assert isinstance(err, DocSchemaError)
        assert err.code == "WRITE_REJECTED"
        assert err.details == {"reason": "store is read-only", "path": "/posts/1"}
        assert "/posts/1" in str(err)

    def test_write_rejected_without_path(self):
        assert str(WriteRejected("nope")) == "Write rejected: nope"

    def test_attachment_unavailable(self):
        err = AttachmentUnavailable("/images/a.png")

        assert err.code == "ATTACHMENT_UNAVAILABLE"
        assert err.path == "/images/a.png"

    def test_unsupported_format(self):
        err = UnsupportedFormat("es.4", "/a")

        assert err.code == "UNSUPPORTED_FORMAT"
        assert err.format == "es.4"

    def test_invalid_schema_usage(self):
        err = InvalidSchemaUsage("read-only")

        assert err.code == "INVALID_SCHEMA_USAGE"
        assert err.details == {}

    def test_base_defaults(self):
        err = DocSchemaError("boom")

        assert err.code == "DOCSCHEMA_ERROR"
        assert err.message == "boom"
