# client/tests/test_errors.py
"""Tests for error classification."""
import pytest

from client.errors import ErrorKind, TIMEOUT_ERROR, UNKNOWN_SUGGESTION, classify_error, classify_message


class TestClassifyMessage:
    @pytest.mark.parametrize(
        "message,kind",
        [
            ("Failed to fetch", ErrorKind.NETWORK),
            ("network unreachable", ErrorKind.NETWORK),
            ("Request Timeout", ErrorKind.TIMEOUT),
            ("Analysis failed with status 502: Bad Gateway", ErrorKind.SERVER),
            ("internal server error", ErrorKind.SERVER),
            ("storage bucket unavailable", ErrorKind.UPLOAD),
            ("file size too big", ErrorKind.UPLOAD),
            ("invalid analysis result", ErrorKind.VALIDATION),
            ("field required", ErrorKind.VALIDATION),
        ],
    )
    def test_rules(self, message, kind):
        assert classify_message(message).kind == kind

    def test_first_match_wins(self):
        # Mentions both network and timeout
        assert classify_message("network timeout").kind == ErrorKind.NETWORK
        # Mentions both server (500) and upload
        assert classify_message("upload returned 500").kind == ErrorKind.SERVER

    def test_matching_is_case_sensitive(self):
        assert classify_message("Invalid JSON").kind == ErrorKind.UNKNOWN

    def test_unknown_keeps_message(self):
        info = classify_message("The cat sat on the keyboard")

        assert info.kind == ErrorKind.UNKNOWN
        assert info.message == "The cat sat on the keyboard"
        assert info.suggestion == UNKNOWN_SUGGESTION

    def test_canned_text(self):
        info = classify_message("Failed to fetch")

        assert info.message == "Network connection failed"
        assert info.suggestion == "Please check your network connection and try again"


class TestClassifyError:
    def test_structured_kind_wins(self):
        # Message alone would classify as server because of the status code
        info = classify_error("Analysis failed with status 500: Image data and filename are required", "validation")
        assert info.kind == ErrorKind.VALIDATION

    def test_unknown_kind_falls_back_to_message(self):
        assert classify_error("Failed to fetch", "unknown").kind == ErrorKind.NETWORK

    def test_unrecognised_kind_falls_back_to_message(self):
        assert classify_error("gateway timeout", "teapot").kind == ErrorKind.TIMEOUT

    def test_timeout_error_constant(self):
        assert TIMEOUT_ERROR.kind == ErrorKind.TIMEOUT
        assert TIMEOUT_ERROR.to_dict()["kind"] == "timeout"
