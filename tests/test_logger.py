"""
Tests for logging configuration.
"""

from auragold.utils.logger import REDACTED, redact_secrets


class TestRedactSecrets:
    """Secret-looking keys never reach the renderer."""

    def test_passcode_masked(self):
        event = redact_secrets(None, "info", {"event": "login", "passcode": "2026"})
        assert event == {"event": "login", "passcode": REDACTED}

    def test_key_match_is_case_insensitive(self):
        event = redact_secrets(None, "info", {"event": "x", "Authorization": "Bearer abc"})
        assert event["Authorization"] == REDACTED

    def test_other_keys_untouched(self):
        event = redact_secrets(None, "info", {"event": "x", "treatment": "IPL", "pin_count": 2})
        assert event == {"event": "x", "treatment": "IPL", "pin_count": 2}
