from __future__ import annotations

from pyflexopts._redact import REDACTED, is_sensitive_key, redact_option_value, redact_options
from pyflexopts.config import DEFAULT_SENSITIVE_KEYS


def test_redact_option_value_masks_sensitive_keys() -> None:
    assert redact_option_value("DB_PASSWORD", "pw", sensitive_keys=DEFAULT_SENSITIVE_KEYS) == REDACTED
    assert redact_option_value("host", "localhost", sensitive_keys=DEFAULT_SENSITIVE_KEYS) == "localhost"
    assert redact_option_value("token", None, sensitive_keys=DEFAULT_SENSITIVE_KEYS) is None


def test_redact_option_value_truncates_long_strings() -> None:
    redacted = redact_option_value("blob", "x" * 600, sensitive_keys=(), max_string=10)

    assert redacted is not None
    assert redacted.startswith("x" * 10)
    assert "<truncated>" in redacted


def test_redact_options() -> None:
    redacted = redact_options({"apiKey": "abc", "name": "n"}, sensitive_keys={"api_key"})

    assert redacted == {"apiKey": REDACTED, "name": "n"}


def test_is_sensitive_key() -> None:
    assert is_sensitive_key("user_pin", DEFAULT_SENSITIVE_KEYS)
    assert not is_sensitive_key(None, DEFAULT_SENSITIVE_KEYS)
    assert not is_sensitive_key("", DEFAULT_SENSITIVE_KEYS)


def test_sensitive_key_matches_whole_words() -> None:
    for key in ("apiKey", "API-TOKEN", "user_pin", "db.password", "private_key"):
        assert is_sensitive_key(key, DEFAULT_SENSITIVE_KEYS), key
    for key in ("shipping_mode", "ping_interval", "monkey", "tokenizer_name"):
        assert not is_sensitive_key(key, DEFAULT_SENSITIVE_KEYS), key


def test_default_sensitive_keys_include_key() -> None:
    assert "key" in DEFAULT_SENSITIVE_KEYS
