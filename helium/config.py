"""Validation helpers for configuration values."""

from .errors import HeError, ReturnCode

CONFIG_TEXT_FIELD_LENGTH = 50


def is_string_length_okay(value):
    """Return True if ``value`` fits in a configuration text field."""
    return len(value) <= CONFIG_TEXT_FIELD_LENGTH


def is_string_too_long(value):
    """Return True if ``value`` does not fit in a configuration text field."""
    return not is_string_length_okay(value)


def is_empty_string(value):
    """Return True if ``value`` is empty."""
    return value == ""


def validate_config_string(value):
    """Check a configuration string and return the value as it is stored.

    The stored field always keeps room for a terminator, so a value of the
    full field length loses its final character.
    """
    if value is None:
        raise HeError(ReturnCode.ERR_NULL_POINTER)
    if is_empty_string(value):
        raise HeError(ReturnCode.ERR_EMPTY_STRING)
    if is_string_too_long(value):
        raise HeError(ReturnCode.ERR_STRING_TOO_LONG)
    return value[: CONFIG_TEXT_FIELD_LENGTH - 1]


def validate_config_int(value):
    """Check a configuration integer, rejecting negatives, and return it."""
    if value < 0:
        raise HeError(ReturnCode.ERR_NEGATIVE_NUMBER)
    return value