"""Custom exceptions used across FieldTrack."""


class FieldTrackError(Exception):
    """Base error for the application."""


class ConfigError(FieldTrackError):
    """Configuration related error."""
