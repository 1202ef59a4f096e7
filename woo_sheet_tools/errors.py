"""Exceptions raised by the sheet tools. Each carries the exit status the CLI returns."""


class SheetToolsError(Exception):
    exit_code = 1


class ConfigError(SheetToolsError):
    """Required WordPress settings are missing or malformed."""

    exit_code = 2


class SelectionError(SheetToolsError):
    """The selected workbook range can't be used for the requested command."""

    exit_code = 2


class MediaLibraryError(SheetToolsError):
    """A media page could not be fetched or decoded at the transport level."""
