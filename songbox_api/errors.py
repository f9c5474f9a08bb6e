class SongboxError(Exception):
    """Base class for every error raised by songbox."""


class ValidationError(SongboxError, ValueError):
    """Malformed input, e.g. a song id that is not a positive integer."""


class StorageError(SongboxError):
    """The song table (or the API in front of it) could not be reached."""


class PlaybackError(SongboxError):
    """The media resource failed to load or start a song."""
