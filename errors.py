"""
Error taxonomy for a generation submission.

Every failure a user can hit while generating a script derives from
GenerationError, so the form session can catch them all in one place
and show a single message.
"""

GENERIC_FAILURE_MESSAGE = "Failed to generate script. Please check your API key and try again."


class GenerationError(Exception):
    """Base class for everything that can fail during a submission."""


class ImageReadError(GenerationError):
    """The uploaded file could not be read or is not a usable image."""


class NetworkError(GenerationError):
    """The AI provider could not be reached or rejected the request."""


class MalformedResponseError(GenerationError):
    """The AI provider answered, but not with the expected JSON object."""


class GenerationFailed(GenerationError):
    """Coarse-grained failure raised by generator.generate().

    The underlying NetworkError / MalformedResponseError is chained as
    __cause__ and only written to the log.
    """

    def __init__(self, message: str = GENERIC_FAILURE_MESSAGE):
        super().__init__(message)
