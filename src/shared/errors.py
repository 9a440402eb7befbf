class HandlerError(Exception):
    """
    Base class for failures that end a request.

    Carries the HTTP status code and the error tag that the response mapper
    puts in the envelope body.
    """
    status_code: int = 500

    def __init__(self, error: str, message: str, original_error: Exception | None = None):
        super().__init__(message)
        self.error = error
        self.message = message
        self.original_error = original_error


class ClientInputError(HandlerError):
    """Malformed or missing parameter, or a destination collision."""
    status_code = 400


class ResourceUnavailableError(HandlerError):
    """A source object could not be found or read."""
    status_code = 500


class CapabilityFailureError(HandlerError):
    """Browser automation or diff generation failed at some stage."""
    status_code = 500


class PublishError(HandlerError):
    """The final artifact could not be stored."""
    status_code = 500
