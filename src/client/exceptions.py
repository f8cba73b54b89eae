"""
Client exceptions - Failures local to the registration client.

Account rejections reuse the domain exceptions (InvalidToken,
UsernameTaken); the types here cover transport and usage errors.
"""


class ClientError(Exception):
    """Base class for registration client errors."""

    pass


class ServiceUnavailable(ClientError):
    """The registration API could not be reached or answered unexpectedly."""

    pass


class GateBusy(ClientError):
    """A submission is already in flight for this gate."""

    pass
