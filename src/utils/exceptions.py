PARCEL_NOT_FOUND_MESSAGE = "No Parcel matches the given query."


class InvalidDataError(Exception):
    """The one error kind raised by the Sendcloud integration.

    Provider errors, transport failures, malformed webhooks and missing
    credentials are all told apart by ``message`` only.
    """

    kind = "invalid_data"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __repr__(self):
        return f"InvalidDataError({self.message!r})"
