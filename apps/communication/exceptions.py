"""Errors raised by outbound delivery clients."""


class DeliveryError(Exception):
    """An email or SMS could not be handed to the provider."""

    def __init__(self, message, status_code=None):
        self.status_code = status_code
        super().__init__(message)
