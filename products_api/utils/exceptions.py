"""Custom exceptions for the products API."""


class ProductStoreError(Exception):
    """
    Exception raised when the record store cannot serve a query.

    Attributes:
        message: Error message
        status_code: HTTP status code surfaced by the API layer
    """

    def __init__(self, message: str, status_code: int = 503):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)
