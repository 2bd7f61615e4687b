from fastapi import status


class StoreApiError(Exception):
    """Base class for errors rendered by the store API error handler.

    Each subclass pins an HTTP status and a stable error code that clients can
    switch on.
    """

    status_code: int = status.HTTP_400_BAD_REQUEST
    error_code: str = "FRAMEWORK__STORE_API_ERROR"
    message: str = "Store API error"

    def __init__(self, message: str = None, **parameters):
        self.message = message or self.message
        self.parameters = parameters
        super().__init__(self.message)


class CustomerWishlistNotActivatedError(StoreApiError):
    status_code = status.HTTP_403_FORBIDDEN
    error_code = "CHECKOUT__WISHLIST_IS_NOT_ACTIVATED"
    message = "Wishlist is not activated!"


class CustomerNotLoggedInError(StoreApiError):
    status_code = status.HTTP_403_FORBIDDEN
    error_code = "CHECKOUT__CUSTOMER_NOT_LOGGED_IN"
    message = "Customer is not logged in."


class CustomerWishlistNotFoundError(StoreApiError):
    status_code = status.HTTP_404_NOT_FOUND
    error_code = "CHECKOUT__WISHLIST_NOT_FOUND"
    message = "Wishlist for this customer was not found."


class InvalidCriteriaError(StoreApiError):
    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "FRAMEWORK__INVALID_CRITERIA"
    message = "Invalid criteria"


class SalesChannelNotFoundError(StoreApiError):
    status_code = status.HTTP_401_UNAUTHORIZED
    error_code = "FRAMEWORK__API_SALES_CHANNEL_ACCESS_KEY_NOT_FOUND"
    message = "Unable to find a sales channel for the given access key."
