class PaymentError(Exception):
    """Base class for payment flow failures."""


class PaymentNotFound(PaymentError):
    pass


class PaymentAlreadyProcessed(PaymentError):
    pass


class PaymentProcessingError(PaymentError):
    pass


class PaystackError(PaymentError):
    """Raised when the Paystack API is unreachable or refuses a request."""

    def __init__(self, message, status_code=None, response=None):
        super().__init__(message)
        self.status_code = status_code
        self.response = response
