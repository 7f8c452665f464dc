from typing import Optional


class IntegrationError(Exception):
    """An outbound integration call failed or was misconfigured."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class PaymentVerificationError(Exception):
    """Paystack could not confirm a successful payment for a reference."""

    def __init__(self, message: str, status_code: int = 400):
        self.status_code = status_code
        super().__init__(message)
