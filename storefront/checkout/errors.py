"""
Erreurs du tunnel de commande. Chaque erreur porte un user_message affichable tel quel.
"""
from typing import Optional

from storefront.config import SUPPORT_CONTACT


class CheckoutError(Exception):
    user_message = "Something went wrong during checkout. Please try again."

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.user_message)
        if message:
            self.user_message = message


class InvalidTransition(CheckoutError):
    user_message = "This action is not available at the current checkout step."


class ValidationError(CheckoutError):
    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field


class GatewayUnavailable(CheckoutError):
    user_message = "The payment service is unavailable right now. Please try again later."


class IntentCreationFailed(CheckoutError):
    user_message = "We could not start the payment. Please try again."


class PaymentFailed(CheckoutError):
    user_message = "Your payment did not go through. You have not been charged for this attempt."

    def __init__(self, message: Optional[str] = None, code: Optional[str] = None, payment_reference: Optional[str] = None):
        super().__init__(message)
        self.code = code
        self.payment_reference = payment_reference


class VerificationFailed(CheckoutError):
    def __init__(self, payment_reference: Optional[str], reason: str = ""):
        self.payment_reference = payment_reference
        self.reason = reason
        super().__init__(
            "We could not confirm your payment. If you were charged, contact "
            f"{SUPPORT_CONTACT} with payment reference {payment_reference or 'unknown'}."
        )


class PersistenceFailed(CheckoutError):
    def __init__(self, payment_reference: Optional[str], reason: str = ""):
        self.payment_reference = payment_reference
        self.reason = reason
        super().__init__(
            "Your payment was received but order creation failed. Contact "
            f"{SUPPORT_CONTACT} with payment reference {payment_reference or 'unknown'}."
        )


class CancelledByUser(CheckoutError):
    user_message = "Payment cancelled. Your details have been kept."
