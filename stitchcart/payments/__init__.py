"""
Payments — one dispatcher in front of card, PayPal and Google Pay.

    from stitchcart import payments as Pay

    dispatcher = Pay.PaymentDispatcher([
        Pay.StripeProvider(stripe.StripeClient(secret_key)),
        Pay.PayPalProvider(paypal_http, client_id, client_secret, approve=open_approval),
        Pay.GooglePayProvider(),
    ])
    result = await dispatcher.process_payment(Pay.PaymentMethod.PAYPAL, data)

    result.success      payment captured
    result.cancelled    payer walked away (not a failure)
    result.requires_action  payer still has to confirm (3-D Secure, PayPal approval)
    result.error        readable message otherwise
"""

from stitchcart.payments._types import (
    PaymentMethod,
    BillingAddress,
    LineItem,
    PaymentData,
    PaymentStatus,
    PaymentResult,
    PaymentErrorKind,
    PaymentError,
    PaymentErrors,
    PaymentIntent,
    PaymentProvider,
)
from stitchcart.payments._validate import (
    MINIMUM_AMOUNT,
    SUPPORTED_CURRENCIES,
    is_valid_email,
    is_currency_supported,
    validate_paypal_data,
    validate_payment_data,
    format_amount,
)
from stitchcart.payments._stripe import StripeProvider, intent_params
from stitchcart.payments._paypal import (
    Approver,
    PayPalProvider,
    order_to_wire,
    order_from_wire,
    capture_from_wire,
)
from stitchcart.payments._wallet import GooglePayProvider, NOT_AVAILABLE
from stitchcart.payments._dispatch import (
    UNSUPPORTED_METHOD,
    result_from_error,
    PaymentDispatcher,
)

__all__ = (
    # Types
    "PaymentMethod",
    "BillingAddress",
    "LineItem",
    "PaymentData",
    "PaymentStatus",
    "PaymentResult",
    "PaymentErrorKind",
    "PaymentError",
    "PaymentErrors",
    "PaymentIntent",
    "PaymentProvider",
    # Validation
    "MINIMUM_AMOUNT",
    "SUPPORTED_CURRENCIES",
    "is_valid_email",
    "is_currency_supported",
    "validate_paypal_data",
    "validate_payment_data",
    "format_amount",
    # Providers
    "StripeProvider",
    "intent_params",
    "Approver",
    "PayPalProvider",
    "order_to_wire",
    "order_from_wire",
    "capture_from_wire",
    "GooglePayProvider",
    "NOT_AVAILABLE",
    # Dispatch
    "UNSUPPORTED_METHOD",
    "result_from_error",
    "PaymentDispatcher",
)
