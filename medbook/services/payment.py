from dataclasses import dataclass
from typing import Optional, Protocol
import logging
import stripe

from ..core.config import Settings
from ..core.exceptions import PaymentInitiationFailed

logger = logging.getLogger(__name__)

@dataclass(frozen=True)
class CheckoutIntent:
    amount_minor_units: int
    currency: str
    description: str
    success_redirect: str
    cancel_redirect: str
    reference_id: str
    product_name: str = "Appointment"
    image_url: Optional[str] = None
    customer_email: Optional[str] = None

@dataclass(frozen=True)
class CheckoutSession:
    session_id: str
    redirect_url: Optional[str] = None

class PaymentInitiator(Protocol):
    def create_checkout(self, intent: CheckoutIntent) -> CheckoutSession:
        """Open a hosted checkout; raise ``PaymentInitiationFailed`` on any failure."""
        ...

class StripePaymentInitiator:
    """Creates Stripe Checkout sessions for a single appointment."""

    def __init__(self, api_key: Optional[str], timeout: float = 10.0):
        self.api_key = api_key
        self.timeout = timeout
        # Bounded request time and no retries on the booking path
        stripe.default_http_client = stripe.new_default_http_client(timeout=timeout)
        stripe.max_network_retries = 0

    def build_params(self, intent: CheckoutIntent) -> dict:
        product_data = {
            "name": intent.product_name,
            "description": intent.description or intent.product_name,
        }
        if intent.image_url:
            product_data["images"] = [intent.image_url]

        params = {
            "payment_method_types": ["card"],
            "mode": "payment",
            "success_url": intent.success_redirect,
            "cancel_url": intent.cancel_redirect,
            "client_reference_id": intent.reference_id,
            "line_items": [
                {
                    "price_data": {
                        "currency": intent.currency,
                        "unit_amount": intent.amount_minor_units,
                        "product_data": product_data,
                    },
                    "quantity": 1,
                },
            ],
        }
        if intent.customer_email:
            params["customer_email"] = intent.customer_email
        return params

    def create_checkout(self, intent: CheckoutIntent) -> CheckoutSession:
        if not self.api_key:
            logger.error("STRIPE_API_KEY is not configured")
            raise PaymentInitiationFailed()

        try:
            session = stripe.checkout.Session.create(
                api_key=self.api_key, **self.build_params(intent)
            )
        except stripe.StripeError as e:
            # Timeouts surface here as APIConnectionError
            logger.error(f"Stripe error while creating checkout session: {e}", exc_info=True)
            raise PaymentInitiationFailed() from e

        return CheckoutSession(session_id=session.id, redirect_url=session.url)

def create_payment_initiator(settings: Settings) -> StripePaymentInitiator:
    return StripePaymentInitiator(
        api_key=settings.STRIPE_API_KEY,
        timeout=settings.STRIPE_TIMEOUT_SECONDS,
    )
