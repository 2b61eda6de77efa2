import hashlib
import hmac
import logging
from decimal import Decimal
from typing import Optional

import requests

from quikprint.core.entities import Order, PaymentTransaction
from quikprint.core.exceptions import PaymentFailedError
from quikprint.core.money import from_kobo, to_kobo
from quikprint.core.ports import IPaymentGateway

logger = logging.getLogger(__name__)


# ====================================================================
# GATEWAYS: concrete implementations that talk to external APIs.
# ====================================================================

class PaystackGateway(IPaymentGateway):
    """
    Gateway for the Paystack transactions API.
    Amounts travel in kobo (the smallest Naira unit).
    """

    # Paystack transaction status -> PaymentTransaction.status
    _STATUS_MAP = {
        "success": "success",
        "failed": "failed",
        "abandoned": "abandoned",
        "reversed": "failed",
        "ongoing": "pending",
        "pending": "pending",
        "processing": "pending",
        "queued": "pending",
    }

    def __init__(self, secret_key: str, base_url: str = "https://api.paystack.co",
                 callback_url: Optional[str] = None, timeout: float = 15):
        self.secret_key = secret_key
        self.base_url = base_url.rstrip('/')
        self.callback_url = callback_url or None
        self.timeout = timeout
        if not self.secret_key:
            logger.warning("PAYSTACK_SECRET_KEY is not configured. Real payments will fail.")

    @property
    def _headers(self):
        return {
            "Authorization": f"Bearer {self.secret_key}",
            "Content-Type": "application/json",
        }

    def _request(self, method: str, path: str, **kwargs) -> dict:
        url = f"{self.base_url}{path}"
        try:
            response = requests.request(method, url, headers=self._headers, timeout=self.timeout, **kwargs)
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.RequestException as e:
            logger.error("Paystack request %s %s failed: %s", method, path, e)
            raise PaymentFailedError(f"Could not reach the payment provider: {e}")
        except ValueError:
            logger.error("Paystack returned a non-JSON body for %s %s.", method, path)
            raise PaymentFailedError("Invalid response from the payment provider.")

        if not data.get("status"):
            raise PaymentFailedError(f"Payment provider error: {data.get('message', 'unknown error')}")
        return data.get("data") or {}

    # --- IPaymentGateway ---

    def initialize(self, order: Order, email: str, reference: str) -> PaymentTransaction:
        """Opens a transaction and returns the hosted checkout URL."""
        payload = {
            "email": email,
            "amount": to_kobo(order.total),
            "reference": reference,
            "metadata": {
                "order_id": str(order.id),
                "order_number": order.order_number,
            },
        }
        if self.callback_url:
            payload["callback_url"] = self.callback_url

        data = self._request("POST", "/transaction/initialize", json=payload)
        logger.info("Paystack transaction %s opened for order %s.", reference, order.order_number)
        return PaymentTransaction(
            reference=data.get("reference") or reference,
            status="pending",
            amount=order.total,
            authorization_url=data.get("authorization_url"),
            access_code=data.get("access_code"),
            raw=data,
        )

    def verify(self, reference: str) -> PaymentTransaction:
        """Looks the transaction up on Paystack."""
        data = self._request("GET", f"/transaction/verify/{reference}")
        paystack_status = data.get("status")
        return PaymentTransaction(
            reference=data.get("reference") or reference,
            status=self._STATUS_MAP.get(paystack_status, "pending"),
            amount=from_kobo(data.get("amount") or 0),
            channel=data.get("channel"),
            paid_at=data.get("paid_at"),
            raw=data,
        )

    def is_valid_signature(self, payload: bytes, signature: str) -> bool:
        """Webhook bodies are signed with HMAC-SHA512 of the secret key (x-paystack-signature)."""
        if not self.secret_key or not signature:
            return False
        expected = hmac.new(self.secret_key.encode('utf-8'), payload, hashlib.sha512).hexdigest()
        return hmac.compare_digest(expected, signature)
