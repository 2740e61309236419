"""
Payment gateway client.

Only customer creation is needed by the network services: every franchisee
and establishment gets a customer record at the billing provider so it can
later be charged. The call is best-effort and always happens outside the
database transaction that created the local row.
"""
import logging
from typing import Optional

import httpx
from django.conf import settings

logger = logging.getLogger(__name__)


class GatewayError(Exception):
    """Raised when the gateway cannot create or return a customer."""
    pass


class PaymentGateway:
    """Interface of the billing provider used by the franchise network."""

    def create_customer(self, *, name: str, document: str, email: str, phone: str = '') -> str:
        """Create a customer and return the provider's customer id."""
        raise NotImplementedError


class AsaasGateway(PaymentGateway):
    """Asaas REST client (``POST /customers``)."""

    def __init__(self, *, base_url: str, api_key: str, timeout: float = 10.0,
                 transport: Optional[httpx.BaseTransport] = None):
        self.base_url = base_url.rstrip('/')
        self.api_key = api_key
        self.timeout = timeout
        self.transport = transport

    def create_customer(self, *, name: str, document: str, email: str, phone: str = '') -> str:
        if not self.api_key:
            raise GatewayError('Payment gateway API key is not configured')

        payload = {
            'name': name,
            'cpfCnpj': ''.join(ch for ch in document if ch.isdigit()),
            'email': email,
        }
        if phone:
            payload['mobilePhone'] = ''.join(ch for ch in phone if ch.isdigit())

        try:
            with httpx.Client(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self.transport,
            ) as client:
                response = client.post(
                    '/customers',
                    json=payload,
                    headers={'access_token': self.api_key},
                )
                response.raise_for_status()
                data = response.json()
        except httpx.TimeoutException as e:
            raise GatewayError(f'Payment gateway timed out: {e}') from e
        except httpx.HTTPStatusError as e:
            raise GatewayError(
                f'Payment gateway rejected customer ({e.response.status_code}): {e.response.text[:200]}'
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            raise GatewayError(f'Payment gateway request failed: {e}') from e

        customer_id = data.get('id') if isinstance(data, dict) else None
        if not customer_id:
            raise GatewayError('Payment gateway response did not include a customer id')

        logger.info('Created gateway customer %s for %s', customer_id, name)
        return customer_id


def get_payment_gateway() -> PaymentGateway:
    """Build the configured gateway client from settings.PAYMENT_GATEWAY."""
    options = settings.PAYMENT_GATEWAY
    return AsaasGateway(
        base_url=options['BASE_URL'],
        api_key=options['API_KEY'],
        timeout=options.get('TIMEOUT_SECONDS', 10.0),
    )
