"""
Outbound port for SMS vendors.

The delivery service depends on this interface only. Concrete vendors live
in ``sms_delivery.providers`` and are picked by the provider factory.
"""

from abc import ABC, abstractmethod

from ..models import DeliveryResult, Message, ProviderName


class SmsProvider(ABC):
    """
    Outbound port for sending a single SMS through a vendor.

    Implementations must not raise from ``send_sms``: vendor exceptions are
    translated into a failed DeliveryResult at this boundary.
    """

    @property
    @abstractmethod
    def name(self) -> ProviderName:
        """Return the vendor this provider talks to."""
        ...

    @abstractmethod
    async def send_sms(self, message: Message) -> DeliveryResult:
        """
        Send a message through the vendor.

        Args:
            message: Destination, body and optional sender override

        Returns:
            DeliveryResult with vendor message ID or a classified error
        """
        ...

    @abstractmethod
    def validate_config(self) -> bool:
        """Return True if the credentials this vendor needs are present."""
        ...

    @abstractmethod
    def estimated_cost(self, message: Message) -> float:
        """Estimated cost in US cents. Used for logging only."""
        ...
