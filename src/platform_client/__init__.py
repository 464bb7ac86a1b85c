"""
Platform client module.

Talks to the RingCentral REST API on behalf of one bot user:
- OAuth authorization URL, code exchange, refresh and revoke
- Extension info, company directory, phone numbers and address-book search
"""

from .base import PlatformClient
from .ringcentral import PlatformConfig, RingCentralClient

__all__ = ["PlatformClient", "PlatformConfig", "RingCentralClient"]
