"""
Application Layer: Ports (Interfaces)
Defines how the Application layer expects to interact with the Infrastructure.
"""
from typing import Protocol

from garage_nft.domain import ApiEnvelope, Environment, Network


class IMarketClient(Protocol):
    """Interface for the Garage REST API"""

    async def request(
        self,
        network: Network,
        endpoint: str,
        environment: Environment = Environment.PRODUCTION,
    ) -> ApiEnvelope:
        """One GET of `{base}/{network}/{endpoint}`; raises GarageError subclasses"""
        ...
