"""
Shared fixtures: a small directory and an in-memory Garage client.
"""
from typing import Any, Dict, List, Optional, Tuple

import pytest

from garage_nft.domain import (
    ApiEnvelope,
    CollectionDirectory,
    CollectionEntry,
    ContractAddress,
    Environment,
    GarageError,
    Network,
)

MR_JIM = "0xcda69aa111eb386de9e2881e039e99bc43ac21f6951e3da9b71ae4450f67858d"
BAKTERIA = "0x33f6d2bf0762223229bc5b17cee8c1c0090be95dfd3ece5b63e8efb9e456ee21"


class FakeMarketClient:
    """Records every request and answers with a canned envelope or error"""

    def __init__(self, payload: Optional[Dict[str, Any]] = None, error: Optional[GarageError] = None) -> None:
        self.payload = payload if payload is not None else {"success": True, "data": {}}
        self.error = error
        self.calls: List[Tuple[Network, str, Environment]] = []

    async def request(
        self,
        network: Network,
        endpoint: str,
        environment: Environment = Environment.PRODUCTION,
    ) -> ApiEnvelope:
        self.calls.append((network, endpoint, environment))
        if self.error is not None:
            raise self.error
        return ApiEnvelope.from_payload(self.payload)

    @property
    def last_endpoint(self) -> str:
        return self.calls[-1][1]


@pytest.fixture
def directory() -> CollectionDirectory:
    return CollectionDirectory([
        CollectionEntry(ContractAddress(MR_JIM), "Mr. Jim"),
        CollectionEntry(ContractAddress(BAKTERIA), "Bakteria"),
    ])


@pytest.fixture
def fake_client() -> FakeMarketClient:
    return FakeMarketClient()
