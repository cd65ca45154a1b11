"""
Domain Layer: Collection Directory
Static contract-address <-> display-name lookup for known collections.
"""
from types import MappingProxyType
from typing import Dict, Iterable, Iterator, List, Mapping, Tuple

from .models import CollectionEntry, ContractAddress, InvalidConfigurationError

ADDRESS_PREFIX = "0x"
# Anything longer than this with the prefix is taken as an address as-is
MIN_ADDRESS_LENGTH = 10

KNOWN_COLLECTIONS: Tuple[CollectionEntry, ...] = tuple(
    CollectionEntry(ContractAddress(address), name)
    for address, name in (
        ("0xcda69aa111eb386de9e2881e039e99bc43ac21f6951e3da9b71ae4450f67858d", "Mr. Jim"),
        ("0x33f6d2bf0762223229bc5b17cee8c1c0090be95dfd3ece5b63e8efb9e456ee21", "Bakteria"),
        ("0xf0b6e2320caccb9071e45b1150b4da6f5edf74e7375ac6c87084822a87832de2", "BearBros"),
        ("0xb03ec5c6eeaf6d09ed6755e21dff896234c8f509b813f3ff17ef14a436fa8462", "Sangoro"),
        ("0x202b55f66b8bafaf3b4fdf0653f1a4320607781dbd368bb576bc09250dd7dbbe", "Koby"),
        ("0x0d34ec513cbaf7e15737120725cd3e235a8fd1716fa0eedc5da4a64c182e5a9f", "FuelMonkees"),
        ("0x3f3f87bb15c693784e90521c64bac855ce23d971356a6ccd57aa92e02e696432", "Executoors"),
        ("0x65aa85875bf92fb5b487ade154f88507d74b233ef901b4a172f4616b527a4784", "Fuel Dudes"),
        ("0x59b10bd361740618f12bba00f1083ef304a294b37ed7a8756c1b9cfc9b491b16", "Fuel BomBa"),
        ("0x45c964371490bdfc2610ca116853d22a9b6e0de1abb67f61b81ab9d291b0015c", "Fuel Pumps"),
        ("0xaa919d413a57cb6c577b2e172480cbe2f88df0e28203fed52249cabca6cee74a", "Fuel Pengus"),
    )
)


def looks_like_address(identifier: str) -> bool:
    return identifier.startswith(ADDRESS_PREFIX) and len(identifier) > MIN_ADDRESS_LENGTH


class CollectionDirectory:
    """
    Immutable bidirectional map of known collections.

    Both directions are built once; the inverse is keyed by the lower-cased
    display name so lookups never normalise per call.
    """

    def __init__(self, entries: Iterable[CollectionEntry]) -> None:
        names: Dict[str, str] = {}
        ids: Dict[str, str] = {}
        for entry in entries:
            address = str(entry.contract_address)
            key = entry.display_name.lower()
            if address in names:
                raise InvalidConfigurationError(f"Duplicate collection address: {address}")
            if key in ids:
                raise InvalidConfigurationError(
                    f"Collection name '{entry.display_name}' clashes with '{names[ids[key]]}'"
                )
            names[address] = entry.display_name
            ids[key] = address

        self._names: Mapping[str, str] = MappingProxyType(names)
        self._ids: Mapping[str, str] = MappingProxyType(ids)

    def __len__(self) -> int:
        return len(self._names)

    def __iter__(self) -> Iterator[CollectionEntry]:
        return iter(self.entries())

    def __contains__(self, identifier: object) -> bool:
        if not isinstance(identifier, str):
            return False
        return identifier in self._names or identifier.lower() in self._ids

    def entries(self) -> List[CollectionEntry]:
        return [CollectionEntry(ContractAddress(a), n) for a, n in self._names.items()]

    def merged(self, extra: Iterable[CollectionEntry]) -> "CollectionDirectory":
        """New directory with `extra` appended; conflicts raise."""
        return CollectionDirectory([*self.entries(), *extra])

    def resolve(self, identifier: str) -> str:
        """
        Name or address -> contract address.
        Unknown input comes back unchanged so the upstream reports "not found".
        """
        if looks_like_address(identifier):
            return identifier
        return self._ids.get(identifier.lower(), identifier)

    def display_name(self, resolved_id: str) -> str:
        return self._names.get(resolved_id, resolved_id)

    def describe(self, resolved_id: str) -> str:
        name = self._names.get(resolved_id)
        if name:
            return f"{name} ({resolved_id})"
        return resolved_id


def default_directory() -> CollectionDirectory:
    return CollectionDirectory(KNOWN_COLLECTIONS)
