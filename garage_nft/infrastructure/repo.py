"""
Infrastructure: Collection Directory Loader
"""
import json
from pathlib import Path
from typing import List, Union

import structlog

from garage_nft.domain import CollectionEntry, ContractAddress

logger = structlog.get_logger()


def load_directory_entries(file_path: Union[str, Path]) -> List[CollectionEntry]:
    """
    Loads extra known collections.
    Accepts `{address: name}` or `{name: {"contract_address": address}}`.
    """
    path = Path(file_path)
    if not path.exists():
        logger.error("collections_file_not_found", path=str(path))
        return []

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.error("collections_load_error", path=str(path), error=str(e))
        return []

    if not isinstance(data, dict):
        logger.error("collections_load_error", path=str(path), error="expected a JSON object")
        return []

    entries = []
    for key, value in data.items():
        if isinstance(value, str):
            address, name = key, value
        elif isinstance(value, dict):
            address, name = value.get("contract_address"), key
        else:
            continue

        if isinstance(address, str) and address and name:
            entries.append(CollectionEntry(ContractAddress(address), name))
        else:
            logger.warning("collections_entry_skipped", key=key)

    logger.info("collections_file_loaded", path=str(path), count=len(entries))
    return entries
