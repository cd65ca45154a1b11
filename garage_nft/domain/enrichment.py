"""
Domain Layer: Result Enricher
Decorates collection-scoped responses with the resolved identity.
"""
from dataclasses import replace
from typing import Mapping

from .directory import CollectionDirectory
from .models import ApiEnvelope, ResolvedIdentifier

RESOLVED_INFO_KEY = "resolvedInfo"


def resolved_info(input_id: str, resolved_id: str, directory: CollectionDirectory) -> ResolvedIdentifier:
    return ResolvedIdentifier(
        input_id=input_id,
        resolved_id=resolved_id,
        collection_name=directory.display_name(resolved_id),
        display_name=directory.describe(resolved_id),
    )


def enrich(
    envelope: ApiEnvelope,
    input_id: str,
    resolved_id: str,
    directory: CollectionDirectory,
) -> ApiEnvelope:
    """
    Returns a copy of `envelope` whose data carries `resolvedInfo`.
    Failed envelopes, missing data and non-object payloads pass through untouched.
    """
    if not envelope.success or envelope.data is None:
        return envelope
    if not isinstance(envelope.data, Mapping):
        return envelope

    info = resolved_info(input_id, resolved_id, directory)
    data = {**envelope.data, RESOLVED_INFO_KEY: info.to_dict()}
    return replace(envelope, data=data)
