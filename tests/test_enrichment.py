"""
Tests for attaching resolved collection info to responses.
"""
from garage_nft.domain import ApiEnvelope, ApiErrorInfo, enrich

from conftest import MR_JIM


class TestEnrich:

    def test_empty_data_gets_resolved_info(self, directory):
        envelope = ApiEnvelope(success=True, data={})

        enriched = enrich(envelope, "Mr. Jim", MR_JIM, directory)

        info = enriched.data["resolvedInfo"]
        assert info["collectionName"] == "Mr. Jim"
        assert info["inputId"] == "Mr. Jim"
        assert info["resolvedId"] == MR_JIM
        assert info["displayName"] == f"Mr. Jim ({MR_JIM})"

    def test_original_envelope_not_mutated(self, directory):
        data = {"items": [1, 2]}
        envelope = ApiEnvelope(success=True, data=data)

        enriched = enrich(envelope, MR_JIM, MR_JIM, directory)

        assert "resolvedInfo" not in envelope.data
        assert "resolvedInfo" not in data
        assert enriched.data["items"] == [1, 2]

    def test_skipped_on_failure(self, directory):
        envelope = ApiEnvelope(success=False, error=ApiErrorInfo("not found", "404"))
        assert enrich(envelope, "Mr. Jim", MR_JIM, directory) is envelope

    def test_skipped_without_object_data(self, directory):
        missing = ApiEnvelope(success=True)
        listing = ApiEnvelope(success=True, data=[1, 2, 3])

        assert enrich(missing, "Mr. Jim", MR_JIM, directory) is missing
        assert enrich(listing, "Mr. Jim", MR_JIM, directory) is listing

    def test_unknown_collection_named_by_id(self, directory):
        enriched = enrich(ApiEnvelope(success=True, data={}), "0xfeedfeedfeed", "0xfeedfeedfeed", directory)
        info = enriched.data["resolvedInfo"]
        assert info["collectionName"] == "0xfeedfeedfeed"
        assert info["displayName"] == "0xfeedfeedfeed"
