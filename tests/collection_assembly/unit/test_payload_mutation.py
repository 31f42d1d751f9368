"""Negative payload mutation tests."""

from __future__ import annotations

import copy

from bruno_collection_generator.collection_assembly import corrupt_payload


def _payload(reference: object = "abc-123") -> dict:
    return {"TXLife": {"TXLifeRequest": {"TransRefGUID": reference, "Amount": 10}}}


def test_replaces_reference_with_sentinel_in_a_copy() -> None:
    payload = _payload()
    original = copy.deepcopy(payload)

    corrupted = corrupt_payload(payload)

    assert corrupted["TXLife"]["TXLifeRequest"]["TransRefGUID"] == "INVALID_ID"
    assert corrupted["TXLife"]["TXLifeRequest"]["Amount"] == 10
    assert payload == original


def test_none_payload_stays_none() -> None:
    assert corrupt_payload(None) is None


def test_missing_path_returns_unchanged_copy() -> None:
    payload = {"TXLife": {"Other": 1}}

    corrupted = corrupt_payload(payload)

    assert corrupted == payload
    assert corrupted is not payload


def test_empty_reference_is_left_alone() -> None:
    assert corrupt_payload(_payload(""))["TXLife"]["TXLifeRequest"]["TransRefGUID"] == ""


def test_custom_path_and_sentinel() -> None:
    corrupted = corrupt_payload({"ref": "x"}, ("ref",), "BROKEN")

    assert corrupted == {"ref": "BROKEN"}


def test_non_mapping_payload_is_returned_as_is() -> None:
    payload = ["not", "a", "mapping"]

    assert corrupt_payload(payload) is payload
