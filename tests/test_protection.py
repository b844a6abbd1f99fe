"""Tests for the frozen/pinned protection predicate."""

from __future__ import annotations

from yardsync.sync.protection import is_protected, protection_reason, read_markers

from tests.fakes import make_client, make_project


def test_plain_project_is_not_protected() -> None:
    assert is_protected(make_project()) is False


def test_frozen_configuration_is_protected() -> None:
    project = make_project(frozen=True)
    assert is_protected(project) is True
    assert protection_reason(project) == "configuration is frozen"


def test_library_pins_are_protected() -> None:
    project = make_project(pinned=True)
    assert is_protected(project) is True
    assert protection_reason(project) == "library versions are pinned"


def test_frozen_and_pinned_reason() -> None:
    reason = protection_reason(make_project(frozen=True, pinned=True))
    assert "frozen" in reason
    assert "pinned" in reason


def test_null_pins_are_not_protection() -> None:
    project = make_project()
    project["libraryPins"] = None
    assert is_protected(project) is False


def test_malformed_pins_still_protect() -> None:
    project = make_project()
    project["libraryPins"] = "pinned-by-hand"
    assert read_markers(project) is None
    assert is_protected(project) is True


def test_predicate_ignores_collection_shape() -> None:
    assert is_protected(make_client()) is False
    assert is_protected({"id": "X", "configuration": {"isFrozen": True}}) is True
    assert is_protected({"id": "Y", "libraryPins": {"pinnedBy": "someone"}}) is True


def test_none_record_is_not_protected() -> None:
    assert is_protected(None) is False
