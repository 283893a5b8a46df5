"""Tests for client draft saves."""

from dataclasses import replace

import pytest

from client_portal.domain.errors import (
    ErrorKind,
    InvalidArgumentError,
    NotFoundError,
    SectionLockedError,
    TokenExpiredError,
)
from client_portal.domain.models import SectionKind
from client_portal.services.paths import section_config_path, section_items_path
from tests.conftest import (
    PHOTOGRAPHER_ID,
    PROJECT_ID,
    FakeClock,
    InMemoryDocumentStore,
    issue_link,
)


def _location(index: int) -> dict[str, object]:
    return {
        "id": f"loc-{index}",
        "locationName": f"Venue {index}",
        "locationType": "Ceremony",
        "locationAddress1": f"{index} High Street",
        "locationPostcode": "AB1 2CD",
    }


def _group_shot(index: int, checked: bool) -> dict[str, object]:
    return {
        "id": f"shot-{index}",
        "name": f"Family group {index}",
        "categoryId": "family",
        "checked": checked,
    }


def _items(store: InMemoryDocumentStore, kind: SectionKind) -> list[object]:
    return store.data(section_items_path(PROJECT_ID, kind))["list"]


def test_save_locations_replaces_items(
    container, store: InMemoryDocumentStore
) -> None:
    link = issue_link(container, ["locations"])
    container.draft_service.save_draft(
        PROJECT_ID, link.access_token, "locations", [_location(1), _location(2)]
    )

    result = container.draft_service.save_draft(
        PROJECT_ID, link.access_token, "locations", [_location(3)]
    )

    assert len(result.items) == 1
    items = _items(store, SectionKind.LOCATIONS)
    assert [item["id"] for item in items] == ["loc-3"]
    assert items[0]["locationName"] == "Venue 3"
    assert items[0]["nextLocationTravelTimeEstimate"] == 0


def test_too_many_locations(container, store: InMemoryDocumentStore) -> None:
    link = issue_link(container, ["locations"])
    container.draft_service.save_draft(
        PROJECT_ID, link.access_token, "locations", [_location(i) for i in range(6)]
    )

    with pytest.raises(InvalidArgumentError) as exc_info:
        container.draft_service.save_draft(
            PROJECT_ID,
            link.access_token,
            "locations",
            [_location(i) for i in range(7)],
        )

    assert exc_info.value.message == "Too many locations provided."
    assert len(_items(store, SectionKind.LOCATIONS)) == 6


@pytest.mark.parametrize(
    ("section", "limit", "message"),
    [
        ("keyPeople", 10, "Too many people provided."),
        ("photoRequests", 5, "Too many requests provided."),
        ("timeline", 15, "Too many events provided."),
    ],
)
def test_item_ceilings(container, section: str, limit: int, message: str) -> None:
    link = issue_link(container, [section])

    with pytest.raises(InvalidArgumentError) as exc_info:
        container.draft_service.save_draft(
            PROJECT_ID, link.access_token, section, [{} for _ in range(limit + 1)]
        )

    assert exc_info.value.message == message


def test_config_patch_merges_client_fields_only(
    container, store: InMemoryDocumentStore
) -> None:
    link = issue_link(container, ["locations"])
    container.lifecycle_service.approve_section(
        PROJECT_ID, "locations", PHOTOGRAPHER_ID
    )
    container.lifecycle_service.request_revision(
        PROJECT_ID, "locations", PHOTOGRAPHER_ID, "Add the reception venue"
    )

    container.draft_service.save_draft(
        PROJECT_ID,
        link.access_token,
        "locations",
        [_location(1)],
        {"multipleLocations": True, "locked": True, "finalized": True},
    )

    config = store.data(section_config_path(PROJECT_ID, SectionKind.LOCATIONS))
    assert config["multipleLocations"] is True
    assert config["locked"] is False
    assert config["finalized"] is False
    assert config["revisionReason"] == "Add the reception venue"


def test_save_without_config_leaves_config_untouched(
    container, store: InMemoryDocumentStore
) -> None:
    link = issue_link(container, ["timeline"])
    before = dict(store.data(section_config_path(PROJECT_ID, SectionKind.TIMELINE)))

    container.draft_service.save_draft(PROJECT_ID, link.access_token, "timeline", [])

    assert store.data(section_config_path(PROJECT_ID, SectionKind.TIMELINE)) == before


def test_timeline_keeps_order(container, store: InMemoryDocumentStore) -> None:
    link = issue_link(container, ["timeline"])
    events = [
        {
            "id": "evt-2",
            "type": "Ceremony Begins",
            "title": "Ceremony",
            "startTime": "2025-09-20T14:00:00+00:00",
        },
        {
            "id": "evt-1",
            "type": "Bridal Prep",
            "title": "Prep",
            "startTime": "2025-09-20T09:00:00+00:00",
            "duration": 120,
        },
    ]

    container.draft_service.save_draft(
        PROJECT_ID,
        link.access_token,
        "timeline",
        events,
        {"eventDate": "2025-09-20T00:00:00+00:00"},
    )

    items = _items(store, SectionKind.TIMELINE)
    assert [item["id"] for item in items] == ["evt-2", "evt-1"]
    assert items[1]["duration"] == 120
    config = store.data(section_config_path(PROJECT_ID, SectionKind.TIMELINE))
    assert config["eventDate"].startswith("2025-09-20T00:00:00")


def test_locked_section_rejects_drafts(
    container, store: InMemoryDocumentStore
) -> None:
    link = issue_link(container, ["locations"])
    container.draft_service.save_draft(
        PROJECT_ID, link.access_token, "locations", [_location(1)]
    )
    container.lifecycle_service.submit_section(
        PROJECT_ID, "locations", link.access_token
    )

    with pytest.raises(SectionLockedError) as exc_info:
        container.draft_service.save_draft(
            PROJECT_ID, link.access_token, "locations", [_location(2)]
        )

    assert exc_info.value.kind == ErrorKind.PERMISSION_DENIED
    assert [item["id"] for item in _items(store, SectionKind.LOCATIONS)] == ["loc-1"]


def test_lock_check_can_be_disabled(container, store: InMemoryDocumentStore) -> None:
    link = issue_link(container, ["locations"])
    container.lifecycle_service.approve_section(
        PROJECT_ID, "locations", PHOTOGRAPHER_ID
    )
    drafts = replace(container.draft_service, enforce_section_lock=False)

    drafts.save_draft(
        PROJECT_ID,
        link.access_token,
        "locations",
        [_location(2)],
        {"finalized": False},
    )

    config = store.data(section_config_path(PROJECT_ID, SectionKind.LOCATIONS))
    assert config["finalized"] is True


def test_group_shots_store_selection_and_time(
    container, store: InMemoryDocumentStore, clock: FakeClock
) -> None:
    link = issue_link(container, ["groupShots"])
    shots = [_group_shot(i, checked=i < 10) for i in range(40)]
    shots[0]["time"] = 5

    result = container.draft_service.save_draft(
        PROJECT_ID, link.access_token, "groupShots", shots
    )

    items = _items(store, SectionKind.GROUP_SHOTS)
    assert len(items) == 10
    assert all(item["checked"] for item in items)
    config = store.data(section_config_path(PROJECT_ID, SectionKind.GROUP_SHOTS))
    assert config["totalTimeEstimated"] == 5 + 9 * 3
    assert config["clientLastViewed"] == clock.now().isoformat()
    assert result.config["totalTimeEstimated"] == 32


def test_group_shot_ceiling_applies_to_selection(container) -> None:
    link = issue_link(container, ["groupShots"])
    shots = [_group_shot(i, checked=True) for i in range(31)]

    with pytest.raises(InvalidArgumentError) as exc_info:
        container.draft_service.save_draft(
            PROJECT_ID, link.access_token, "groupShots", shots
        )

    assert exc_info.value.message == "Too many group shots selected."


def test_group_shot_input_is_bounded_before_the_selection(
    container, store: InMemoryDocumentStore
) -> None:
    link = issue_link(container, ["groupShots"])
    shots = [_group_shot(i, checked=False) for i in range(100)]
    shots.append(_group_shot(100, checked=True))

    with pytest.raises(InvalidArgumentError) as exc_info:
        container.draft_service.save_draft(
            PROJECT_ID, link.access_token, "groupShots", shots
        )

    assert exc_info.value.message == "Too many items provided."
    assert _items(store, SectionKind.GROUP_SHOTS) == []


def test_invalid_item_is_rejected(container) -> None:
    link = issue_link(container, ["keyPeople"])

    with pytest.raises(InvalidArgumentError) as exc_info:
        container.draft_service.save_draft(
            PROJECT_ID,
            link.access_token,
            "keyPeople",
            [{"id": "kp-1", "fullName": "Pat", "role": "Dragon Tamer"}],
        )

    assert exc_info.value.message.startswith("Invalid key people item")


def test_duplicate_item_ids_are_rejected(container) -> None:
    link = issue_link(container, ["locations"])

    with pytest.raises(InvalidArgumentError):
        container.draft_service.save_draft(
            PROJECT_ID, link.access_token, "locations", [_location(1), _location(1)]
        )


def test_items_must_be_a_list(container) -> None:
    link = issue_link(container, ["locations"])

    with pytest.raises(InvalidArgumentError):
        container.draft_service.save_draft(
            PROJECT_ID, link.access_token, "locations", {"id": "loc-1"}
        )


def test_unselected_section_is_not_found(container) -> None:
    link = issue_link(container, ["locations"])

    with pytest.raises(NotFoundError):
        container.draft_service.save_draft(
            PROJECT_ID, link.access_token, "timeline", []
        )


def test_expired_link_cannot_save(container, clock: FakeClock) -> None:
    link = issue_link(container, ["locations"])
    clock.advance(days=31)

    with pytest.raises(TokenExpiredError):
        container.draft_service.save_draft(
            PROJECT_ID, link.access_token, "locations", [_location(1)]
        )


def test_key_people_vip_flag_uses_stored_name(
    container, store: InMemoryDocumentStore
) -> None:
    link = issue_link(container, ["keyPeople"])

    container.draft_service.save_draft(
        PROJECT_ID,
        link.access_token,
        "keyPeople",
        [{"id": "kp-1", "fullName": "Pat", "role": "Best Man", "isVIP": True}],
    )

    person = _items(store, SectionKind.KEY_PEOPLE)[0]
    assert person["isVIP"] is True
    assert person["involvement"] == "None"
