from __future__ import annotations

from datetime import date, datetime, timezone

import pytest

from src.readyroom.readyroom.core.exceptions import EmptyInputError, NotFoundError
from src.readyroom.readyroom.cycles.model import Cycle, EventRecord, Publication
from src.readyroom.readyroom.cycles.service import CycleService, normalize_publications, to_event
from src.readyroom.readyroom.database.mysql_base import decode_json_column

UTC = timezone.utc


def test_publication_array_is_normalized():
    pubs, legacy = normalize_publications(
        [
            {"messageId": "m1", "guildId": "g1", "channelId": "c1", "squadronId": "s1"},
            {"messageId": "m2", "guildId": "g2", "channelId": "c2", "squadronId": "s2"},
            {"guildId": "g3"},
        ]
    )

    assert not legacy
    assert pubs == (
        Publication(message_id="m1", guild_id="g1", channel_id="c1", squadron_id="s1"),
        Publication(message_id="m2", guild_id="g2", channel_id="c2", squadron_id="s2"),
    )


def test_legacy_single_message_id_becomes_one_publication():
    pubs, legacy = normalize_publications("1234567890")

    assert legacy
    assert pubs == (Publication(message_id="1234567890"),)


@pytest.mark.parametrize("raw", [None, "", []])
def test_missing_publications(raw):
    assert normalize_publications(raw) == ((), False)


def test_event_message_ids_union_across_publications():
    event = to_event(
        EventRecord(
            event_id="e1",
            name="Multi-server event",
            start_datetime=datetime(2026, 3, 10, 19, 0),
            discord_event_id=[{"messageId": "m1"}, {"messageId": "m2"}, {"messageId": "m1"}],
        )
    )

    assert event.message_ids == frozenset({"m1", "m2"})
    assert event.start_datetime.tzinfo is not None


def test_resolve_returns_cycle_and_events_in_start_order(cycles_repo, scenario_a, runner):
    cycle, events = CycleService(cycles_repo).resolve("c1", runner=runner)

    assert cycle.name == "Cycle 1"
    assert [e.event_id for e in events] == ["e1", "e2"]


def test_resolve_unknown_cycle(cycles_repo, runner):
    with pytest.raises(NotFoundError):
        CycleService(cycles_repo).resolve("nope", runner=runner)


def test_resolve_cycle_without_events(cycles_repo, runner):
    cycles_repo.add(Cycle("c9", "Quiet", date(2026, 1, 1), date(2026, 1, 31)), [])

    with pytest.raises(EmptyInputError):
        CycleService(cycles_repo).resolve("c9", runner=runner)


def test_default_cycle_prefers_active_then_most_recently_ended(cycles_repo):
    old = Cycle("old", "Old", date(2025, 1, 1), date(2025, 3, 31))
    recent = Cycle("recent", "Recent", date(2025, 10, 1), date(2025, 12, 31))
    cycles_repo.add(old, [])
    cycles_repo.add(recent, [])
    service = CycleService(cycles_repo)

    assert service.get_default_cycle(now=datetime(2026, 2, 1, tzinfo=UTC)) == recent

    current = Cycle("now", "Now", date(2026, 1, 15), date(2026, 2, 28))
    cycles_repo.add(current, [])
    assert service.get_default_cycle(now=datetime(2026, 2, 1, tzinfo=UTC)) == current
    assert [c.cycle_id for c in service.list_cycles()] == ["now", "recent", "old"]


def test_resolve_reorders_events_from_an_unordered_source(cycles_repo, runner):
    cycles_repo.add(
        Cycle("c2", "Cycle 2", date(2026, 4, 1), date(2026, 4, 30)),
        [
            EventRecord("late", "Late", datetime(2026, 4, 28, 19, 0, tzinfo=UTC), "m3"),
            EventRecord("early", "Early", datetime(2026, 4, 2, 19, 0, tzinfo=UTC), "m1"),
            EventRecord("mid", "Mid", datetime(2026, 4, 15, 19, 0, tzinfo=UTC), "m2"),
        ],
    )

    _, events = CycleService(cycles_repo).resolve("c2", runner=runner)

    assert [e.event_id for e in events] == ["early", "mid", "late"]


@pytest.mark.parametrize(
    "column, expected",
    [
        (b'[{"messageId": "m1", "guildId": "g1"}]', (Publication(message_id="m1", guild_id="g1"),)),
        ("1187650123456789012", (Publication(message_id="1187650123456789012"),)),
        (1187650123, (Publication(message_id="1187650123"),)),
        ("abc-not-json", (Publication(message_id="abc-not-json"),)),
        (bytearray(b'"m7"'), (Publication(message_id="m7"),)),
    ],
)
def test_stored_column_values_become_publications(column, expected):
    pubs, _ = normalize_publications(decode_json_column(column))

    assert pubs == expected


def test_decode_json_column_edge_values():
    assert decode_json_column(None) is None
    assert decode_json_column(b"  ") is None
    assert decode_json_column("42") == 42
    assert decode_json_column("m1 oops") == "m1 oops"
    assert decode_json_column([{"messageId": "m1"}]) == [{"messageId": "m1"}]
