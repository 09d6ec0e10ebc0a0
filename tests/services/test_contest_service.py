import asyncio
from datetime import timedelta

import pytest

from app.core.errors import DataFetchError
from app.schemas.contest import ContestFilters, ContestSearchQuery, ContestStatus, SortKey
from app.services import contest_service
from app.services.contest_service import classify, rank

H = timedelta(hours=1)


def ids(items):
    return [item.id for item in items]


def test_classify_upcoming_contest(now):
    assert classify(now + H, now + 2 * H, now) == ContestStatus.UPCOMING


def test_classify_boundaries(now):
    start, end = now, now + H
    assert classify(start, end, start - timedelta(microseconds=1)) == ContestStatus.UPCOMING
    assert classify(start, end, start) == ContestStatus.RUNNING
    assert classify(start, end, end) == ContestStatus.RUNNING
    assert classify(start, end, end + timedelta(microseconds=1)) == ContestStatus.FINISHED


def test_classify_partitions_timeline_into_contiguous_intervals(now):
    start, end = now, now + 2 * H
    order = [ContestStatus.UPCOMING, ContestStatus.RUNNING, ContestStatus.FINISHED]
    seen = [classify(start, end, now + k * timedelta(minutes=15)) for k in range(-8, 17)]

    positions = [order.index(s) for s in seen]
    assert positions == sorted(positions)
    assert set(seen) == set(order)


def test_rank_newest(contests, now):
    assert ids(rank(contests, ContestFilters(), SortKey.NEWEST, now=now)) == ["c2", "c4", "c1", "c3"]


def test_rank_newest_is_stable_and_non_increasing(contest_factory, now):
    same = -2 * H
    contests = [
        contest_factory("a", "A", H, 2 * H, same),
        contest_factory("b", "B", H, 2 * H, -H),
        contest_factory("c", "C", H, 2 * H, same),
    ]
    items = rank(contests, ContestFilters(), SortKey.NEWEST, now=now)

    assert ids(items) == ["b", "a", "c"]
    assert all(x.created_at >= y.created_at for x, y in zip(items, items[1:]))


def test_rank_newest_puts_contests_without_creation_time_last(contests, now):
    undated = contests[1].model_copy(update={"created_at": None})

    items = rank([undated, *contests[:1], *contests[2:]], ContestFilters(), SortKey.NEWEST, now=now)

    assert ids(items) == ["c4", "c1", "c3", "c2"]
    assert items[-1].created_at is None


def test_rank_status_priority(contests, now):
    items = rank(contests, ContestFilters(), SortKey.STATUS, now=now)
    assert ids(items) == ["c1", "c2", "c4", "c3"]
    assert [i.status for i in items] == [
        ContestStatus.RUNNING, ContestStatus.UPCOMING, ContestStatus.UPCOMING, ContestStatus.FINISHED
    ]


def test_rank_difficulty_puts_problemless_contests_last(contests, now):
    items = rank(contests, ContestFilters(), SortKey.DIFFICULTY, now=now)
    assert ids(items) == ["c2", "c1", "c3", "c4"]
    assert items[-1].max_difficulty == 0


def test_rank_participants_defaults_missing_counts_to_zero(contests, now):
    items = rank(contests, ContestFilters(), SortKey.PARTICIPANTS, now=now)
    assert ids(items) == ["c3", "c4", "c1", "c2"]
    assert items[-1].participant_count == 0


def test_rank_prefers_live_counts(contests, now):
    items = rank(contests, ContestFilters(), SortKey.PARTICIPANTS, now=now, counts={"c2": 100})
    assert ids(items)[0] == "c2"
    assert items[0].participant_count == 100


@pytest.mark.parametrize("query", ["sprint", "SPRINT", "Sp", " sprint", "", "round", "zzz"])
def test_text_filter_returns_matching_subset(contests, now, query):
    items = rank(contests, ContestFilters(q=query), SortKey.NEWEST, now=now)

    assert set(ids(items)) <= {c.id for c in contests}
    assert all(query.lower() in item.title.lower() for item in items)
    expected = {c.id for c in contests if query.lower() in c.title.lower()}
    assert set(ids(items)) == expected


def test_text_filter_keeps_surrounding_whitespace(contest_factory, now):
    contests = [
        contest_factory("a", "Sprinter Cup", -H, H, -H),
        contest_factory("b", "Weekly Sprint", -H, H, -2 * H),
    ]

    assert ids(rank(contests, ContestFilters(q=" sprint"), now=now)) == ["b"]
    assert ids(rank(contests, ContestFilters(q="sprint "), now=now)) == []


def test_filters_compose(contests, now):
    assert ids(rank(contests, ContestFilters(q="sprint", type="team"), now=now)) == ["c4"]
    assert ids(rank(contests, ContestFilters(q="sprint", status="running"), now=now)) == ["c1"]
    assert ids(rank(contests, ContestFilters(type="team", status="upcoming"), SortKey.NEWEST, now=now)) == ["c2", "c4"]
    assert ids(rank(contests, ContestFilters(type="individual", status="upcoming"), now=now)) == []


def test_filters_reject_unknown_values():
    with pytest.raises(ValueError):
        ContestFilters(type="squad")
    with pytest.raises(ValueError):
        ContestFilters(status="paused")


async def test_list_contests_uses_live_counts(catalog, contests, now):
    catalog.get_contests.return_value = contests
    catalog.get_participant_counts.return_value = {"c1": 50}

    listing = await contest_service.list_contests(catalog, ContestFilters(), SortKey.PARTICIPANTS, now=now)

    assert listing.error is None
    assert listing.total == 4
    assert listing.items[0].id == "c1"
    assert listing.items[0].participant_count == 50


async def test_list_contests_falls_back_to_embedded_counts(catalog, contests, now):
    catalog.get_contests.return_value = contests
    catalog.get_participant_counts.side_effect = DataFetchError("counts down")

    listing = await contest_service.list_contests(catalog, ContestFilters(), SortKey.NEWEST, now=now)

    assert listing.error is None
    assert listing.total == len(contests)
    counts = {item.id: item.participant_count for item in listing.items}
    assert counts == {"c1": 4, "c2": 0, "c3": 12, "c4": 7}


async def test_list_contests_reports_fetch_failure(catalog):
    catalog.get_contests.side_effect = DataFetchError()

    listing = await contest_service.list_contests(catalog, ContestFilters())

    assert listing.items == []
    assert listing.total == 0
    assert listing.error


async def test_latest_contests(catalog, contests, now):
    catalog.get_contests.return_value = contests
    catalog.get_participant_counts.return_value = {}

    listing = await contest_service.latest_contests(catalog, limit=3, now=now)

    assert ids(listing.items) == ["c2", "c4", "c1"]


async def test_search_session_emits_only_last_query(contests, now):
    emitted = []

    async def emit(listing):
        emitted.append(listing)

    session = contest_service.ContestSearchSession(contests, {}, emit, window_sec=0.05, clock=lambda: now)
    for q in ["s", "sp", "spr", "sprint"]:
        session.submit(ContestSearchQuery(q=q))
        await asyncio.sleep(0.01)
    await session.flush()

    assert session.recomputations == 1
    assert len(emitted) == 1
    assert ids(emitted[0].items) == ["c4", "c1"]


async def test_search_session_one_recompute_per_window(contests, now):
    emitted = []

    async def emit(listing):
        emitted.append(listing)

    session = contest_service.ContestSearchSession(contests, {}, emit, window_sec=0.05, clock=lambda: now)
    session.submit(ContestSearchQuery(q="team"))
    await session.flush()
    session.submit(ContestSearchQuery(q="archive", sort=SortKey.STATUS))
    await session.flush()

    assert session.recomputations == 2
    assert [ids(listing.items) for listing in emitted] == [["c2"], ["c3"]]


async def test_search_session_close_cancels_pending(contests, now):
    emitted = []

    async def emit(listing):
        emitted.append(listing)

    session = contest_service.ContestSearchSession(contests, {}, emit, window_sec=0.05, clock=lambda: now)
    session.submit(ContestSearchQuery(q="sprint"))
    session.close()
    await asyncio.sleep(0.1)

    assert emitted == []
