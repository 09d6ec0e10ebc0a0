import logging
from datetime import datetime, timezone
from typing import Awaitable, Callable, Dict, Iterable, List, Optional

from app.clients.catalog import CatalogClient
from app.core.config import settings
from app.core.debounce import Debouncer
from app.core.errors import DataFetchError
from app.schemas.contest import (
    ALL, Contest, ContestFilters, ContestListing, ContestSearchQuery, ContestStatus, ContestSummary, SortKey
)

logger = logging.getLogger(__name__)

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)

STATUS_PRIORITY = {
    ContestStatus.RUNNING: 0,
    ContestStatus.UPCOMING: 1,
    ContestStatus.FINISHED: 2,
}


def classify(start_time: datetime, end_time: datetime, now: datetime) -> ContestStatus:
    # [start, end] is running; the end instant itself still counts as running.
    if now < start_time:
        return ContestStatus.UPCOMING
    if now > end_time:
        return ContestStatus.FINISHED
    return ContestStatus.RUNNING


def max_difficulty(contest: Contest) -> int:
    ranks = [p.difficulty.rank for p in contest.problems if p.difficulty is not None]
    return max(ranks, default=0)


def participant_count(contest: Contest, counts: Optional[Dict[str, int]] = None) -> int:
    if counts and contest.id in counts:
        return counts[contest.id]
    return contest.participant_count or 0


def _matches(contest: Contest, status: ContestStatus, filters: ContestFilters) -> bool:
    if filters.q.lower() not in contest.title.lower():
        return False
    if filters.type != ALL and contest.type.value != filters.type:
        return False
    if filters.status != ALL and status.value != filters.status:
        return False
    return True


def rank(
        contests: Iterable[Contest],
        filters: ContestFilters,
        sort_key: SortKey = SortKey.NEWEST,
        now: Optional[datetime] = None,
        counts: Optional[Dict[str, int]] = None
) -> List[ContestSummary]:
    """
    Filters ``contests`` (text, type and status, all ANDed) and orders them by ``sort_key``.

    Sorting is stable: contests that compare equal keep their input order.
    """
    now = now or datetime.now(timezone.utc)

    summaries = []
    for contest in contests:
        status = classify(contest.start_time, contest.end_time, now)
        if not _matches(contest, status, filters):
            continue
        summaries.append(ContestSummary(
            id=contest.id,
            title=contest.title,
            type=contest.type,
            status=status,
            start_time=contest.start_time,
            end_time=contest.end_time,
            created_at=contest.created_at,
            problem_count=len(contest.problems),
            max_difficulty=max_difficulty(contest),
            participant_count=participant_count(contest, counts),
        ))

    if sort_key == SortKey.NEWEST:
        # Contests without a creation time go last.
        return sorted(summaries, key=lambda s: (s.created_at is not None, s.created_at or _EPOCH), reverse=True)
    if sort_key == SortKey.STATUS:
        return sorted(summaries, key=lambda s: STATUS_PRIORITY[s.status])
    if sort_key == SortKey.DIFFICULTY:
        return sorted(summaries, key=lambda s: s.max_difficulty, reverse=True)
    if sort_key == SortKey.PARTICIPANTS:
        return sorted(summaries, key=lambda s: s.participant_count, reverse=True)
    raise ValueError(f"Unknown sort key: {sort_key}")


async def fetch_participant_counts(catalog: CatalogClient, contests: List[Contest]) -> Dict[str, int]:
    """Live counts by contest id, or an empty map so callers fall back to embedded counts."""
    try:
        return await catalog.get_participant_counts(c.id for c in contests)
    except DataFetchError as e:
        logger.warning(f"Participant counts unavailable, using embedded counts: {e.detail}")
        return {}


async def load_contests(catalog: CatalogClient):
    contests = await catalog.get_contests()
    counts = await fetch_participant_counts(catalog, contests)
    return contests, counts


def _listing(items: List[ContestSummary]) -> ContestListing:
    return ContestListing(items=items, total=len(items))


async def list_contests(
        catalog: CatalogClient,
        filters: ContestFilters,
        sort_key: SortKey = SortKey.NEWEST,
        now: Optional[datetime] = None
) -> ContestListing:
    try:
        contests, counts = await load_contests(catalog)
    except DataFetchError as e:
        logger.error(f"Contest listing unavailable: {e.detail}")
        return ContestListing(items=[], total=0, error=e.detail)

    return _listing(rank(contests, filters, sort_key, now=now, counts=counts))


async def latest_contests(catalog: CatalogClient, limit: int = None, now: Optional[datetime] = None) -> ContestListing:
    limit = limit if limit is not None else settings.LATEST_CONTESTS_LIMIT
    listing = await list_contests(catalog, ContestFilters(), SortKey.NEWEST, now=now)
    if listing.error:
        return listing
    return _listing(listing.items[:limit])


class ContestSearchSession:
    """
    Live contest search for one client.

    Queries are debounced: each ``submit`` cancels the pending recompute, and only the
    last query of a quiescence window is ranked and handed to ``emit``.
    """

    def __init__(
            self,
            contests: List[Contest],
            counts: Dict[str, int],
            emit: Callable[[ContestListing], Awaitable[None]],
            window_sec: float = None,
            clock: Callable[[], datetime] = None
    ):
        self.contests = contests
        self.counts = counts
        self.emit = emit
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self.recomputations = 0
        window_sec = window_sec if window_sec is not None else settings.SEARCH_DEBOUNCE_MS / 1000
        self._debouncer = Debouncer(window_sec, self._recompute)

    def submit(self, query: ContestSearchQuery) -> None:
        self._debouncer.schedule(query)

    def close(self) -> None:
        self._debouncer.cancel()

    async def flush(self) -> None:
        await self._debouncer.drain()

    async def _recompute(self, query: ContestSearchQuery) -> None:
        self.recomputations += 1
        items = rank(self.contests, query, query.sort, now=self.clock(), counts=self.counts)
        await self.emit(_listing(items))
