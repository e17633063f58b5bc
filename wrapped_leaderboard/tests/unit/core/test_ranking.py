import pytest

from wrapped_leaderboard.core.errors import RecordNotFound
from wrapped_leaderboard.core.ranking import RankingQuery
from wrapped_leaderboard.core.submission_store import SubmissionStore


@pytest.fixture
def ranking():
    return RankingQuery()


class TestList:
    @pytest.mark.asyncio
    async def test_orders_by_tokens_then_insertion(self, db_session, seed, ranking):
        rows = await seed(50, 100, 50, 10)

        ordered = await ranking.list(db_session)

        assert [s.id for s in ordered] == [rows[1].id, rows[0].id, rows[2].id, rows[3].id]
        assert [s.tokens for s in ordered] == [100, 50, 50, 10]

    @pytest.mark.asyncio
    async def test_repeated_reads_are_identical(self, db_session, seed, ranking):
        await seed(7, 7, 7, 3, 9)

        first = [s.id for s in await ranking.list(db_session)]
        second = [s.id for s in await ranking.list(db_session)]

        assert first == second

    @pytest.mark.asyncio
    async def test_empty_board(self, db_session, ranking):
        assert await ranking.list(db_session) == []

    @pytest.mark.asyncio
    async def test_orders_numerically_not_lexically(self, db_session, seed, ranking):
        await seed(9, 6_600_000_000, 10, 1_000_000_000_000)

        ordered = await ranking.list(db_session)

        assert [s.tokens for s in ordered] == [1_000_000_000_000, 6_600_000_000, 10, 9]


class TestRankOf:
    @pytest.mark.asyncio
    async def test_rank_is_one_based_position(self, db_session, seed, ranking):
        rows = await seed(100, 50, 50, 10)

        assert await ranking.rank_of(db_session, rows[0].id) == 1
        assert await ranking.rank_of(db_session, rows[1].id) == 2
        assert await ranking.rank_of(db_session, rows[2].id) == 3
        assert await ranking.rank_of(db_session, rows[3].id) == 4

    @pytest.mark.asyncio
    async def test_lookup_by_user_id(self, db_session, seed, ranking):
        rows = await seed(10, 20)
        assert await ranking.rank_of(db_session, rows[0].user_id) == 2

    @pytest.mark.asyncio
    async def test_unknown_identifier(self, db_session, seed, ranking):
        await seed(10)
        with pytest.raises(RecordNotFound):
            await ranking.rank_of(db_session, "does-not-exist")


class TestStanding:
    @pytest.mark.asyncio
    async def test_neighbour_window_excludes_self(self, db_session, seed, ranking):
        rows = await seed(80, 70, 60, 50, 40, 30, 20, 10)

        standing = await ranking.standing(db_session, rows[4].id, window=3)

        assert standing.rank == 5
        assert standing.total == 8
        assert [rank for rank, _ in standing.neighbours] == [2, 3, 4, 6, 7, 8]
        assert rows[4].id not in [s.id for _, s in standing.neighbours]

    @pytest.mark.asyncio
    async def test_window_clipped_at_top(self, db_session, seed, ranking):
        rows = await seed(30, 20, 10)

        standing = await ranking.standing(db_session, rows[0].id, window=3)

        assert standing.rank == 1
        assert standing.percentile == "Top 1%"
        assert [rank for rank, _ in standing.neighbours] == [2, 3]

    @pytest.mark.asyncio
    async def test_percentile_label(self, db_session, seed, ranking):
        rows = await seed(40, 30, 20, 10)

        standing = await ranking.standing(db_session, rows[2].id, window=0)

        assert standing.percentile == "Top 75%"
        assert standing.neighbours == []


class TestCountGreater:
    @pytest.mark.asyncio
    async def test_ties_share_rank_at_submit_time(self, db_session, seed):
        """Submit-time rank is 1 + the number of strictly greater counts; equal counts do not push it down."""
        store = SubmissionStore()
        await seed(100, 50, 50, 10)

        assert await store.count_greater(db_session, 50) + 1 == 2
        assert await store.count_greater(db_session, 100) + 1 == 1
        assert await store.count_greater(db_session, 5) + 1 == 5
