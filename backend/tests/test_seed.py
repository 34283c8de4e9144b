"""Tests for demo data seeding."""

from swimmeret.db.seed import SEED_BUILDERS, seed_demo_data
from swimmeret.pools.aggregate import build_pool_aggregate
from swimmeret.pools.ledger import join_pool
from swimmeret.pools.models import Pledge, Pool
from swimmeret.stability.models import User


class TestSeedDemoData:
    def test_seeds_empty_database(self, db_session):
        assert seed_demo_data(db_session) is True
        assert db_session.query(Pool).count() == 1
        assert db_session.query(User).count() == len(SEED_BUILDERS)
        assert db_session.query(Pledge).count() == len(SEED_BUILDERS)

    def test_second_run_is_noop(self, db_session):
        seed_demo_data(db_session)
        assert seed_demo_data(db_session) is False
        assert db_session.query(Pool).count() == 1
        assert db_session.query(Pledge).count() == len(SEED_BUILDERS)

    def test_skips_when_pool_exists(self, db_session, sample_pool):
        assert seed_demo_data(db_session) is False
        assert db_session.query(User).count() == 0

    def test_join_finds_seeded_pool(self, db_session):
        seed_demo_data(db_session)
        seeded = db_session.query(Pool).one()
        pool, _ = join_pool(db_session)
        assert pool.id == seeded.id

    def test_seeded_aggregate(self, db_session):
        seed_demo_data(db_session)
        pool = db_session.query(Pool).one()

        agg = build_pool_aggregate(db_session, pool.id)

        assert agg.totals.pledged_seats == 27
        assert agg.totals.verified_seats == 27
        assert agg.totals.pledge_count == 3
        assert agg.histogram == {"1-3": 0, "4-12": 3, "13+": 0}
        assert agg.wtp_distribution == {"low": 1, "mid": 1, "high": 1}
        assert agg.implied_monthly == 12 * 600 + 8 * 300 + 7 * 1000
        assert agg.urgency_distribution == {
            "today": 1,
            "this week": 1,
            "this month": 1,
            "unknown": 0,
        }
        assert agg.workload_profile.avg_run_count == 7833
        assert agg.workload_profile.avg_peak_concurrency == 109
        assert agg.workload_profile.provider_usage_percent == 75
        assert agg.guardrail_adoption == 67
