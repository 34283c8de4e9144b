"""Tests for the pool directory and the pledge ledger.

Covers pool formation per (provider, pool_type), slug collisions, pledge
upserts, verification stamping at write time, and contact propagation.
"""

from datetime import datetime, timedelta, timezone

import pytest

from swimmeret.exceptions import PoolNotFoundError, UserNotFoundError
from swimmeret.pools.ledger import (
    DEFAULT_TARGET_TERMS,
    get_pool,
    get_pool_by_slug,
    join_pool,
    slugify,
    upsert_pledge,
)
from swimmeret.pools.models import Pledge, Pool
from swimmeret.stability.models import VerificationScore

BASE_TIME = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def _score(db, user_id, tier, created_at=None):
    score = VerificationScore(
        user_id=user_id,
        score=50,
        tier=tier,
        reasons=[],
        created_at=created_at or BASE_TIME,
    )
    db.add(score)
    db.flush()
    return score


class TestSlugify:
    def test_default_pool_name(self):
        assert slugify("Heavy Agent Builders - Stable Lane") == (
            "heavy-agent-builders-stable-lane"
        )

    def test_strips_edges(self):
        assert slugify("  --Hello, World!--  ") == "hello-world"


class TestJoinPool:
    def test_forms_default_pool(self, db_session):
        pool, pledge = join_pool(db_session)
        assert pool.provider == "Claude"
        assert pool.pool_type == "code_agents"
        assert pool.name == "Heavy Agent Builders - Stable Lane"
        assert pool.slug == "heavy-agent-builders-stable-lane"
        assert pool.threshold_seats == 50
        assert pool.next_threshold_seats == 100
        assert pool.target_terms == DEFAULT_TARGET_TERMS
        assert pool.status == "forming"
        assert pledge is None

    def test_one_pool_per_key(self, db_session):
        first, _ = join_pool(db_session, provider="Claude", pool_type="code_agents")
        second, _ = join_pool(db_session, provider="Claude", pool_type="code_agents")
        assert first.id == second.id
        assert db_session.query(Pool).count() == 1

    def test_second_key_gets_distinct_slug(self, db_session, sample_pool):
        other, _ = join_pool(db_session, provider="Gemini", pool_type="code_agents")
        assert other.id != sample_pool.id
        assert other.slug == "heavy-agent-builders-stable-lane-gemini-code-agents"
        assert get_pool_by_slug(db_session, other.slug).id == other.id

    def test_returns_existing_pledge(self, db_session, sample_pool, sample_user):
        upsert_pledge(db_session, sample_pool.id, sample_user.id, 5, "mid")
        _, pledge = join_pool(db_session, user_id=sample_user.id)
        assert pledge is not None
        assert pledge.seats_intended == 5

    @pytest.mark.parametrize("pool_id", ["abc", "1.5", "", None, "99999999999999999999"])
    def test_non_numeric_id_raises(self, db_session, sample_pool, pool_id):
        with pytest.raises(PoolNotFoundError):
            get_pool(db_session, pool_id)

    def test_numeric_string_id_resolves(self, db_session, sample_pool):
        assert get_pool(db_session, str(sample_pool.id)).id == sample_pool.id

    def test_unknown_slug_raises(self, db_session):
        with pytest.raises(PoolNotFoundError):
            get_pool_by_slug(db_session, "no-such-pool")


class TestUpsertPledge:
    def test_creates_pledge(self, db_session, sample_pool, sample_user):
        pledge = upsert_pledge(
            db_session,
            sample_pool.id,
            sample_user.id,
            seats_intended=10,
            wtp_band="mid",
            contact="ops@example.com",
            referral_code_used="OC-AB12",
        )
        assert pledge.id is not None
        assert pledge.seats_intended == 10
        assert pledge.wtp_band == "mid"
        assert pledge.contact == "ops@example.com"
        assert pledge.referral_code_used == "OC-AB12"

    def test_second_pledge_overwrites(self, db_session, sample_pool, sample_user):
        first = upsert_pledge(db_session, sample_pool.id, sample_user.id, 10, "mid")
        second = upsert_pledge(db_session, sample_pool.id, sample_user.id, 3, "high")
        assert first.id == second.id
        assert second.seats_intended == 3
        assert second.wtp_band == "high"
        count = (
            db_session.query(Pledge)
            .filter(Pledge.pool_id == sample_pool.id, Pledge.user_id == sample_user.id)
            .count()
        )
        assert count == 1

    def test_overwrite_moves_updated_at_only(self, db_session, sample_pool, sample_user):
        pledge = upsert_pledge(db_session, sample_pool.id, sample_user.id, 10, "mid")
        pledge.created_at = BASE_TIME
        pledge.updated_at = BASE_TIME
        db_session.flush()

        # Identical values still count as a fresh pledge
        pledge = upsert_pledge(db_session, sample_pool.id, sample_user.id, 10, "mid")
        assert pledge.created_at == BASE_TIME
        assert pledge.updated_at > BASE_TIME

    def test_accepts_string_pool_id(self, db_session, sample_pool, sample_user):
        pledge = upsert_pledge(db_session, str(sample_pool.id), sample_user.id, 2, "low")
        assert pledge.pool_id == sample_pool.id

    def test_overwrite_keeps_contact_and_referral_when_blank(
        self, db_session, sample_pool, sample_user
    ):
        upsert_pledge(
            db_session, sample_pool.id, sample_user.id, 10, "mid",
            contact="ops@example.com", referral_code_used="OC-AB12",
        )
        pledge = upsert_pledge(
            db_session, sample_pool.id, sample_user.id, 12, "mid",
            contact="", referral_code_used=None,
        )
        assert pledge.contact == "ops@example.com"
        assert pledge.referral_code_used == "OC-AB12"

    def test_contact_updates_user_email(self, db_session, sample_pool, sample_user):
        upsert_pledge(
            db_session, sample_pool.id, sample_user.id, 4, "low",
            contact="billing@example.com",
        )
        assert sample_user.email == "billing@example.com"

    def test_blank_contact_leaves_email(self, db_session, sample_pool, sample_user):
        upsert_pledge(db_session, sample_pool.id, sample_user.id, 4, "low", contact="")
        assert sample_user.email == "builder@example.com"

    def test_unknown_pool_raises(self, db_session, sample_user):
        with pytest.raises(PoolNotFoundError):
            upsert_pledge(db_session, 999, sample_user.id, 4, "low")

    def test_unknown_user_raises(self, db_session, sample_pool):
        with pytest.raises(UserNotFoundError):
            upsert_pledge(db_session, sample_pool.id, 999, 4, "low")
        assert db_session.query(Pledge).count() == 0


class TestVerificationStamp:
    def test_no_score_is_unverified(self, db_session, sample_pool, sample_user):
        pledge = upsert_pledge(db_session, sample_pool.id, sample_user.id, 4, "low")
        assert pledge.is_verified is False

    @pytest.mark.parametrize(
        "tier,expected",
        [("unverified", False), ("verified", True), ("power", True)],
    )
    def test_tier_maps_to_flag(self, db_session, sample_pool, sample_user, tier, expected):
        _score(db_session, sample_user.id, tier)
        pledge = upsert_pledge(db_session, sample_pool.id, sample_user.id, 4, "low")
        assert pledge.is_verified is expected

    def test_uses_most_recent_score(self, db_session, sample_pool, sample_user):
        _score(db_session, sample_user.id, "power", created_at=BASE_TIME)
        _score(db_session, sample_user.id, "unverified",
               created_at=BASE_TIME + timedelta(days=1))
        pledge = upsert_pledge(db_session, sample_pool.id, sample_user.id, 4, "low")
        assert pledge.is_verified is False

    def test_flag_not_recomputed_after_tier_change(
        self, db_session, sample_pool, sample_user
    ):
        _score(db_session, sample_user.id, "verified", created_at=BASE_TIME)
        pledge = upsert_pledge(db_session, sample_pool.id, sample_user.id, 4, "low")
        _score(db_session, sample_user.id, "unverified",
               created_at=BASE_TIME + timedelta(days=1))
        db_session.expire_all()
        assert db_session.get(Pledge, pledge.id).is_verified is True

    def test_repledge_restamps_flag(self, db_session, sample_pool, sample_user):
        _score(db_session, sample_user.id, "verified", created_at=BASE_TIME)
        upsert_pledge(db_session, sample_pool.id, sample_user.id, 4, "low")
        _score(db_session, sample_user.id, "unverified",
               created_at=BASE_TIME + timedelta(days=1))
        pledge = upsert_pledge(db_session, sample_pool.id, sample_user.id, 4, "low")
        assert pledge.is_verified is False
