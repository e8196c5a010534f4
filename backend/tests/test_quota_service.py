"""Tests for the per-user chat quota counter."""

import threading

from daily_tracker.quota.service import QuotaCounter


class TestQuotaCounter:
    def test_fresh_user_is_zero(self):
        assert QuotaCounter().get("u1") == 0

    def test_increment_and_reset(self):
        quota = QuotaCounter()
        for _ in range(3):
            quota.increment("u1")
        assert quota.get("u1") == 3
        quota.reset("u1")
        assert quota.get("u1") == 0

    def test_increment_returns_new_count(self):
        quota = QuotaCounter()
        assert quota.increment("u1") == 1
        assert quota.increment("u1") == 2

    def test_users_are_independent(self):
        quota = QuotaCounter()
        quota.increment("u1")
        quota.reset("u2")
        assert quota.get("u1") == 1
        assert quota.get("u2") == 0

    def test_concurrent_increments(self):
        quota = QuotaCounter()

        def worker():
            for _ in range(500):
                quota.increment("u1")

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert quota.get("u1") == 4000
