"""Tests for the reactive context and the token cache."""
import logging

import pytest

from formgroup import CacheKey, ReactiveContext, TokenCache, computed


class TestTokenCache:
    """TokenCache invalidation behavior."""

    def test_get_or_compute_caches_until_token_changes(self):
        token = [0]
        cache = TokenCache(lambda: token[0])
        calls = []

        def compute():
            calls.append(1)
            return len(calls)

        key = CacheKey.from_args('value')
        assert cache.get_or_compute(key, compute) == 1
        assert cache.get_or_compute(key, compute) == 1

        token[0] += 1
        assert cache.get_or_compute(key, compute) == 2

    def test_get_and_put(self):
        token = [0]
        cache = TokenCache(lambda: token[0])
        key = CacheKey.from_args('a', 1)

        assert cache.get(key) is None
        cache.put(key, "stored")
        assert cache.get(key) == "stored"
        assert key in cache

        token[0] += 1
        assert cache.get(key) is None
        assert key not in cache

    def test_invalidate(self):
        cache = TokenCache(lambda: 0)
        key = CacheKey.from_args('a')
        cache.put(key, 1)
        cache.invalidate()
        assert cache.get(key) is None

    def test_value_computed_during_token_change_is_not_cached(self):
        token = [0]
        cache = TokenCache(lambda: token[0])
        key = CacheKey.from_args('a')

        def compute():
            token[0] += 1
            return "stale"

        assert cache.get_or_compute(key, compute) == "stale"
        assert key not in cache

    def test_cache_key_equality(self):
        assert CacheKey.from_args('a', 1) == CacheKey.from_args('a', 1)
        assert hash(CacheKey.from_args('a', 1)) == hash(CacheKey.from_args('a', 1))
        assert CacheKey.from_args('a', 1) != CacheKey.from_args('a', 2)


class TestAccessGeneration:
    """Access generations scope cached views to one logical read."""

    def test_no_generation_outside_reads(self):
        assert ReactiveContext.current_generation() is None

    def test_nested_blocks_share_generation(self):
        with ReactiveContext.access_generation() as outer:
            assert ReactiveContext.current_generation() == outer
            with ReactiveContext.access_generation() as inner:
                assert inner == outer
        assert ReactiveContext.current_generation() is None

    def test_separate_blocks_get_new_generations(self):
        with ReactiveContext.access_generation() as first:
            pass
        with ReactiveContext.access_generation() as second:
            pass
        assert first != second

    def test_generation_token_combines_generation_and_token(self):
        with ReactiveContext.access_generation() as generation:
            assert ReactiveContext.generation_token() == (generation, ReactiveContext.get_token())


class Counter:
    """Object with a computed view for decorator tests."""

    def __init__(self):
        self._views = TokenCache(ReactiveContext.generation_token)
        self.calls = 0

    @computed
    def doubled(self):
        """Doubled call count."""
        self.calls += 1
        return self.calls * 2


class TestComputed:

    def test_computed_recomputes_per_generation(self):
        counter = Counter()
        assert counter.doubled == 2
        assert counter.doubled == 4

        with ReactiveContext.access_generation():
            assert counter.doubled == 6
            assert counter.doubled == 6

    def test_token_change_invalidates_within_generation(self):
        counter = Counter()
        with ReactiveContext.access_generation():
            assert counter.doubled == 2
            ReactiveContext.invalidate()
            assert counter.doubled == 4

    def test_computed_is_read_only_and_documented(self):
        counter = Counter()
        with pytest.raises(AttributeError):
            counter.doubled = 3
        assert Counter.doubled.__doc__ == "Doubled call count."


class TestTransactions:

    def test_listener_notified_on_each_change_outside_transactions(self):
        seen = []
        ReactiveContext.connect_listener(lambda: seen.append(1))
        ReactiveContext.increment_token()
        ReactiveContext.increment_token()
        ReactiveContext.increment_token(notify=False)
        assert seen == [1, 1]

    def test_nested_transaction_notifies_once(self):
        seen = []
        ReactiveContext.connect_listener(lambda: seen.append(1))

        with ReactiveContext.transaction("outer"):
            ReactiveContext.increment_token()
            with ReactiveContext.transaction("inner"):
                ReactiveContext.increment_token()
                assert ReactiveContext.in_transaction()
            assert seen == []

        assert seen == [1]
        assert not ReactiveContext.in_transaction()

    def test_empty_transaction_does_not_notify(self):
        seen = []
        ReactiveContext.connect_listener(lambda: seen.append(1))
        with ReactiveContext.transaction("noop"):
            pass
        assert seen == []

    def test_failed_transaction_still_notifies_applied_changes(self):
        seen = []
        ReactiveContext.connect_listener(lambda: seen.append(1))

        with pytest.raises(RuntimeError):
            with ReactiveContext.transaction("partial"):
                ReactiveContext.increment_token()
                raise RuntimeError("boom")

        assert seen == [1]
        assert not ReactiveContext.in_transaction()

    def test_listener_errors_are_logged(self, caplog):
        seen = []

        def broken():
            raise ValueError("listener broke")

        ReactiveContext.connect_listener(broken)
        ReactiveContext.connect_listener(lambda: seen.append(1))

        with caplog.at_level(logging.WARNING):
            ReactiveContext.increment_token()

        assert "listener broke" in caplog.text
        assert seen == [1]

    def test_disconnect_listener(self):
        seen = []
        listener = lambda: seen.append(1)  # noqa: E731
        ReactiveContext.connect_listener(listener)
        ReactiveContext.connect_listener(listener)
        ReactiveContext.disconnect_listener(listener)
        ReactiveContext.increment_token()
        assert seen == []
