"""Tests for wren.auth.store — in-memory accounts."""

import threading

import pytest

from wren.auth.store import Account, AccountExists, AccountStore


class TestAccountStore:
    def test_add_and_lookup(self) -> None:
        store = AccountStore()
        account = store.add("ada", "hash")

        assert store.get_by_username("ada") == account
        assert store.get_by_id(account.id) == account
        assert len(store) == 1

    def test_username_is_case_insensitive(self) -> None:
        store = AccountStore()
        account = store.add("Ada", "hash")

        assert store.get_by_username("ADA") == account
        with pytest.raises(AccountExists):
            store.add("ada", "other")

    def test_missing(self) -> None:
        store = AccountStore()
        assert store.get_by_username("nobody") is None
        assert store.get_by_id("nope") is None

    def test_empty_store_has_zero_length(self) -> None:
        assert len(AccountStore()) == 0

    def test_concurrent_adds_keep_usernames_unique(self) -> None:
        store = AccountStore()
        failures: list[str] = []

        def register() -> None:
            try:
                store.add("racer", "hash")
            except AccountExists:
                failures.append("racer")

        threads = [threading.Thread(target=register) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(store) == 1
        assert len(failures) == 7


class TestAccount:
    def test_public_hides_password_hash(self) -> None:
        account = Account(id="1", username="ada", password_hash="secret-hash")
        assert account.public() == {
            "id": "1",
            "username": "ada",
            "created_at": account.created_at,
        }
        assert "secret-hash" not in repr(account)
