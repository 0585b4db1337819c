import json
from datetime import timedelta

from stitchcart.auth import (
    LEGACY_AUTH_KEY,
    MULTI_AUTH_KEY,
    AccountAuthData,
    AccountKind,
    MultiAccountStore,
    StoredSession,
    StoredUser,
)
from stitchcart.storage import MemoryStorage

from tests._infra import FakeClock, run

CUSTOMER = AccountKind.CUSTOMER
EMPLOYEE = AccountKind.EMPLOYEE


def account(clock: FakeClock, email: str, role: str, token: str) -> AccountAuthData:
    return AccountAuthData(
        user=StoredUser(id=email, email=email, role=role, account_kind=AccountKind.for_role(role)),
        session=StoredSession(
            session_id=f"sess-{token}",
            access_token=token,
            refresh_token=f"refresh-{token}",
            last_activity=clock(),
        ),
    )


def store_with_both(clock: FakeClock, storage: MemoryStorage | None = None) -> MultiAccountStore:
    store = MultiAccountStore(storage or MemoryStorage(), clock=clock)

    async def fill() -> None:
        await store.store_account_auth_data(CUSTOMER, account(clock, "ada@example.com", "customer", "c-1"))
        await store.store_account_auth_data(EMPLOYEE, account(clock, "grace@mayhem.test", "admin", "e-1"))

    run(fill())
    return store


def test_slots_are_independent() -> None:
    clock = FakeClock()
    store = store_with_both(clock)

    async def main():
        return (
            await store.get_account_auth_data(CUSTOMER),
            await store.get_account_auth_data(EMPLOYEE),
            await store.current_account(),
        )

    customer, employee, current = run(main())
    assert customer.session.access_token == "c-1"
    assert employee.session.access_token == "e-1"
    assert employee.user.account_kind is EMPLOYEE
    assert current is EMPLOYEE


def test_storing_overrides_account_kind_of_user() -> None:
    clock = FakeClock()
    store = MultiAccountStore(MemoryStorage(), clock=clock)

    async def main():
        await store.store_account_auth_data(EMPLOYEE, account(clock, "x@example.com", "customer", "t"))
        return await store.get_account_auth_data(EMPLOYEE)

    assert run(main()).user.account_kind is EMPLOYEE


def test_session_expires_after_thirty_days_of_inactivity() -> None:
    clock = FakeClock()
    store = store_with_both(clock)

    clock.advance(timedelta(days=29, hours=23))
    assert run(store.is_account_authenticated(CUSTOMER)) is True

    clock.advance(timedelta(hours=1, seconds=1))
    assert run(store.is_account_authenticated(CUSTOMER)) is False
    assert run(store.available_accounts()) == []


def test_switch_only_to_authenticated_slot() -> None:
    clock = FakeClock()
    store = MultiAccountStore(MemoryStorage(), clock=clock)

    async def main():
        await store.store_account_auth_data(CUSTOMER, account(clock, "ada@example.com", "customer", "c-1"))
        refused = await store.switch_account(EMPLOYEE)
        after_refusal = await store.current_account()
        return refused, after_refusal

    refused, current = run(main())
    assert refused is False
    assert current is CUSTOMER


def test_switch_moves_pointer_without_touching_slots() -> None:
    clock = FakeClock()
    store = store_with_both(clock)

    async def main():
        before = await store.get_account_auth_data(CUSTOMER)
        switched = await store.switch_account(CUSTOMER)
        return before, switched, await store.get_current_account_data()

    before, switched, current = run(main())
    assert switched is True
    assert current == before


def test_logout_current_falls_back_to_other_slot() -> None:
    clock = FakeClock()
    store = store_with_both(clock)

    async def main():
        await store.logout_current_account()
        return await store.current_account(), await store.get_account_auth_data(EMPLOYEE)

    current, employee = run(main())
    assert current is CUSTOMER
    assert employee is None


def test_logout_without_fresh_fallback_clears_pointer() -> None:
    clock = FakeClock()
    store = MultiAccountStore(MemoryStorage(), clock=clock)

    async def main():
        await store.store_account_auth_data(CUSTOMER, account(clock, "ada@example.com", "customer", "c-1"))
        clock.advance(timedelta(days=31))
        await store.store_account_auth_data(EMPLOYEE, account(clock, "grace@mayhem.test", "admin", "e-1"))
        await store.logout_account(EMPLOYEE)
        return await store.current_account()

    assert run(main()) is None


def test_failed_remote_logout_still_clears_locally() -> None:
    clock = FakeClock()
    store = store_with_both(clock)
    revoked: list[str] = []

    async def flaky_revoke(data: AccountAuthData) -> None:
        revoked.append(data.session.access_token)
        raise ConnectionError("server unreachable")

    async def main():
        done = await store.logout_account(CUSTOMER, flaky_revoke)
        return done, await store.get_account_auth_data(CUSTOMER)

    done, customer = run(main())
    assert done is True
    assert customer is None
    assert revoked == ["c-1"]


def test_logout_all_wipes_document() -> None:
    clock = FakeClock()
    storage = MemoryStorage()
    store = store_with_both(clock, storage)

    run(store.logout_all())

    assert MULTI_AUTH_KEY not in storage.snapshot()
    assert run(store.all_account_info()) == []
    assert run(store.current_account()) is None


def test_account_info_reports_current_and_authenticated() -> None:
    clock = FakeClock()
    store = store_with_both(clock)

    infos = run(store.all_account_info())

    assert [(i.kind, i.is_current, i.is_authenticated) for i in infos] == [
        (CUSTOMER, False, True),
        (EMPLOYEE, True, True),
    ]
    assert infos[0].user.display_name == "ada@example.com"


def test_rotate_and_touch_refresh_current_slot_only() -> None:
    clock = FakeClock()
    store = store_with_both(clock)
    clock.advance(timedelta(days=10))

    async def main():
        rotated = await store.rotate_access_token("e-2")
        clock.advance(timedelta(days=25))
        await store.touch()
        return rotated, await store.get_account_auth_data(EMPLOYEE), await store.get_account_auth_data(CUSTOMER)

    rotated, employee, customer = run(main())
    assert rotated is True
    assert employee.session.access_token == "e-2"
    assert employee.session.last_activity == clock()
    assert customer.session.access_token == "c-1"
    assert run(store.is_account_authenticated(EMPLOYEE)) is True
    assert run(store.is_account_authenticated(CUSTOMER)) is False


def test_touch_by_kind_and_token_lookup() -> None:
    clock = FakeClock()
    store = store_with_both(clock)
    stored_at = clock()
    clock.advance(timedelta(hours=3))

    async def main():
        kind = await store.account_for_token("c-1")
        await store.touch(kind)
        return (
            kind,
            await store.account_for_token("nope"),
            await store.get_account_auth_data(CUSTOMER),
            await store.get_account_auth_data(EMPLOYEE),
        )

    kind, unknown, customer, employee = run(main())
    assert kind is CUSTOMER
    assert unknown is None
    assert customer.session.last_activity == clock()
    assert employee.session.last_activity == stored_at
    assert run(store.current_account()) is EMPLOYEE


def test_state_survives_a_new_store_instance() -> None:
    clock = FakeClock()
    storage = MemoryStorage()
    store_with_both(clock, storage)

    reopened = MultiAccountStore(storage, clock=clock)
    assert run(reopened.current_account()) is EMPLOYEE
    assert run(reopened.get_account_auth_data(CUSTOMER)).user.email == "ada@example.com"


# ═══════════════════════════════════════════════════════════════════════════════
# Legacy migration
# ═══════════════════════════════════════════════════════════════════════════════

LEGACY = {
    "user": {"id": 42, "email": "grace@mayhem.test", "role": "manager", "firstName": "Grace"},
    "session": {
        "sessionId": "s-42",
        "accessToken": "legacy-token",
        "refreshToken": "legacy-refresh",
        "lastActivity": "2026-02-28T09:00:00+00:00",
    },
}


def test_legacy_document_moves_into_role_slot() -> None:
    clock = FakeClock()
    storage = MemoryStorage({LEGACY_AUTH_KEY: json.dumps(LEGACY)})

    store = run(MultiAccountStore.open(storage, clock=clock))

    employee = run(store.get_account_auth_data(EMPLOYEE))
    assert employee.user.id == 42
    assert employee.user.display_name == "Grace"
    assert employee.session.access_token == "legacy-token"
    assert run(store.current_account()) is EMPLOYEE
    assert run(store.get_account_auth_data(CUSTOMER)) is None
    assert LEGACY_AUTH_KEY not in storage.snapshot()


def test_migration_is_idempotent() -> None:
    clock = FakeClock()
    storage = MemoryStorage({LEGACY_AUTH_KEY: json.dumps(LEGACY)})
    store = MultiAccountStore(storage, clock=clock)

    first = run(store.migrate_legacy())
    snapshot = storage.snapshot()
    second = run(store.migrate_legacy())

    assert first is EMPLOYEE
    assert second is None
    assert storage.snapshot() == snapshot


def test_unreadable_legacy_document_is_left_alone() -> None:
    storage = MemoryStorage({LEGACY_AUTH_KEY: "{broken"})
    store = run(MultiAccountStore.open(storage, clock=FakeClock()))

    assert run(store.current_account()) is None
    assert storage.snapshot()[LEGACY_AUTH_KEY] == "{broken"
