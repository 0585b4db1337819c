from dataclasses import dataclass

import pytest
from kungfu import Error, Ok

from stitchcart.storage import (
    JsonCodec,
    MemoryStorage,
    SQLAlchemyStorage,
    Storage,
    StorageErrorKind,
)

from tests._infra import run


@dataclass(frozen=True, slots=True)
class Note:
    title: str
    pinned: bool = False


async def _exercise(storage: Storage) -> None:
    assert await storage.get("missing") is None

    await storage.set("cart:1", "one")
    await storage.set("cart:2", "two")
    await storage.set("auth", "x")
    await storage.set("cart:1", "uno")

    assert await storage.get("cart:1") == "uno"
    assert await storage.keys("cart:") == ["cart:1", "cart:2"]
    assert await storage.keys() == ["auth", "cart:1", "cart:2"]

    assert await storage.delete("cart:2") is True
    assert await storage.delete("cart:2") is False
    assert await storage.get("cart:2") is None


def test_memory_storage_contract() -> None:
    storage = MemoryStorage()
    run(_exercise(storage))
    assert isinstance(storage, Storage)
    assert storage.snapshot() == {"cart:1": "uno", "auth": "x"}


def test_sqlalchemy_storage_contract(tmp_path) -> None:
    async def main() -> None:
        storage = await SQLAlchemyStorage.create(f"sqlite+aiosqlite:///{tmp_path / 'state.db'}")
        try:
            await _exercise(storage)
        finally:
            await storage.close()

    run(main())


def test_sqlalchemy_storage_survives_reopen(tmp_path) -> None:
    url = f"sqlite+aiosqlite:///{tmp_path / 'state.db'}"

    async def main() -> str | None:
        first = await SQLAlchemyStorage.create(url)
        await first.set("mayhem_cart_v1", "[]")
        await first.close()

        second = await SQLAlchemyStorage.create(url)
        try:
            return await second.get("mayhem_cart_v1")
        finally:
            await second.close()

    assert run(main()) == "[]"


def test_sqlalchemy_prefix_is_literal(tmp_path) -> None:
    async def main() -> list[str]:
        storage = await SQLAlchemyStorage.create(f"sqlite+aiosqlite:///{tmp_path / 'state.db'}")
        try:
            await storage.set("a_b", "1")
            await storage.set("axb", "2")
            return await storage.keys("a_")
        finally:
            await storage.close()

    assert run(main()) == ["a_b"]


# ═══════════════════════════════════════════════════════════════════════════════
# Codec
# ═══════════════════════════════════════════════════════════════════════════════

codec: JsonCodec[list[Note]] = JsonCodec(list[Note])


def test_codec_saves_and_loads_dataclasses() -> None:
    storage = MemoryStorage()

    async def main() -> list[Note] | None:
        await codec.save(storage, "notes", [Note("groceries", pinned=True)])
        return await codec.load(storage, "notes")

    assert run(main()) == [Note("groceries", pinned=True)]


@pytest.mark.parametrize("raw", ["{not json", '{"title": 1}', '[{"pinned": true}]'])
def test_corrupt_document_is_reported_not_raised(raw) -> None:
    match codec.decode(raw, "notes"):
        case Error(err):
            assert err.kind is StorageErrorKind.CORRUPT
            assert err.key == "notes"
        case Ok(value):
            pytest.fail(f"decoded garbage into {value!r}")


def test_corrupt_document_loads_as_missing() -> None:
    storage = MemoryStorage({"notes": "{oops"})
    assert run(codec.load(storage, "notes")) is None
