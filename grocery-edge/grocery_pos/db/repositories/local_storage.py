from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from grocery_pos.db.models.local_storage import LocalStorageEntry


async def get_item(db: AsyncSession, key: str) -> Optional[str]:
    entry = await db.get(LocalStorageEntry, key)
    return entry.value if entry is not None else None


async def set_item(db: AsyncSession, key: str, value: str) -> None:
    entry = await db.get(LocalStorageEntry, key)
    if entry is None:
        db.add(LocalStorageEntry(key=key, value=value))
    else:
        entry.value = value
    await db.commit()


async def delete_item(db: AsyncSession, key: str) -> None:
    entry = await db.get(LocalStorageEntry, key)
    if entry is not None:
        await db.delete(entry)
        await db.commit()
