from typing import AsyncIterator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from grocery_pos.runtime import PosRuntime


def get_runtime(request: Request) -> PosRuntime:
    return request.app.state.runtime


async def get_db(runtime: PosRuntime = Depends(get_runtime)) -> AsyncIterator[AsyncSession]:
    async with runtime.session_factory() as session:
        yield session
