import pytest
from unittest.mock import AsyncMock, MagicMock


@pytest.fixture
def mock_uow():
    """Unit of work whose run() executes the closure and commits, or rolls back and re-raises"""
    uow = MagicMock()
    uow.__aenter__ = AsyncMock(return_value=uow)
    uow.__aexit__ = AsyncMock()
    uow.commit = AsyncMock()
    uow.rollback = AsyncMock()

    async def _run(work):
        try:
            result = await work()
        except Exception:
            await uow.rollback()
            raise
        await uow.commit()
        return result

    uow.run = AsyncMock(side_effect=_run)
    return uow


@pytest.fixture
def mock_outbox_repo():
    repo = MagicMock()
    repo.add = AsyncMock(side_effect=lambda event: event)
    repo.update = AsyncMock(side_effect=lambda event: event)
    return repo
