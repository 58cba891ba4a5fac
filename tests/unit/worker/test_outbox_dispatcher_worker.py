"""Unit tests for OutboxDispatcherWorker"""

import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from src.app.use_cases.events import DispatchResultDTO
from src.worker.outbox_dispatcher import OutboxDispatcherWorker


@pytest.fixture
def mock_config():
    config = MagicMock()
    config.DB_URI = "sqlite+aiosqlite:///./test_wallet.db"
    config.OUTBOX_DISPATCH_ENABLED = True
    config.OUTBOX_DISPATCH_INTERVAL_SECONDS = 10
    config.OUTBOX_BATCH_SIZE = 25
    config.OUTBOX_MAX_ATTEMPTS = 4
    config.OUTBOX_CLAIM_SECONDS = 45
    config.OUTBOX_RETRY_BASE_SECONDS = 15
    config.NOTIFICATION_WEBHOOK = None
    return config


@pytest.fixture
def mock_session():
    session = MagicMock()
    session.__aenter__ = AsyncMock(return_value=session)
    session.__aexit__ = AsyncMock(return_value=False)
    return session


class TestOutboxDispatcherWorkerInit:

    @patch("src.worker.outbox_dispatcher.create_notification_service")
    @patch("src.worker.outbox_dispatcher.build_session_factory")
    @patch("src.worker.outbox_dispatcher.build_engine")
    def test_builds_notification_service_from_webhook(
        self, mock_build_engine, mock_build_factory, mock_create_service, mock_config
    ):
        # Act
        worker = OutboxDispatcherWorker(webhook_url="https://hooks.example.com/wallet", config=mock_config)

        # Assert
        mock_create_service.assert_called_once_with("https://hooks.example.com/wallet")
        assert worker.notification_service is mock_create_service.return_value

    @patch("src.worker.outbox_dispatcher.create_notification_service")
    @patch("src.worker.outbox_dispatcher.build_session_factory")
    @patch("src.worker.outbox_dispatcher.build_engine")
    def test_uses_given_notification_service(
        self, mock_build_engine, mock_build_factory, mock_create_service, mock_config
    ):
        service = MagicMock()

        worker = OutboxDispatcherWorker(notification_service=service, config=mock_config)

        assert worker.notification_service is service
        mock_create_service.assert_not_called()


@pytest.mark.asyncio
class TestOutboxDispatcherWorkerRunOnce:

    @patch("src.worker.outbox_dispatcher.DispatchOutboxEvents")
    @patch("src.worker.outbox_dispatcher.SqlAlchemyOutboxRepository")
    @patch("src.worker.outbox_dispatcher.SqlAlchemyUnitOfWork")
    @patch("src.worker.outbox_dispatcher.build_session_factory")
    @patch("src.worker.outbox_dispatcher.build_engine")
    async def test_run_once_dispatches_with_configured_limits(
        self,
        mock_build_engine,
        mock_build_factory,
        mock_uow_class,
        mock_outbox_repo_class,
        mock_use_case_class,
        mock_config,
        mock_session,
    ):
        """
        Given: Dispatch is enabled
        When: run_once is called
        Then: The use case runs with the configured batch size and attempt limit
        """
        # Arrange
        mock_build_factory.return_value = MagicMock(return_value=mock_session)
        mock_use_case_class.return_value.execute = AsyncMock(return_value=DispatchResultDTO(delivered=3))
        service = MagicMock()

        # Act
        worker = OutboxDispatcherWorker(notification_service=service, config=mock_config)
        result = await worker.run_once()

        # Assert
        assert result.delivered == 3
        kwargs = mock_use_case_class.call_args.kwargs
        assert kwargs["batch_size"] == 25
        assert kwargs["max_attempts"] == 4
        assert kwargs["claim_seconds"] == 45
        assert kwargs["retry_base_seconds"] == 15
        assert kwargs["notification_service"] is service
        mock_uow_class.assert_called_once_with(mock_session)

    @patch("src.worker.outbox_dispatcher.build_session_factory")
    @patch("src.worker.outbox_dispatcher.build_engine")
    async def test_run_once_skips_when_disabled(self, mock_build_engine, mock_build_factory, mock_config):
        # Arrange
        mock_config.OUTBOX_DISPATCH_ENABLED = False

        # Act
        worker = OutboxDispatcherWorker(notification_service=MagicMock(), config=mock_config)
        result = await worker.run_once()

        # Assert
        assert result.delivered == 0
        assert result.failed == 0
        mock_build_factory.return_value.assert_not_called()

    @patch("src.worker.outbox_dispatcher.asyncio.sleep")
    @patch("src.worker.outbox_dispatcher.build_session_factory")
    @patch("src.worker.outbox_dispatcher.build_engine")
    async def test_run_forever_uses_configured_interval(
        self, mock_build_engine, mock_build_factory, mock_sleep, mock_config
    ):
        # Arrange
        mock_sleep.side_effect = KeyboardInterrupt("Test termination")
        worker = OutboxDispatcherWorker(notification_service=MagicMock(), config=mock_config)
        worker.run_once = AsyncMock(return_value=DispatchResultDTO())

        # Act
        with pytest.raises(KeyboardInterrupt):
            await worker.run_forever()

        # Assert
        worker.run_once.assert_awaited_once()
        mock_sleep.assert_called_with(10)
