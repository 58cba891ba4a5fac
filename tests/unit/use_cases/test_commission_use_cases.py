"""Unit tests for commission creation, queries and bulk payout"""

import pytest
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

from src.app.use_cases.commission.create_commission import AwardCommission, RequestCommission
from src.app.use_cases.commission.dtos import CommissionCommandDTO
from src.app.use_cases.commission.queries import GetCommission, ProcessCommissionPayments
from src.app.use_cases.commission.transitions import ClawbackCommission, ConfirmCommission
from src.domain.commission import Commission, CommissionStatus, CommissionType
from src.domain.errors import CommissionNotFoundError, InvalidStateTransitionError


def make_commission(commission_id="com_1", status=CommissionStatus.PENDING):
    return Commission(
        id=commission_id,
        consultant_id="consultant_1",
        region_id="region_1",
        job_id="job_1",
        type=CommissionType.RECRUITMENT_SERVICE,
        amount=Decimal("398.00"),
        currency="AUD",
        status=status,
    )


@pytest.fixture
def workflow():
    workflow = MagicMock()
    workflow.build_commission = AsyncMock(return_value=make_commission())
    workflow.create_pending = AsyncMock(side_effect=lambda c: c)
    return workflow


@pytest.fixture
def commission_repo():
    repo = MagicMock()
    repo.find_live = AsyncMock(return_value=None)
    repo.get_by_id = AsyncMock(return_value=None)
    return repo


def award_command():
    return CommissionCommandDTO(
        consultant_id="consultant_1", commission_type=CommissionType.RECRUITMENT_SERVICE, job_id="job_1"
    )


@pytest.mark.asyncio
class TestCreateCommission:

    async def test_request_creates_pending(self, mock_uow, workflow):
        result = await RequestCommission(mock_uow, workflow).execute(award_command())

        assert result.status == CommissionStatus.PENDING
        workflow.create_pending.assert_awaited_once()
        mock_uow.commit.assert_awaited_once()

    async def test_award_delegates_to_workflow(self, mock_uow, workflow):
        workflow.award = AsyncMock(return_value=(make_commission(status=CommissionStatus.CONFIRMED), True))

        result = await AwardCommission(mock_uow, workflow).execute(award_command())

        assert result.status == CommissionStatus.CONFIRMED
        assert result.amount == Decimal("398.00")
        workflow.award.assert_awaited_once()
        assert workflow.award.call_args.kwargs["job_id"] == "job_1"
        mock_uow.commit.assert_awaited_once()

    async def test_award_returns_existing_commission(self, mock_uow, workflow):
        workflow.award = AsyncMock(return_value=(make_commission("com_existing", CommissionStatus.CONFIRMED), False))

        result = await AwardCommission(mock_uow, workflow).execute(award_command())

        assert result.id == "com_existing"


@pytest.mark.asyncio
class TestCommissionTransitionsUseCases:

    async def test_confirm_commits(self, mock_uow, workflow):
        workflow.confirm = AsyncMock(return_value=make_commission(status=CommissionStatus.CONFIRMED))

        result = await ConfirmCommission(mock_uow, workflow).execute("com_1", created_by="admin_1")

        assert result.status == CommissionStatus.CONFIRMED
        mock_uow.commit.assert_awaited_once()

    async def test_failed_clawback_rolls_back(self, mock_uow, workflow):
        workflow.clawback = AsyncMock(side_effect=InvalidStateTransitionError("commission", "CLAWBACK", "claw back"))

        with pytest.raises(InvalidStateTransitionError):
            await ClawbackCommission(mock_uow, workflow).execute("com_1", "again")

        mock_uow.rollback.assert_awaited_once()
        mock_uow.commit.assert_not_awaited()

    async def test_get_unknown_commission(self, commission_repo):
        with pytest.raises(CommissionNotFoundError):
            await GetCommission(commission_repo).execute("missing")


@pytest.mark.asyncio
class TestProcessCommissionPayments:

    async def test_batch_continues_past_failures(self, mock_uow, workflow):
        async def mark_as_paid(commission_id):
            if commission_id == "com_bad":
                raise InvalidStateTransitionError("commission", "PENDING", "mark as paid")
            return make_commission(commission_id, CommissionStatus.PAID)

        workflow.mark_as_paid = AsyncMock(side_effect=mark_as_paid)

        result = await ProcessCommissionPayments(mock_uow, workflow).execute(["com_1", "com_bad", "com_2"])

        assert [c.id for c in result.paid] == ["com_1", "com_2"]
        assert len(result.failed) == 1
        assert result.failed[0].commission_id == "com_bad"
        assert result.failed[0].code == "INVALID_STATE_TRANSITION"
        assert mock_uow.run.await_count == 3
        assert mock_uow.commit.await_count == 2
        assert mock_uow.rollback.await_count == 1
