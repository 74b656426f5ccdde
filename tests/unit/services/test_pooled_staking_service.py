import pytest
from unittest.mock import AsyncMock, MagicMock

from constants.addresses import TOP_STAKERS
from migration.services.pooled_staking_service import PooledStakingService

SENDER = "0x1111111111111111111111111111111111111111"


@pytest.fixture
def mock_transaction_service():
    service = MagicMock()
    service.send_and_wait = AsyncMock(return_value={"status": 1})
    service.send = AsyncMock()
    service.wait = AsyncMock()
    return service


@pytest.fixture
def mock_pooled_staking():
    return MagicMock()


@pytest.mark.asyncio
async def test_process_all_pending_actions_until_empty(mock_transaction_service, mock_pooled_staking):
    mock_pooled_staking.functions.hasPendingActions.return_value.call = AsyncMock(side_effect=[True, True, True, False])
    service = PooledStakingService(mock_transaction_service)

    batches = await service.process_all_pending_actions(mock_pooled_staking, SENDER, batch_size=100)

    assert batches == 3
    assert mock_transaction_service.send_and_wait.await_count == 3
    mock_pooled_staking.functions.processPendingActions.assert_called_with(100)


@pytest.mark.asyncio
async def test_process_all_pending_actions_when_queue_empty(mock_transaction_service, mock_pooled_staking):
    mock_pooled_staking.functions.hasPendingActions.return_value.call = AsyncMock(return_value=False)
    service = PooledStakingService(mock_transaction_service)

    assert await service.process_all_pending_actions(mock_pooled_staking, SENDER) == 0
    mock_transaction_service.send_and_wait.assert_not_awaited()


@pytest.mark.asyncio
async def test_migrate_stakers_sends_all_before_waiting(mock_transaction_service, mock_pooled_staking):
    events = []

    async def send(function, sender):
        events.append("send")
        return f"0x{len(events):064x}"

    async def wait(tx_hash):
        events.append("wait")
        return {"status": 1, "transactionHash": tx_hash}

    mock_transaction_service.send.side_effect = send
    mock_transaction_service.wait.side_effect = wait
    service = PooledStakingService(mock_transaction_service)

    receipts = await service.migrate_stakers(mock_pooled_staking, TOP_STAKERS, SENDER, max_concurrency=4)

    assert len(receipts) == len(TOP_STAKERS)
    assert events == ["send"] * len(TOP_STAKERS) + ["wait"] * len(TOP_STAKERS)
    migrated = [c.args[0] for c in mock_pooled_staking.functions.migrateToNewV2Pool.call_args_list]
    assert sorted(migrated) == sorted(TOP_STAKERS)


@pytest.mark.asyncio
async def test_migrate_stakers_propagates_failures(mock_transaction_service, mock_pooled_staking):
    mock_transaction_service.send.return_value = "0x01"
    mock_transaction_service.wait.side_effect = RuntimeError("reverted")
    service = PooledStakingService(mock_transaction_service)

    with pytest.raises(RuntimeError, match="reverted"):
        await service.migrate_stakers(mock_pooled_staking, TOP_STAKERS[:2], SENDER)
