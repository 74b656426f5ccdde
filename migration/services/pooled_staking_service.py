from typing import List, Sequence

from web3 import AsyncWeb3
from web3.contract import AsyncContract
from web3.types import TxReceipt

from migration.services.transaction_service import TransactionService
from utils.async_utils import gather_with_concurrency
from utils.logger_utils import get_logger

logger = get_logger("Pooled Staking Service")


class PooledStakingService(object):
    def __init__(self, transaction_service: TransactionService):
        self._transaction_service = transaction_service

    async def process_all_pending_actions(
        self, pooled_staking: AsyncContract, sender: str, batch_size: int = 100
    ) -> int:
        """
        Calls processPendingActions(batch_size) until the queue is empty.
        Returns the number of batches processed.
        """
        batches = 0
        while await pooled_staking.functions.hasPendingActions().call():
            await self._transaction_service.send_and_wait(
                pooled_staking.functions.processPendingActions(batch_size), sender
            )
            batches += 1
            logger.info(f"Processed pending actions batch {batches}")

        logger.info(f"No pending actions left after {batches} batches")
        return batches

    async def migrate_stakers(
        self,
        pooled_staking: AsyncContract,
        stakers: Sequence[str],
        sender: str,
        max_concurrency: int = 10,
    ) -> List[TxReceipt]:
        """
        Sends migrateToNewV2Pool for every staker, then waits for all receipts.
        No ordering is assumed between the transactions.
        """
        send = self._transaction_service.send
        tx_hashes = await gather_with_concurrency(
            max_concurrency,
            *(send(pooled_staking.functions.migrateToNewV2Pool(AsyncWeb3.to_checksum_address(s)), sender) for s in stakers),
        )
        receipts = await gather_with_concurrency(
            max_concurrency, *(self._transaction_service.wait(tx_hash) for tx_hash in tx_hashes)
        )
        logger.info(f"Migrated {len(receipts)} stakers to v2 staking pools")
        return receipts
