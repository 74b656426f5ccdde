from typing import Any, Dict, Optional

from hexbytes import HexBytes
from web3 import AsyncWeb3
from web3.types import TxReceipt

from migration.exceptions import TransactionFailedError
from utils.logger_utils import get_logger

logger = get_logger("Transaction Service")


class TransactionService(object):
    """
    Sends contract transactions from unlocked (or impersonated) fork accounts
    and waits for them to be mined.
    """

    def __init__(self, web3: AsyncWeb3, receipt_timeout: int = 120):
        self._web3 = web3
        self._receipt_timeout = receipt_timeout

    async def send(self, contract_function, sender: str, gas: Optional[int] = None) -> HexBytes:
        tx_params: Dict[str, Any] = {"from": sender}
        if gas is not None:
            tx_params["gas"] = gas
        return await contract_function.transact(tx_params)

    async def wait(self, tx_hash: HexBytes) -> TxReceipt:
        receipt = await self._web3.eth.wait_for_transaction_receipt(tx_hash, timeout=self._receipt_timeout)
        if receipt["status"] != 1:
            raise TransactionFailedError(f"Transaction {HexBytes(tx_hash).hex()} reverted", tx_hash=tx_hash)
        return receipt

    async def send_and_wait(self, contract_function, sender: str, gas: Optional[int] = None) -> TxReceipt:
        tx_hash = await self.send(contract_function, sender, gas=gas)
        return await self.wait(tx_hash)
