from typing import Any, List

from web3 import AsyncWeb3
from web3.types import RPCEndpoint

from migration.exceptions import ChainRpcError
from utils.logger_utils import get_logger

logger = get_logger("EVM Service")

SECONDS_PER_DAY = 24 * 60 * 60


def days_to_seconds(number_of_days: int) -> int:
    return number_of_days * SECONDS_PER_DAY


class EvmService(object):
    """
    Test-only JSON-RPC methods of a hardhat fork: clock control, mining and
    account impersonation.
    """

    def __init__(self, web3: AsyncWeb3):
        self._web3 = web3

    async def _request(self, method: str, params: List[Any]) -> Any:
        response = await self._web3.provider.make_request(RPCEndpoint(method), params)
        if "error" in response:
            raise ChainRpcError(f"{method} failed: {response['error']}")
        return response.get("result")

    async def set_next_block_time(self, timestamp: int) -> None:
        await self._request("evm_setNextBlockTimestamp", [timestamp])

    async def mine_next_block(self) -> None:
        await self._request("evm_mine", [])

    async def increase_time(self, seconds: int) -> None:
        await self._request("evm_increaseTime", [seconds])

    async def set_time(self, timestamp: int) -> None:
        await self.set_next_block_time(timestamp)
        await self.mine_next_block()

    async def latest_timestamp(self) -> int:
        block = await self._web3.eth.get_block("latest")
        return block["timestamp"]

    async def advance_time(self, seconds: int) -> int:
        """Mines a block `seconds` after the latest one and returns its timestamp."""
        timestamp = await self.latest_timestamp() + seconds
        await self.set_time(timestamp)
        return timestamp

    async def impersonate_account(self, address: str) -> str:
        checksum_address = AsyncWeb3.to_checksum_address(address)
        await self._request("hardhat_impersonateAccount", [checksum_address])
        logger.debug(f"Impersonating {checksum_address}")
        return checksum_address

    async def stop_impersonating_account(self, address: str) -> None:
        await self._request("hardhat_stopImpersonatingAccount", [AsyncWeb3.to_checksum_address(address)])

    async def set_balance(self, address: str, balance_wei: int) -> None:
        # hardhat wants a quantity without leading zeros
        await self._request("hardhat_setBalance", [AsyncWeb3.to_checksum_address(address), hex(balance_wei)])
