from typing import Any, Dict, List, Optional

import aiohttp
import orjson
from web3 import AsyncWeb3
from web3.contract import AsyncContract

from config.settings import settings
from migration.exceptions import ContractNotFoundError
from migration.mappers.contract_record_mapper import ContractRecordMapper
from migration.models.contract_record import ContractRecord
from utils.async_utils import async_retry
from utils.logger_utils import get_logger

logger = get_logger("Version Data Client")


class VersionDataClient(object):
    """
    Fetches the published ABI/address registry of the deployed protocol.
    Use as an async context manager so the session is always closed.
    """

    def __init__(self, url: Optional[str] = None, timeout: Optional[int] = None):
        self.url = url or settings.version_data.url
        self.timeout = aiohttp.ClientTimeout(total=timeout or settings.version_data.timeout)
        self.session: Optional[aiohttp.ClientSession] = None
        self.record_mapper = ContractRecordMapper()

    async def __aenter__(self):
        self.session = aiohttp.ClientSession(
            timeout=self.timeout,
            headers={"User-Agent": f"{settings.app.name}/1.0"},
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self.session:
            await self.session.close()

    @async_retry(max_retries=settings.version_data.max_retries)
    async def get_version_data(self) -> Dict[str, Any]:
        logger.info(f"Fetching version data from {self.url}")
        async with self.session.get(self.url) as response:
            response.raise_for_status()
            return orjson.loads(await response.read())

    async def get_contract_records(self, network: str) -> Dict[str, ContractRecord]:
        data = await self.get_version_data()
        return self.parse_contract_records(data, network)

    def parse_contract_records(self, data: Dict[str, Any], network: str) -> Dict[str, ContractRecord]:
        if network not in data:
            raise ContractNotFoundError(f"Network '{network}' not found in version data")

        items: List[Dict[str, Any]] = data[network].get("abis", [])
        records = {}
        for item in items:
            record = self.record_mapper.json_dict_to_contract_record(item)
            records[record.code] = record

        logger.info(f"Loaded {len(records)} contract records for {network}")
        return records


class ContractFactory(object):
    """Binds registry codes to AsyncWeb3 contract instances."""

    def __init__(self, web3: AsyncWeb3, records: Dict[str, ContractRecord]):
        self._web3 = web3
        self._records = records

    @property
    def codes(self) -> List[str]:
        return list(self._records.keys())

    def record(self, code: str) -> ContractRecord:
        try:
            return self._records[code]
        except KeyError:
            raise ContractNotFoundError(f"Contract code '{code}' not found in version data") from None

    def __call__(self, code: str) -> AsyncContract:
        record = self.record(code)
        address = AsyncWeb3.to_checksum_address(record.address)
        return self._web3.eth.contract(address=address, abi=record.abi)


async def get_contract_factory(web3: AsyncWeb3, network: Optional[str] = None) -> ContractFactory:
    network = network or settings.chain.network
    async with VersionDataClient() as client:
        records = await client.get_contract_records(network)
    return ContractFactory(web3, records)
