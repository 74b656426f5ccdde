from pathlib import Path
from typing import Any, Dict, Optional

import orjson
from pydantic import BaseModel, ConfigDict, Field
from web3 import AsyncWeb3
from web3.contract import AsyncContract

from migration.exceptions import ArtifactNotFoundError, TransactionFailedError
from migration.services.transaction_service import TransactionService
from utils.logger_utils import get_logger

logger = get_logger("Artifact Loader")


class ContractArtifact(BaseModel):
    """The subset of a hardhat artifact needed to deploy or bind a contract."""

    model_config = ConfigDict(populate_by_name=True)

    contract_name: str = Field(validation_alias="contractName")
    source_name: str | None = Field(default=None, validation_alias="sourceName")
    abi: list[Dict[str, Any]]
    bytecode: str = "0x"


class ArtifactLoader(object):
    """
    Reads compiled hardhat artifacts laid out as
    artifacts/contracts/<path>/<Name>.sol/<Name>.json.
    """

    def __init__(self, artifacts_dir: Path):
        self.artifacts_dir = Path(artifacts_dir)
        self._cache: Dict[str, ContractArtifact] = {}

    def find_artifact_path(self, contract_name: str) -> Path:
        contracts_dir = self.artifacts_dir / "contracts"
        matches = sorted(contracts_dir.glob(f"**/{contract_name}.sol/{contract_name}.json"))
        if not matches:
            raise ArtifactNotFoundError(f"No artifact for {contract_name} under {contracts_dir}")
        if len(matches) > 1:
            logger.warning(f"Multiple artifacts for {contract_name}, using {matches[0]}")
        return matches[0]

    def load(self, contract_name: str) -> ContractArtifact:
        if contract_name not in self._cache:
            path = self.find_artifact_path(contract_name)
            self._cache[contract_name] = ContractArtifact.model_validate(orjson.loads(path.read_bytes()))
        return self._cache[contract_name]


class ContractDeployer(object):
    def __init__(self, web3: AsyncWeb3, artifact_loader: ArtifactLoader, transaction_service: TransactionService):
        self._web3 = web3
        self._artifact_loader = artifact_loader
        self._transaction_service = transaction_service

    async def deploy(self, contract_name: str, *args: Any, sender: str, gas: Optional[int] = None) -> AsyncContract:
        artifact = self._artifact_loader.load(contract_name)
        factory = self._web3.eth.contract(abi=artifact.abi, bytecode=artifact.bytecode)

        receipt = await self._transaction_service.send_and_wait(factory.constructor(*args), sender, gas=gas)
        address = receipt.get("contractAddress")
        if not address:
            raise TransactionFailedError(
                f"Deployment of {contract_name} did not create a contract", tx_hash=receipt.get("transactionHash")
            )

        logger.info(f"Deployed {contract_name} at {address}")
        return self._web3.eth.contract(address=address, abi=artifact.abi)

    def at(self, contract_name: str, address: str) -> AsyncContract:
        """Binds the artifact ABI of `contract_name` to an existing address, e.g. a proxy."""
        artifact = self._artifact_loader.load(contract_name)
        return self._web3.eth.contract(address=AsyncWeb3.to_checksum_address(address), abi=artifact.abi)
