import asyncio
import os
import shlex
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from migration.exceptions import HardhatCommandError
from utils.logger_utils import get_logger

logger = get_logger("Hardhat Runner")

# One-off data migration scripts living in the contracts repository
GET_LEGACY_ASSESSMENT_REWARDS = "get-legacy-assessment-rewards"
GET_PRODUCTS_V1 = "get-products-v1"
POPULATE_V2_PRODUCTS = "populate-v2-products"

# Unit suites under test/unit, run in this order
UNIT_TEST_SUITES = [
    "TokenController",
    "ClaimProofs",
    "PooledStaking",
    "Pool",
    "SwapOperator",
    "MCR",
    "Distributor",
    "Assessment",
    "Cover",
    "Claims",
    "Incidents",
    "StakingPool",
]


class HardhatRunner(object):
    """Runs hardhat scripts and test suites of the contracts project as subprocesses."""

    def __init__(self, project_dir: Path, command: str = "npx hardhat", network: str = "localhost"):
        self.project_dir = Path(project_dir)
        self.command = shlex.split(command)
        self.network = network

    async def _run(self, args: List[str], env: Optional[Dict[str, str]] = None) -> None:
        command = self.command + args
        logger.info(f"Running: {' '.join(command)}")

        process = await asyncio.create_subprocess_exec(
            *command,
            cwd=str(self.project_dir),
            env={**os.environ, **(env or {})},
        )
        returncode = await process.wait()
        if returncode != 0:
            raise HardhatCommandError(command, returncode)

    async def run_script(self, name: str, env: Optional[Dict[str, str]] = None) -> None:
        """Script arguments are passed through environment variables."""
        await self._run(["run", "--network", self.network, f"scripts/{name}.js"], env=env)

    async def run_unit_suites(self, suites: Optional[Iterable[str]] = None) -> None:
        selected = list(suites) if suites else UNIT_TEST_SUITES
        unknown = [s for s in selected if s not in UNIT_TEST_SUITES]
        if unknown:
            raise ValueError(f"Unknown unit test suites: {', '.join(unknown)}")

        for suite in selected:
            await self._run(["test", f"test/unit/{suite}/index.js"])
