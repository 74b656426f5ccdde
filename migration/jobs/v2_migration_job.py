from typing import Iterable, List, Optional

from web3 import AsyncWeb3
from web3.contract import AsyncContract

from config.settings import settings
from constants import contract_codes as codes
from constants.addresses import (
    DAI_ADDRESS,
    PRICE_FEED_ORACLE_ADDRESS,
    STETH_ADDRESS,
    SWAP_CONTROLLER,
    TOP_STAKERS,
    TWAP_ORACLE_ADDRESS,
)
from constants.proposal_categories import PROPOSAL_CATEGORIES
from migration.artifacts.artifact_loader import ArtifactLoader, ContractDeployer
from migration.clients.version_data_client import ContractFactory, get_contract_factory
from migration.enums.contract_type import ContractType
from migration.enums.member_role import MemberRole
from migration.enums.proposal_category_id import ProposalCategoryId
from migration.hardhat.hardhat_runner import (
    GET_LEGACY_ASSESSMENT_REWARDS,
    GET_PRODUCTS_V1,
    POPULATE_V2_PRODUCTS,
    HardhatRunner,
)
from migration.jobs.async_base_job import AsyncBaseJob
from migration.jobs.migration_step import MigrationStep, select_steps
from migration.services.evm_service import EvmService
from migration.services.governance_service import (
    GovernanceService,
    encode_add_new_internal_contracts,
    encode_edit_category,
    encode_new_category,
    encode_remove_contracts,
    encode_upgrade_master,
    encode_upgrade_multiple_contracts,
    to_contract_code,
)
from migration.services.pooled_staking_service import PooledStakingService
from migration.services.transaction_service import TransactionService
from utils.logger_utils import get_logger

logger = get_logger("V2 Migration Job")

# Pool asset parameters for DAI
DAI_DECIMALS = 18
DAI_MIN_AMOUNT = 0
DAI_MAX_AMOUNT = AsyncWeb3.to_wei(1000, "ether")
DAI_MAX_SLIPPAGE_RATIO = 100  # 1%

COVER_NFT_NAME = "Nexus Mutual Cover"
COVER_NFT_SYMBOL = "NXC"


class MigrationContext(object):
    """Contracts and accounts shared between migration steps."""

    def __init__(self):
        self.deployer: Optional[str] = None
        self.ab_members: List[str] = []

        # legacy contracts bound from the version data registry
        self.master: Optional[AsyncContract] = None
        self.nxm: Optional[AsyncContract] = None
        self.member_roles: Optional[AsyncContract] = None
        self.governance: Optional[AsyncContract] = None
        self.pool: Optional[AsyncContract] = None
        self.mcr: Optional[AsyncContract] = None
        self.incidents: Optional[AsyncContract] = None
        self.quotation: Optional[AsyncContract] = None
        self.quotation_data: Optional[AsyncContract] = None
        self.proposal_category: Optional[AsyncContract] = None
        self.token_controller: Optional[AsyncContract] = None
        self.claims: Optional[AsyncContract] = None
        self.claims_reward: Optional[AsyncContract] = None
        self.claims_data: Optional[AsyncContract] = None

        # v2 contracts
        self.products_v1: Optional[AsyncContract] = None
        self.staking_pool_implementation: Optional[AsyncContract] = None
        self.cover_nft: Optional[AsyncContract] = None
        self.cover: Optional[AsyncContract] = None
        self.swap_operator: Optional[AsyncContract] = None
        self.pooled_staking: Optional[AsyncContract] = None


class V2MigrationJob(AsyncBaseJob):
    """
    Replays the v1 to v2 upgrade of the protocol on a mainnet fork, one
    governance proposal at a time. Any failing call aborts the run.
    """

    name = "v2 migration"

    def __init__(
        self,
        web3: AsyncWeb3,
        network: Optional[str] = None,
        deployer: Optional[ContractDeployer] = None,
        evm_service: Optional[EvmService] = None,
        governance_service: Optional[GovernanceService] = None,
        pooled_staking_service: Optional[PooledStakingService] = None,
        hardhat_runner: Optional[HardhatRunner] = None,
        contract_factory: Optional[ContractFactory] = None,
        only: Optional[Iterable[str]] = None,
        stop_after: Optional[str] = None,
        include_skipped: bool = False,
        top_stakers: Optional[List[str]] = None,
    ):
        self.web3 = web3
        self.network = network or settings.chain.network
        self.ctx = MigrationContext()
        self.top_stakers = top_stakers if top_stakers is not None else TOP_STAKERS

        transaction_service = TransactionService(web3, receipt_timeout=settings.chain.rpc_timeout)
        self.evm_service = evm_service or EvmService(web3)
        self.deployer = deployer or ContractDeployer(
            web3, ArtifactLoader(settings.hardhat.project_dir / settings.hardhat.artifacts_dir), transaction_service
        )
        self.governance_service = governance_service or GovernanceService(transaction_service, self.evm_service)
        self.pooled_staking_service = pooled_staking_service or PooledStakingService(transaction_service)
        self.hardhat_runner = hardhat_runner or HardhatRunner(
            settings.hardhat.project_dir, command=settings.hardhat.command, network=settings.hardhat.network
        )
        self.transaction_service = transaction_service
        self._contract_factory = contract_factory

        self.steps = self.build_steps()
        self.selected_steps = select_steps(self.steps, only=only, stop_after=stop_after, include_skipped=include_skipped)
        self.completed_steps: List[str] = []

    def build_steps(self) -> List[MigrationStep]:
        return [
            MigrationStep(
                "initialize-old-contracts", "initialize old contracts", self.initialize_old_contracts, required=True
            ),
            MigrationStep(
                "impersonate-ab-members", "impersonate AB members", self.impersonate_ab_members, required=True
            ),
            MigrationStep("update-governance", "update Governance contract", self.update_governance),
            MigrationStep(
                "get-legacy-assessment-rewards",
                "run get-legacy-assessment-rewards script",
                self.get_legacy_assessment_rewards,
            ),
            MigrationStep("update-claims-reward", "update ClaimsReward contract", self.update_claims_reward),
            MigrationStep(
                "update-token-controller", "update TokenController contract", self.update_token_controller
            ),
            MigrationStep(
                "transfer-assessment-rewards",
                "transfer v1 assessment rewards to assessors",
                self.transfer_assessment_rewards,
            ),
            MigrationStep(
                "edit-category-41", "edit proposal category 41 (Set Asset Swap Details)", self.edit_category_41
            ),
            MigrationStep("add-category-42", "add proposal category 42 (Add new contracts)", self.add_category_42),
            MigrationStep("add-category-43", "add proposal category 43 (Remove contracts)", self.add_category_43),
            MigrationStep("get-products-v1", "run get-products-v1 script", self.get_products_v1),
            MigrationStep("deploy-products-v1", "deploy ProductsV1", self.deploy_products_v1),
            MigrationStep(
                "add-cover-initializer", "add empty internal contract for Cover", self.add_cover_initializer
            ),
            MigrationStep("deploy-staking-pool", "deploy StakingPool", self.deploy_staking_pool),
            MigrationStep("upgrade-master", "deploy master contract", self.upgrade_master, skip=True),
            MigrationStep("deploy-cover-contracts", "deploy cover contracts", self.deploy_cover_contracts),
            MigrationStep(
                "remove-legacy-contracts", "remove CR, CD, IC, CL, QD, QT, TF", self.remove_legacy_contracts
            ),
            MigrationStep("populate-v2-products", "run populate-v2-products script", self.populate_v2_products),
            MigrationStep("deploy-swap-operator", "deploy SwapOperator", self.deploy_swap_operator),
            MigrationStep("deploy-pool", "deploy Pool", self.deploy_pool),
            MigrationStep("deploy-pooled-staking", "deploy PooledStaking", self.deploy_pooled_staking),
            MigrationStep(
                "process-pending-actions",
                "process all PooledStaking pending actions",
                self.process_pending_actions,
            ),
            MigrationStep(
                "migrate-top-stakers", "migrate top stakers to new v2 staking pools", self.migrate_top_stakers
            ),
        ]

    async def _start(self):
        logger.info(f"Running {len(self.selected_steps)} of {len(self.steps)} steps against {self.network}")

    async def _execute(self):
        total = len(self.selected_steps)
        for index, step in enumerate(self.selected_steps, start=1):
            logger.info(f"[{index}/{total}] {step.description}")
            await step.handler()
            self.completed_steps.append(step.key)

    async def _submit(self, category_id: int, action_data: bytes):
        return await self.governance_service.submit_governance_proposal(
            category_id, action_data, self.ctx.ab_members, self.ctx.governance, closer=self.ctx.deployer
        )

    async def _upgrade(self, code: str, address: str):
        await self._submit(
            ProposalCategoryId.UPGRADE_MULTIPLE_CONTRACTS, encode_upgrade_multiple_contracts([code], [address])
        )

    async def _deploy(self, contract_name: str, *args) -> AsyncContract:
        return await self.deployer.deploy(contract_name, *args, sender=self.ctx.deployer)

    async def _internal_address(self, code: str) -> str:
        return await self.ctx.master.functions.contractAddresses(to_contract_code(code)).call()

    async def initialize_old_contracts(self):
        ctx = self.ctx
        accounts = await self.web3.eth.accounts
        ctx.deployer = accounts[0]

        if self._contract_factory is None:
            self._contract_factory = await get_contract_factory(self.web3, self.network)
        factory = self._contract_factory

        ctx.master = factory(codes.NXMASTER)
        ctx.nxm = factory(codes.NXMTOKEN)
        ctx.member_roles = factory(codes.MEMBER_ROLES)
        ctx.governance = factory(codes.GOVERNANCE)
        ctx.pool = factory(codes.POOL)
        ctx.mcr = factory(codes.MCR)
        ctx.incidents = factory(codes.INCIDENTS)
        ctx.quotation = factory(codes.QUOTATION)
        ctx.quotation_data = factory(codes.QUOTATION_DATA)
        ctx.proposal_category = factory(codes.PROPOSAL_CATEGORY)
        ctx.token_controller = factory(codes.TOKEN_CONTROLLER)
        ctx.claims = factory(codes.CLAIMS)
        ctx.claims_reward = factory(codes.CLAIMS_REWARD)
        ctx.claims_data = factory(codes.CLAIMS_DATA)

    async def impersonate_ab_members(self):
        # members() returns (memberRoleId, memberArray)
        _, ab_members = await self.ctx.member_roles.functions.members(MemberRole.ADVISORY_BOARD).call()
        self.ctx.ab_members = [await self.evm_service.impersonate_account(address) for address in ab_members]
        logger.info(f"Impersonating {len(self.ctx.ab_members)} AB members")

    async def update_governance(self):
        governance = await self._deploy("Governance")
        await self._upgrade(codes.GOVERNANCE, governance.address)

    async def get_legacy_assessment_rewards(self):
        await self.hardhat_runner.run_script(GET_LEGACY_ASSESSMENT_REWARDS)

    async def update_claims_reward(self):
        ctx = self.ctx
        claims_reward = await self._deploy(
            "LegacyClaimsReward", ctx.master.address, DAI_ADDRESS, ctx.claims_data.address
        )
        await self._upgrade(codes.CLAIMS_REWARD, claims_reward.address)
        ctx.claims_reward = claims_reward

    async def update_token_controller(self):
        ctx = self.ctx
        token_controller = await self._deploy(
            "TokenController", ctx.quotation_data.address, ctx.claims_reward.address
        )
        await self._upgrade(codes.TOKEN_CONTROLLER, token_controller.address)

        # the proxy keeps its address, rebind it with the new ABI to reach initialize()
        ctx.token_controller = self.deployer.at("TokenController", ctx.token_controller.address)
        await self.transaction_service.send_and_wait(ctx.token_controller.functions.initialize(), ctx.deployer)

    async def transfer_assessment_rewards(self):
        await self.transaction_service.send_and_wait(
            self.ctx.claims_reward.functions.transferRewards(), self.ctx.deployer
        )

    async def edit_category_41(self):
        category_id = ProposalCategoryId.SET_ASSET_SWAP_DETAILS
        await self._submit(
            ProposalCategoryId.EDIT_CATEGORY, encode_edit_category(category_id, PROPOSAL_CATEGORIES[category_id])
        )

    async def add_category_42(self):
        await self._submit(
            ProposalCategoryId.NEW_CATEGORY,
            encode_new_category(PROPOSAL_CATEGORIES[ProposalCategoryId.ADD_NEW_CONTRACTS]),
        )

    async def add_category_43(self):
        await self._submit(
            ProposalCategoryId.NEW_CATEGORY,
            encode_new_category(PROPOSAL_CATEGORIES[ProposalCategoryId.REMOVE_CONTRACTS]),
        )

    async def get_products_v1(self):
        await self.hardhat_runner.run_script(GET_PRODUCTS_V1)

    async def deploy_products_v1(self):
        self.ctx.products_v1 = await self._deploy("ProductsV1")

    async def add_cover_initializer(self):
        cover_initializer = await self._deploy("CoverInitializer")
        await self._submit(
            ProposalCategoryId.ADD_NEW_CONTRACTS,
            encode_add_new_internal_contracts([codes.COVER], [cover_initializer.address], [ContractType.PROXY]),
        )

    async def deploy_staking_pool(self):
        ctx = self.ctx
        cover_address = await self._internal_address(codes.COVER)
        # pool id 0 is the implementation, instances are created by Cover
        ctx.staking_pool_implementation = await self._deploy(
            "StakingPool", 0, ctx.nxm.address, cover_address, ctx.member_roles.address
        )

    async def upgrade_master(self):
        master = await self._deploy("NXMaster")
        await self._submit(ProposalCategoryId.UPGRADE_MASTER, encode_upgrade_master(master.address))

    async def deploy_cover_contracts(self):
        ctx = self.ctx
        cover_address = await self._internal_address(codes.COVER)
        ctx.cover_nft = await self._deploy("CoverNFT", COVER_NFT_NAME, COVER_NFT_SYMBOL, cover_address)

        cover = await self._deploy(
            "Cover",
            ctx.quotation_data.address,
            ctx.products_v1.address,
            ctx.staking_pool_implementation.address,
            ctx.cover_nft.address,
            cover_address,
        )
        await self._upgrade(codes.COVER, cover.address)
        ctx.cover = self.deployer.at("Cover", cover_address)

    async def remove_legacy_contracts(self):
        await self._submit(ProposalCategoryId.REMOVE_CONTRACTS, encode_remove_contracts(codes.REMOVED_CONTRACT_CODES))

    async def populate_v2_products(self):
        await self.hardhat_runner.run_script(
            POPULATE_V2_PRODUCTS,
            env={"COVER_ADDRESS": self.ctx.cover.address, "SIGNER_ADDRESS": self.ctx.ab_members[0]},
        )

    async def deploy_swap_operator(self):
        self.ctx.swap_operator = await self._deploy(
            "SwapOperator", self.ctx.master.address, TWAP_ORACLE_ADDRESS, SWAP_CONTROLLER, STETH_ADDRESS
        )

    async def deploy_pool(self):
        ctx = self.ctx
        pool = await self._deploy(
            "Pool",
            [DAI_ADDRESS],
            [DAI_DECIMALS],
            [DAI_MIN_AMOUNT],
            [DAI_MAX_AMOUNT],
            [DAI_MAX_SLIPPAGE_RATIO],
            ctx.master.address,
            PRICE_FEED_ORACLE_ADDRESS,
            ctx.swap_operator.address,
        )
        await self._upgrade(codes.POOL, pool.address)
        ctx.pool = pool

    async def deploy_pooled_staking(self):
        ctx = self.ctx
        cover_address = await self._internal_address(codes.COVER)
        pooled_staking = await self._deploy("PooledStaking", cover_address, ctx.products_v1.address)
        await self._upgrade(codes.POOLED_STAKING, pooled_staking.address)

        pooled_staking_address = await self._internal_address(codes.POOLED_STAKING)
        ctx.pooled_staking = self.deployer.at("PooledStaking", pooled_staking_address)

    async def process_pending_actions(self):
        await self.pooled_staking_service.process_all_pending_actions(
            self.ctx.pooled_staking, self.ctx.deployer, batch_size=settings.staking.pending_actions_batch_size
        )

    async def migrate_top_stakers(self):
        await self.pooled_staking_service.migrate_stakers(
            self.ctx.pooled_staking,
            self.top_stakers,
            self.ctx.deployer,
            max_concurrency=settings.staking.migration_concurrency,
        )
