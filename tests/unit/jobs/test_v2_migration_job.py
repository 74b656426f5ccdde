import pytest
from unittest.mock import AsyncMock, MagicMock

from eth_abi import decode

from constants import contract_codes as codes
from constants.addresses import DAI_ADDRESS, TOP_STAKERS
from migration.jobs.v2_migration_job import DAI_MAX_AMOUNT, V2MigrationJob
from migration.services.governance_service import (
    EDIT_CATEGORY_TYPES,
    NEW_CATEGORY_TYPES,
    encode_upgrade_master,
    encode_upgrade_multiple_contracts,
)

DEPLOYER = "0x1000000000000000000000000000000000000001"
AB_MEMBERS = [
    "0x2000000000000000000000000000000000000002",
    "0x3000000000000000000000000000000000000003",
]
NEW_IMPL = "0x4000000000000000000000000000000000000004"
COVER_PROXY = "0x5000000000000000000000000000000000000005"
PS_PROXY = "0x6000000000000000000000000000000000000006"


def _address_for(code: str) -> str:
    return "0x" + code.encode().hex().rjust(40, "0")


@pytest.fixture
def legacy_contracts():
    contracts = {}
    for code in codes.LEGACY_CONTRACT_CODES:
        contract = MagicMock(name=code)
        contract.address = _address_for(code)
        contracts[code] = contract

    contracts[codes.MEMBER_ROLES].functions.members.return_value.call = AsyncMock(return_value=(1, AB_MEMBERS))

    master_functions = contracts[codes.NXMASTER].functions
    master_functions.contractAddresses.side_effect = lambda code_bytes: MagicMock(
        call=AsyncMock(return_value={b"CO": COVER_PROXY, b"PS": PS_PROXY}[code_bytes])
    )
    return contracts


@pytest.fixture
def mock_web3():
    web3 = MagicMock()

    async def accounts():
        return [DEPLOYER]

    type(web3.eth).accounts = property(lambda self: accounts())
    return web3


@pytest.fixture
def mock_deployer():
    deployer = MagicMock()
    deployer.deploy = AsyncMock(return_value=MagicMock(address=NEW_IMPL))
    deployer.at = MagicMock(side_effect=lambda name, address: MagicMock(name=name, address=address))
    return deployer


@pytest.fixture
def mock_evm_service():
    service = MagicMock()
    service.impersonate_account = AsyncMock(side_effect=lambda address: address)
    return service


@pytest.fixture
def mock_governance_service():
    service = MagicMock()
    service.submit_governance_proposal = AsyncMock()
    return service


@pytest.fixture
def mock_pooled_staking_service():
    service = MagicMock()
    service.process_all_pending_actions = AsyncMock(return_value=2)
    service.migrate_stakers = AsyncMock(return_value=[])
    return service


@pytest.fixture
def mock_hardhat_runner():
    runner = MagicMock()
    runner.run_script = AsyncMock()
    return runner


@pytest.fixture
def make_job(
    mock_web3,
    legacy_contracts,
    mock_deployer,
    mock_evm_service,
    mock_governance_service,
    mock_pooled_staking_service,
    mock_hardhat_runner,
):
    def _make_job(**kwargs):
        job = V2MigrationJob(
            mock_web3,
            network="mainnet",
            deployer=mock_deployer,
            evm_service=mock_evm_service,
            governance_service=mock_governance_service,
            pooled_staking_service=mock_pooled_staking_service,
            hardhat_runner=mock_hardhat_runner,
            contract_factory=MagicMock(side_effect=lambda code: legacy_contracts[code]),
            **kwargs,
        )
        job.transaction_service = MagicMock()
        job.transaction_service.send_and_wait = AsyncMock(return_value={"status": 1})
        return job

    return _make_job


async def _bootstrap(job):
    await job.initialize_old_contracts()
    await job.impersonate_ab_members()


def test_default_step_selection(make_job):
    job = make_job()
    keys = [step.key for step in job.selected_steps]

    assert keys[0] == "initialize-old-contracts"
    assert keys[-1] == "migrate-top-stakers"
    assert "upgrade-master" not in keys
    assert len(keys) == len(job.steps) - 1


def test_include_skipped_runs_master_upgrade(make_job):
    job = make_job(include_skipped=True)

    assert "upgrade-master" in [step.key for step in job.selected_steps]


def test_unknown_step_is_rejected(make_job):
    with pytest.raises(ValueError):
        make_job(only=["deploy-everything"])


@pytest.mark.asyncio
async def test_initialize_and_impersonate(make_job, legacy_contracts, mock_evm_service):
    job = make_job(stop_after="impersonate-ab-members")

    await job.run()

    assert job.ctx.deployer == DEPLOYER
    assert job.ctx.governance is legacy_contracts[codes.GOVERNANCE]
    assert job.ctx.claims_data is legacy_contracts[codes.CLAIMS_DATA]
    assert job.ctx.ab_members == AB_MEMBERS
    assert [c.args[0] for c in mock_evm_service.impersonate_account.await_args_list] == AB_MEMBERS
    legacy_contracts[codes.MEMBER_ROLES].functions.members.assert_called_once_with(1)
    assert job.completed_steps == ["initialize-old-contracts", "impersonate-ab-members"]


@pytest.mark.asyncio
async def test_update_governance_submits_upgrade(make_job, legacy_contracts, mock_deployer, mock_governance_service):
    job = make_job()
    await _bootstrap(job)

    await job.update_governance()

    mock_deployer.deploy.assert_awaited_once_with("Governance", sender=DEPLOYER)
    mock_governance_service.submit_governance_proposal.assert_awaited_once_with(
        29,
        encode_upgrade_multiple_contracts(["GV"], [NEW_IMPL]),
        AB_MEMBERS,
        legacy_contracts[codes.GOVERNANCE],
        closer=DEPLOYER,
    )


@pytest.mark.asyncio
async def test_update_token_controller_initializes_proxy(make_job, legacy_contracts, mock_deployer):
    job = make_job()
    await _bootstrap(job)
    tc_proxy_address = legacy_contracts[codes.TOKEN_CONTROLLER].address

    await job.update_token_controller()

    mock_deployer.deploy.assert_awaited_once_with(
        "TokenController",
        legacy_contracts[codes.QUOTATION_DATA].address,
        legacy_contracts[codes.CLAIMS_REWARD].address,
        sender=DEPLOYER,
    )
    mock_deployer.at.assert_called_once_with("TokenController", tc_proxy_address)
    job.ctx.token_controller.functions.initialize.assert_called_once_with()
    job.transaction_service.send_and_wait.assert_awaited_once_with(
        job.ctx.token_controller.functions.initialize.return_value, DEPLOYER
    )


@pytest.mark.asyncio
async def test_category_proposals(make_job, mock_governance_service):
    job = make_job()
    await _bootstrap(job)

    await job.edit_category_41()
    await job.add_category_42()
    await job.add_category_43()

    calls = mock_governance_service.submit_governance_proposal.await_args_list
    assert [c.args[0] for c in calls] == [4, 3, 3]
    assert decode(EDIT_CATEGORY_TYPES, calls[0].args[1])[0] == 41
    assert decode(NEW_CATEGORY_TYPES, calls[1].args[1])[0] == "Add new contracts"
    assert decode(NEW_CATEGORY_TYPES, calls[2].args[1])[0] == "Remove contracts"


@pytest.mark.asyncio
async def test_add_cover_initializer(make_job, mock_deployer, mock_governance_service):
    job = make_job()
    await _bootstrap(job)

    await job.add_cover_initializer()

    mock_deployer.deploy.assert_awaited_once_with("CoverInitializer", sender=DEPLOYER)
    category_id, action_data = mock_governance_service.submit_governance_proposal.await_args.args[:2]
    assert category_id == 42
    code_list, addresses, types = decode(["bytes2[]", "address[]", "uint256[]"], action_data)
    assert list(code_list) == [b"CO"]
    assert addresses[0].lower() == NEW_IMPL
    assert list(types) == [2]


@pytest.mark.asyncio
async def test_deploy_cover_contracts(make_job, legacy_contracts, mock_deployer, mock_governance_service):
    job = make_job()
    await _bootstrap(job)
    job.ctx.products_v1 = MagicMock(address="0x7000000000000000000000000000000000000007")
    job.ctx.staking_pool_implementation = MagicMock(address="0x8000000000000000000000000000000000000008")
    cover_nft = MagicMock(address="0x9000000000000000000000000000000000000009")
    cover = MagicMock(address=NEW_IMPL)
    mock_deployer.deploy.side_effect = [cover_nft, cover]

    await job.deploy_cover_contracts()

    assert mock_deployer.deploy.await_args_list[0].args == ("CoverNFT", "Nexus Mutual Cover", "NXC", COVER_PROXY)
    assert mock_deployer.deploy.await_args_list[1].args == (
        "Cover",
        legacy_contracts[codes.QUOTATION_DATA].address,
        job.ctx.products_v1.address,
        job.ctx.staking_pool_implementation.address,
        cover_nft.address,
        COVER_PROXY,
    )
    assert mock_governance_service.submit_governance_proposal.await_args.args[1] == (
        encode_upgrade_multiple_contracts(["CO"], [NEW_IMPL])
    )
    mock_deployer.at.assert_called_once_with("Cover", COVER_PROXY)
    assert job.ctx.cover.address == COVER_PROXY


@pytest.mark.asyncio
async def test_remove_legacy_contracts(make_job, mock_governance_service):
    job = make_job()
    await _bootstrap(job)

    await job.remove_legacy_contracts()

    category_id, action_data = mock_governance_service.submit_governance_proposal.await_args.args[:2]
    assert category_id == 43
    (removed,) = decode(["bytes2[]"], action_data)
    assert list(removed) == [b"CR", b"CD", b"IC", b"CL", b"QD", b"QT", b"TF"]


@pytest.mark.asyncio
async def test_deploy_pool(make_job, legacy_contracts, mock_deployer, mock_governance_service):
    job = make_job()
    await _bootstrap(job)
    job.ctx.swap_operator = MagicMock(address="0x9000000000000000000000000000000000000009")

    await job.deploy_pool()

    args = mock_deployer.deploy.await_args.args
    assert args[0] == "Pool"
    assert args[1:6] == ([DAI_ADDRESS], [18], [0], [DAI_MAX_AMOUNT], [100])
    assert DAI_MAX_AMOUNT == 1000 * 10**18
    assert args[6] == legacy_contracts[codes.NXMASTER].address
    assert args[8] == job.ctx.swap_operator.address
    assert job.ctx.pool.address == NEW_IMPL


@pytest.mark.asyncio
async def test_deploy_pooled_staking_rebinds_proxy(make_job, mock_deployer):
    job = make_job()
    await _bootstrap(job)
    job.ctx.products_v1 = MagicMock(address="0x7000000000000000000000000000000000000007")

    await job.deploy_pooled_staking()

    mock_deployer.deploy.assert_awaited_once_with(
        "PooledStaking", COVER_PROXY, job.ctx.products_v1.address, sender=DEPLOYER
    )
    mock_deployer.at.assert_called_once_with("PooledStaking", PS_PROXY)


@pytest.mark.asyncio
async def test_scripts_get_their_arguments(make_job, mock_hardhat_runner):
    job = make_job()
    await _bootstrap(job)
    job.ctx.cover = MagicMock(address=COVER_PROXY)

    await job.get_legacy_assessment_rewards()
    await job.get_products_v1()
    await job.populate_v2_products()

    calls = mock_hardhat_runner.run_script.await_args_list
    assert [c.args[0] for c in calls] == ["get-legacy-assessment-rewards", "get-products-v1", "populate-v2-products"]
    assert calls[2].kwargs["env"] == {"COVER_ADDRESS": COVER_PROXY, "SIGNER_ADDRESS": AB_MEMBERS[0]}


@pytest.mark.asyncio
async def test_staking_steps_delegate(make_job, mock_pooled_staking_service):
    job = make_job()
    await _bootstrap(job)
    job.ctx.pooled_staking = MagicMock(address=PS_PROXY)

    await job.process_pending_actions()
    await job.migrate_top_stakers()

    mock_pooled_staking_service.process_all_pending_actions.assert_awaited_once_with(
        job.ctx.pooled_staking, DEPLOYER, batch_size=100
    )
    staking_call = mock_pooled_staking_service.migrate_stakers.await_args
    assert staking_call.args == (job.ctx.pooled_staking, TOP_STAKERS, DEPLOYER)


@pytest.mark.asyncio
async def test_failing_step_aborts_run(make_job, mock_governance_service):
    mock_governance_service.submit_governance_proposal.side_effect = RuntimeError("ActionSuccess was expected")
    job = make_job(stop_after="get-legacy-assessment-rewards")

    with pytest.raises(RuntimeError):
        await job.run()

    assert job.completed_steps == ["initialize-old-contracts", "impersonate-ab-members"]
    job.hardhat_runner.run_script.assert_not_awaited()


@pytest.mark.asyncio
async def test_only_master_upgrade_binds_contracts_first(
    make_job, legacy_contracts, mock_deployer, mock_governance_service
):
    job = make_job(only=["upgrade-master"])

    await job.run()

    assert job.completed_steps == ["initialize-old-contracts", "impersonate-ab-members", "upgrade-master"]
    mock_deployer.deploy.assert_awaited_once_with("NXMaster", sender=DEPLOYER)
    mock_governance_service.submit_governance_proposal.assert_awaited_once_with(
        37,
        encode_upgrade_master(NEW_IMPL),
        AB_MEMBERS,
        legacy_contracts[codes.GOVERNANCE],
        closer=DEPLOYER,
    )


def test_steps_are_listed_without_a_provider():
    job = V2MigrationJob(web3=None)

    keys = [step.key for step in job.selected_steps]
    assert keys[:2] == ["initialize-old-contracts", "impersonate-ab-members"]
    assert keys[-1] == "migrate-top-stakers"
    assert all(step.required for step in job.steps[:2])
