from typing import List, Sequence

from eth_abi import encode
from web3.contract import AsyncContract
from web3.logs import DISCARD

from config.settings import settings
from migration.enums.contract_type import ContractType
from migration.enums.proposal_category_id import ProposalCategoryId
from migration.exceptions import ContractCodeError, ProposalExecutionError
from migration.models.proposal import Proposal, ProposalCategory
from migration.services.evm_service import EvmService, days_to_seconds
from migration.services.transaction_service import TransactionService
from utils.logger_utils import get_logger

logger = get_logger("Governance Service")

VOTE_ACCEPT = 1

NEW_CATEGORY_TYPES = [
    "string",
    "uint256",
    "uint256",
    "uint256",
    "uint256[]",
    "uint256",
    "string",
    "address",
    "bytes2",
    "uint256[]",
    "string",
]
EDIT_CATEGORY_TYPES = ["uint256"] + NEW_CATEGORY_TYPES


def to_contract_code(code: str) -> bytes:
    encoded = code.encode("utf-8")
    if len(encoded) != 2:
        raise ContractCodeError(f"Contract code must be 2 bytes, got '{code}'")
    return encoded


def encode_upgrade_multiple_contracts(codes: Sequence[str], addresses: Sequence[str]) -> bytes:
    if len(codes) != len(addresses):
        raise ValueError("codes and addresses must have the same length")
    return encode(["bytes2[]", "address[]"], [[to_contract_code(c) for c in codes], list(addresses)])


def encode_add_new_internal_contracts(
    codes: Sequence[str], addresses: Sequence[str], contract_types: Sequence[ContractType]
) -> bytes:
    if not len(codes) == len(addresses) == len(contract_types):
        raise ValueError("codes, addresses and contract_types must have the same length")
    return encode(
        ["bytes2[]", "address[]", "uint256[]"],
        [[to_contract_code(c) for c in codes], list(addresses), [int(t) for t in contract_types]],
    )


def encode_remove_contracts(codes: Sequence[str]) -> bytes:
    return encode(["bytes2[]"], [[to_contract_code(c) for c in codes]])


def encode_upgrade_master(address: str) -> bytes:
    return encode(["address"], [address])


def encode_new_category(category: ProposalCategory) -> bytes:
    return encode(NEW_CATEGORY_TYPES, list(category.to_abi_args()))


def encode_edit_category(category_id: int, category: ProposalCategory) -> bytes:
    return encode(EDIT_CATEGORY_TYPES, [category_id, *category.to_abi_args()])


class GovernanceService(object):
    """
    Pushes a proposal through Governance on a fork: the Advisory Board signers
    create, categorize and vote on it, the clock skips the voting period and
    the proposal is closed, which executes its action.
    """

    def __init__(
        self,
        transaction_service: TransactionService,
        evm_service: EvmService,
        voting_period_days: int = None,
        close_proposal_gas_limit: int = None,
    ):
        self._transaction_service = transaction_service
        self._evm_service = evm_service
        self.voting_period_days = voting_period_days or settings.governance.voting_period_days
        self.close_proposal_gas_limit = close_proposal_gas_limit or settings.governance.close_proposal_gas_limit

    async def submit_governance_proposal(
        self,
        category_id: int,
        action_data: bytes,
        signers: List[str],
        governance: AsyncContract,
        closer: str = None,
    ) -> Proposal:
        if not signers:
            raise ValueError("At least one signer is required to submit a proposal")

        send = self._transaction_service.send_and_wait
        proposer = signers[0]
        closer = closer or proposer

        proposal_id = await governance.functions.getProposalLength().call()
        logger.info(f"Creating proposal {proposal_id} (category {_category_label(category_id)})")

        await send(governance.functions.createProposal("", "", "", 0), proposer)
        await send(governance.functions.categorizeProposal(proposal_id, category_id, 0), proposer)
        await send(governance.functions.submitProposalWithSolution(proposal_id, "", action_data), proposer)

        for signer in signers:
            await send(governance.functions.submitVote(proposal_id, VOTE_ACCEPT), signer)

        await self._evm_service.advance_time(days_to_seconds(self.voting_period_days))

        receipt = await send(
            governance.functions.closeProposal(proposal_id), closer, gas=self.close_proposal_gas_limit
        )
        if not self.has_action_success(governance, receipt):
            raise ProposalExecutionError(f"ActionSuccess was expected for proposal {proposal_id}", proposal_id)

        proposal = Proposal.from_call_result(await governance.functions.proposal(proposal_id).call())
        if not proposal.is_accepted:
            raise ProposalExecutionError(
                f"Proposal {proposal_id} ended with status {proposal.status}, expected accepted", proposal_id
            )

        logger.info(f"Proposal {proposal_id} accepted and executed")
        return proposal

    @staticmethod
    def has_action_success(governance: AsyncContract, receipt) -> bool:
        events = governance.events.ActionSuccess().process_receipt(receipt, errors=DISCARD)
        return any(event["address"] == governance.address for event in events)


def _category_label(category_id: int) -> str:
    try:
        return ProposalCategoryId(category_id).name
    except ValueError:
        return str(category_id)
