from typing import Any, List, Tuple

from pydantic import BaseModel, ConfigDict, Field

from migration.enums.proposal_status import ProposalStatus


class ProposalCategory(BaseModel):
    """
    Arguments of Governance `newCategory`. `editCategory` takes the same fields
    prefixed with the id of the category being edited.
    """

    model_config = ConfigDict(populate_by_name=True)

    name: str
    member_role_to_vote: int
    majority_vote_perc: int
    quorum_perc: int
    allowed_to_create_proposal: List[int] = Field(default_factory=list)
    closing_time: int
    action_hash: str = ""
    contract_address: str = "0x0000000000000000000000000000000000000000"
    contract_name: str
    incentives: List[int] = Field(default_factory=list)
    function_signature: str = ""

    def to_abi_args(self) -> Tuple[Any, ...]:
        return (
            self.name,
            self.member_role_to_vote,
            self.majority_vote_perc,
            self.quorum_perc,
            self.allowed_to_create_proposal,
            self.closing_time,
            self.action_hash,
            self.contract_address,
            self.contract_name.encode("utf-8"),
            self.incentives,
            self.function_signature,
        )


class Proposal(BaseModel):
    """Decoded result of Governance `proposal(uint256)`."""

    id: int
    category: int
    status: int
    final_verdict: int
    total_reward: int

    @property
    def is_accepted(self) -> bool:
        return self.status == ProposalStatus.ACCEPTED

    @classmethod
    def from_call_result(cls, result: Tuple[Any, ...]) -> "Proposal":
        proposal_id, category, status, final_verdict, total_reward = result[:5]
        return cls(
            id=proposal_id,
            category=category,
            status=status,
            final_verdict=final_verdict,
            total_reward=total_reward,
        )
