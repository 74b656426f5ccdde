from enum import IntEnum


class ProposalStatus(IntEnum):
    DRAFT = 0
    AWAITING_SOLUTION = 1
    VOTING_STARTED = 2
    ACCEPTED = 3
    REJECTED = 4
    MAJORITY_NOT_REACHED_BUT_ACCEPTED = 5
    DENIED = 6
