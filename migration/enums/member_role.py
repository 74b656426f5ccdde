from enum import IntEnum


class MemberRole(IntEnum):
    UNASSIGNED = 0
    ADVISORY_BOARD = 1
    MEMBER = 2
    OWNER = 3
