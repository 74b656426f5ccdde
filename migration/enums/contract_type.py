from enum import IntEnum


class ContractType(IntEnum):
    """Internal contract kinds accepted by NXMaster `addNewInternalContracts`."""

    REPLACEABLE = 1
    PROXY = 2
