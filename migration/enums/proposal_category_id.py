from enum import IntEnum


class ProposalCategoryId(IntEnum):
    # newCategory(string,uint256,uint256,uint256,uint256[],uint256,string,address,bytes2,uint256[],string)
    NEW_CATEGORY = 3
    # editCategory(uint256,string,uint256,uint256,uint256,uint256[],uint256,string,address,bytes2,uint256[],string)
    EDIT_CATEGORY = 4
    # upgradeMultipleContracts(bytes2[],address[])
    UPGRADE_MULTIPLE_CONTRACTS = 29
    # upgradeTo(address)
    UPGRADE_MASTER = 37
    # setSwapDetails(address,uint256,uint256,uint256)
    SET_ASSET_SWAP_DETAILS = 41
    # addNewInternalContracts(bytes2[],address[],uint256[])
    ADD_NEW_CONTRACTS = 42
    # removeContracts(bytes2[])
    REMOVE_CONTRACTS = 43
