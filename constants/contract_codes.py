# Two-letter codes under which NXMaster and the version data registry index contracts.

NXMASTER = "NXMASTER"
NXMTOKEN = "NXMTOKEN"

MEMBER_ROLES = "MR"
GOVERNANCE = "GV"
POOL = "P1"
MCR = "MC"
INCIDENTS = "IC"
QUOTATION = "QT"
QUOTATION_DATA = "QD"
PROPOSAL_CATEGORY = "PC"
TOKEN_CONTROLLER = "TC"
TOKEN_FUNCTIONS = "TF"
CLAIMS = "CL"
CLAIMS_REWARD = "CR"
CLAIMS_DATA = "CD"
POOLED_STAKING = "PS"
COVER = "CO"

# Legacy contracts bound from the registry before the migration starts
LEGACY_CONTRACT_CODES = [
    NXMASTER,
    NXMTOKEN,
    MEMBER_ROLES,
    GOVERNANCE,
    POOL,
    MCR,
    INCIDENTS,
    QUOTATION,
    QUOTATION_DATA,
    PROPOSAL_CATEGORY,
    TOKEN_CONTROLLER,
    CLAIMS,
    CLAIMS_REWARD,
    CLAIMS_DATA,
]

# Contracts with no v2 counterpart, removed from NXMaster
REMOVED_CONTRACT_CODES = [
    CLAIMS_REWARD,
    CLAIMS_DATA,
    INCIDENTS,
    CLAIMS,
    QUOTATION_DATA,
    QUOTATION,
    TOKEN_FUNCTIONS,
]
