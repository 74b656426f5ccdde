from migration.models.proposal import ProposalCategory

ONE_WEEK_SECONDS = 7 * 24 * 60 * 60

# Categories the v2 migration edits (41) or adds (42, 43).
# incentives: [minStake, incentive, advisoryBoardApprovalRequired, isSpecialResolution]
PROPOSAL_CATEGORIES = {
    41: ProposalCategory(
        name="Set Asset Swap Details",
        member_role_to_vote=1,
        majority_vote_perc=60,
        quorum_perc=15,
        allowed_to_create_proposal=[2],
        closing_time=ONE_WEEK_SECONDS,
        contract_name="P1",
        incentives=[0, 0, 1, 0],
        function_signature="setSwapDetails(address,uint256,uint256,uint256)",
    ),
    42: ProposalCategory(
        name="Add new contracts",
        member_role_to_vote=1,
        majority_vote_perc=60,
        quorum_perc=15,
        allowed_to_create_proposal=[2],
        closing_time=ONE_WEEK_SECONDS,
        contract_name="MS",
        incentives=[0, 0, 1, 0],
        function_signature="addNewInternalContracts(bytes2[],address[],uint256[])",
    ),
    43: ProposalCategory(
        name="Remove contracts",
        member_role_to_vote=1,
        majority_vote_perc=60,
        quorum_perc=15,
        allowed_to_create_proposal=[2],
        closing_time=ONE_WEEK_SECONDS,
        contract_name="MS",
        incentives=[0, 0, 1, 0],
        function_signature="removeContracts(bytes2[])",
    ),
}
