class HarnessError(Exception):
    """Base error for the fork migration harness."""


class ContractNotFoundError(HarnessError):
    """A contract code is missing from the version data registry."""


class ContractCodeError(HarnessError):
    """A contract code is not exactly two ASCII characters."""


class ArtifactNotFoundError(HarnessError):
    """No compiled hardhat artifact exists for a contract name."""


class ChainRpcError(HarnessError):
    """The fork node answered a JSON-RPC call with an error."""


class TransactionFailedError(HarnessError):
    """A transaction was mined with a failure status or did not deploy a contract."""

    def __init__(self, message: str, tx_hash=None):
        super().__init__(message)
        self.tx_hash = tx_hash


class ProposalExecutionError(HarnessError):
    """A governance proposal was closed but its action did not execute."""

    def __init__(self, message: str, proposal_id: int):
        super().__init__(message)
        self.proposal_id = proposal_id


class HardhatCommandError(HarnessError):
    """A hardhat script or test run exited with a non-zero code."""

    def __init__(self, command, returncode: int):
        super().__init__(f"Command {' '.join(command)} exited with code {returncode}")
        self.command = command
        self.returncode = returncode
