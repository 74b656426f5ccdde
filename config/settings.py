from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class _EnvSettings(BaseSettings):
    """Base for sub-settings so each group reads its own flat env vars."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


class AppSettings(_EnvSettings):
    """General application settings."""

    name: str = Field("Nexus V2 Fork Harness", validation_alias="APP_NAME")
    debug: bool = Field(False, validation_alias="DEBUG")
    log_level: str = Field("INFO", validation_alias="LOG_LEVEL")


class ChainSettings(_EnvSettings):
    """Settings related to the forked node and its JSON-RPC endpoint."""

    provider_url: str = Field(
        default="http://127.0.0.1:8545",
        validation_alias="PROVIDER_URL",
        description="JSON-RPC URL of the hardhat node running the mainnet fork",
    )
    network: str = Field(
        default="mainnet",
        validation_alias="NETWORK",
        description="Network key used to look up contracts in the version data",
    )
    # Timeout for RPC calls (seconds)
    rpc_timeout: int = Field(default=120, gt=0, validation_alias="RPC_TIMEOUT")


class VersionDataSettings(_EnvSettings):
    """Settings for the external ABI/address registry."""

    url: str = Field(
        default="https://api.nexusmutual.io/version-data/data.json",
        validation_alias="VERSION_DATA_URL",
    )
    max_retries: int = Field(default=3, ge=0, validation_alias="VERSION_DATA_MAX_RETRIES")
    timeout: int = Field(default=30, gt=0, validation_alias="VERSION_DATA_TIMEOUT")


class HardhatSettings(_EnvSettings):
    """Settings for the hardhat project that holds the contracts, scripts and unit suites."""

    project_dir: Path = Field(default=Path("."), validation_alias="HARDHAT_PROJECT_DIR")
    command: str = Field(default="npx hardhat", validation_alias="HARDHAT_COMMAND")
    network: str = Field(default="localhost", validation_alias="HARDHAT_NETWORK")
    artifacts_dir: Path = Field(default=Path("artifacts"), validation_alias="ARTIFACTS_DIR")


class GovernanceSettings(_EnvSettings):
    """Settings for submitting and closing governance proposals on the fork."""

    voting_period_days: int = Field(default=7, gt=0, validation_alias="VOTING_PERIOD_DAYS")
    close_proposal_gas_limit: int = Field(
        default=15_000_000, gt=0, validation_alias="CLOSE_PROPOSAL_GAS_LIMIT"
    )


class StakingSettings(_EnvSettings):
    """Settings for draining PooledStaking and migrating stakers."""

    pending_actions_batch_size: int = Field(
        default=100, gt=0, validation_alias="PENDING_ACTIONS_BATCH_SIZE"
    )
    migration_concurrency: int = Field(default=10, gt=0, validation_alias="MIGRATION_CONCURRENCY")


class Settings(BaseSettings):
    """
    Main Settings class that composes all sub-settings.
    Uses validation_alias in sub-models to map flat env vars to nested structure.
    """

    app: AppSettings = Field(default_factory=AppSettings)
    chain: ChainSettings = Field(default_factory=ChainSettings)
    version_data: VersionDataSettings = Field(default_factory=VersionDataSettings)
    hardhat: HardhatSettings = Field(default_factory=HardhatSettings)
    governance: GovernanceSettings = Field(default_factory=GovernanceSettings)
    staking: StakingSettings = Field(default_factory=StakingSettings)

    # Config to load from .env file
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


# Singleton instance
settings = Settings()
