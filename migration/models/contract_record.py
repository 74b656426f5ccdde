from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field


class ContractRecord(BaseModel):
    """One entry of the version data registry: a two-letter code bound to a deployed address."""

    model_config = ConfigDict(populate_by_name=True)

    code: str
    address: str
    name: str | None = None
    abi: List[Dict[str, Any]] = Field(default_factory=list)
