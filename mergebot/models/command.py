"""Parsed merge command."""

from pydantic import BaseModel, ConfigDict


class MergeCommand(BaseModel):
    """Options given to ``/mergebot merge``."""

    model_config = ConfigDict(frozen=True)

    # Skip the "at least one approval" requirement; every other check still applies
    override_approval_requirement: bool = False
