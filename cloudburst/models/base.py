"""Base model configuration for all provisioner API records."""

from pydantic import BaseModel, ConfigDict


class Model(BaseModel):
    """Base model with standard configuration.

    Provisioner records are keyed by PascalCase wire names, so fields declare
    aliases and may be populated by either name.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)
