"""Shared base model used by the swissdata Pydantic models."""

from pydantic import BaseModel


class SwissdataBase(BaseModel):
    """Base model with common configuration for all swissdata Pydantic models."""

    model_config = {
        "populate_by_name": True,
        "frozen": True,
        "protected_namespaces": (),
    }
