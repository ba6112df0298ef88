"""
Common data types and base models for the match narrative contracts.
All models use Pydantic V2 and are immutable once handed to the caller.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Side(str, Enum):
    """The two teams of a match."""

    RADIANT = "radiant"
    DIRE = "dire"


class WardKind(str, Enum):
    """Vision ward kinds."""

    OBSERVER = "observer"
    SENTRY = "sentry"


class RemovalReason(str, Enum):
    """Why a ward stopped existing."""

    EXPIRE = "expire"  # timed out, or removed by its owner
    DEWARD = "deward"  # destroyed by an opposing hero
    UNSET = "unset"  # never removed within the captured window


class MapPosition(BaseModel):
    """2D position on the map (ward grid coordinates)."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    x: float = Field(..., description="X coordinate on the map")
    y: float = Field(..., description="Y coordinate on the map")


class BaseContract(BaseModel):
    """Base model for all output contracts with common configuration."""

    model_config = ConfigDict(
        # Outputs are never mutated after being handed to the caller
        frozen=True,
        # Use enum values in JSON
        use_enum_values=True,
        json_schema_extra={"examples": []},
        # Forbid extra fields to ensure data integrity
        extra="forbid",
    )
