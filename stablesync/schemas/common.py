"""Common schema types."""

from enum import Enum

from pydantic import BaseModel, ConfigDict


class HorseSyncStatusEnum(str, Enum):
    """Outcome of one horse in a run."""

    SUCCESS = "success"
    ERROR = "error"


class BaseSchema(BaseModel):
    """Base schema with common configuration."""

    model_config = ConfigDict(from_attributes=True)
