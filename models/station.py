"""
Station schemas.

A station remembers which operator is scanning at which station, whether
that choice is locked, and an optional batch comment sent with every scan.
"""

from pydantic import Field

from models.base import BaseSchema


class StationPreferences(BaseSchema):
    """Current operator/station selection."""

    operator: str = Field("", description="Operator name (blank if none chosen)")
    station: str = Field(..., description="Station code")
    locked: bool = Field(False, description="Operator/station cannot change while locked")


class PreferencesUpdate(BaseSchema):
    """Change operator and station."""

    operator: str = Field("", max_length=100)
    station: str = Field(..., min_length=1, max_length=50)


class BatchCommentResponse(BaseSchema):
    """Batch comment state for an operator/station."""

    operator: str
    station: str
    comment: str
    locked: bool


class BatchCommentLock(BaseSchema):
    """Lock a batch comment for an operator/station."""

    operator: str = Field("", max_length=100)
    station: str = Field(..., min_length=1, max_length=50)
    comment: str = Field("", max_length=500)


class BatchCommentUnlock(BaseSchema):
    """Unlock the batch comment for an operator/station."""

    operator: str = Field("", max_length=100)
    station: str = Field(..., min_length=1, max_length=50)
