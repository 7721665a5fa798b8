"""
Slack RTM - Pydantic Schemas

PURE DATA MODELS - NO LOGIC
Inbound frames are JSON objects with a `type` field; only `hello` and
`message` are consumed. Outbound frames always carry an integer `id`.

ref: https://api.slack.com/rtm
"""

from typing import Literal, Optional

from pydantic import BaseModel, Field


# ============================================================================
# INBOUND FRAMES
# ============================================================================

class RtmMessageEvent(BaseModel):
    """A `message` frame."""

    type: Literal["message"]
    channel: Optional[str] = None
    text: Optional[str] = None
    user: Optional[str] = None
    subtype: Optional[str] = None
    ts: Optional[str] = None

    class Config:
        extra = "allow"


# ============================================================================
# OUTBOUND FRAMES
# ============================================================================

class RtmPingFrame(BaseModel):
    id: int
    type: Literal["ping"] = "ping"


class RtmMessageFrame(BaseModel):
    id: int
    type: Literal["message"] = "message"
    channel: str
    text: str


# ============================================================================
# WEB API
# ============================================================================

class RtmConnectResponse(BaseModel):
    """Response of POST rtm.connect."""

    ok: bool
    url: Optional[str] = None
    error: Optional[str] = None
    self_: Optional[dict] = Field(None, alias="self")

    class Config:
        populate_by_name = True
        extra = "allow"
