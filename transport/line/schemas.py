"""
LINE Transport Layer - Pydantic Schemas

PURE DATA MODELS - NO LOGIC
Only defines the contract between the LINE webhook and the normalized
InboundEvent consumed by the handler chain.

ref: https://developers.line.biz/en/reference/messaging-api/#webhook-event-objects
"""

from typing import Literal, Optional

from pydantic import BaseModel, Field


# ============================================================================
# WEBHOOK PAYLOAD SCHEMAS (INPUT)
# ============================================================================

class LineCallbackRequest(BaseModel):
    """
    Full LINE webhook envelope.

    Events stay raw dicts here; each one is validated on its own so that a
    single unknown or malformed event never rejects the whole callback.
    """

    destination: Optional[str] = Field(None, description="Bot user ID")
    events: list = Field(..., description="Webhook events, possibly empty")

    class Config:
        extra = "allow"  # LINE may add fields


class DeliveryContext(BaseModel):
    is_redelivery: bool = Field(False, alias="isRedelivery")

    class Config:
        populate_by_name = True
        extra = "allow"


class TextMessageContent(BaseModel):
    """`message` object of a text message event."""

    type: Literal["text"]
    id: Optional[str] = None
    text: str

    class Config:
        extra = "allow"


class LineTextMessageEvent(BaseModel):
    """A user-originated text message event."""

    type: Literal["message"]
    reply_token: str = Field(..., alias="replyToken", min_length=1)
    message: TextMessageContent
    webhook_event_id: Optional[str] = Field(None, alias="webhookEventId")
    delivery_context: Optional[DeliveryContext] = Field(None, alias="deliveryContext")
    timestamp: Optional[int] = None
    source: Optional[dict] = None

    class Config:
        populate_by_name = True
        extra = "allow"


# ============================================================================
# REPLY API PAYLOAD (OUTPUT)
# ============================================================================

class LineTextMessage(BaseModel):
    type: Literal["text"] = "text"
    text: str


class LineReplyRequest(BaseModel):
    """Body of POST /v2/bot/message/reply."""

    reply_token: str = Field(..., alias="replyToken")
    messages: list[LineTextMessage]

    class Config:
        populate_by_name = True
