"""
LINE Payload Decoding

PURE CONVERSION - NO HANDLER CALLS

Converts the LINE webhook envelope into InboundEvents.
- TEXT message events: kept (reply token + text)
- Every other event or message type: filtered, never an error
- Malformed JSON or a missing `events` array: PayloadDecodeError

The handler chain never knows the source was a LINE webhook.
"""

import json
import logging

from pydantic import ValidationError

from gateway.context import InboundEvent, Platform

from .schemas import LineCallbackRequest, LineTextMessageEvent

logger = logging.getLogger(__name__)


class PayloadDecodeError(Exception):
    """Webhook body is not a valid LINE callback envelope."""
    pass


def decode_events(body: bytes) -> list[InboundEvent]:
    """
    Convert a raw LINE webhook body into InboundEvents.

    Args:
        body: Raw (already signature-verified) request body

    Returns:
        Text message events in payload order; empty if there are none

    Raises:
        PayloadDecodeError: Malformed JSON or invalid envelope
    """

    try:
        payload = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise PayloadDecodeError(f"Invalid JSON payload: {e}")

    if not isinstance(payload, dict):
        raise PayloadDecodeError("Payload root must be an object")

    try:
        callback = LineCallbackRequest.model_validate(payload)
    except ValidationError as e:
        raise PayloadDecodeError(f"Invalid callback envelope: {e.error_count()} error(s)")

    inbound = []
    for raw_event in callback.events:
        event = _decode_text_event(raw_event)
        if event is not None:
            inbound.append(event)

    logger.debug(
        f"Decoded {len(inbound)} text event(s) out of {len(callback.events)}",
        extra={"destination": callback.destination},
    )
    return inbound


def _decode_text_event(raw_event) -> InboundEvent | None:
    """Return an InboundEvent for a text message event, None for anything else."""

    if not isinstance(raw_event, dict) or raw_event.get("type") != "message":
        return None

    message = raw_event.get("message")
    if not isinstance(message, dict) or message.get("type") != "text":
        return None

    try:
        event = LineTextMessageEvent.model_validate(raw_event)
    except ValidationError as e:
        logger.warning(f"Skipping malformed text message event: {e.error_count()} error(s)")
        return None

    return InboundEvent(
        platform=Platform.LINE,
        reply_target=event.reply_token,
        text=event.message.text,
        event_id=event.webhook_event_id,
        redelivery=bool(event.delivery_context and event.delivery_context.is_redelivery),
    )
