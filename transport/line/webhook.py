"""
LINE Webhook Receiver

FastAPI router that verifies, decodes and hands LINE events to the
handler chain executor. Pure transport: replies leave later through the
reply dispatcher, after this endpoint has already answered.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status

from gateway.context import bind_logger
from gateway.dedup import RecentEventIds
from gateway.executor import HandlerChainExecutor
from infra.config import GatewayConfig

from .normalize import PayloadDecodeError, decode_events
from .security import SIGNATURE_HEADER, verify_signature

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/line/v1", tags=["LINE Transport"])


# ============================================================================
# DEPENDENCIES
# ============================================================================

def get_config(request: Request) -> GatewayConfig:
    return request.app.state.gateway.config


def get_executor(request: Request) -> HandlerChainExecutor:
    return request.app.state.gateway.executor


def get_recent_events(request: Request) -> RecentEventIds:
    return request.app.state.gateway.recent_events


# ============================================================================
# WEBHOOK RECEIVER
# ============================================================================

@router.post("/webhook")
async def line_webhook_receiver(
    request: Request,
    config: GatewayConfig = Depends(get_config),
    executor: HandlerChainExecutor = Depends(get_executor),
    recent_events: RecentEventIds = Depends(get_recent_events),
) -> Response:
    """
    Receive LINE events via webhook.

    Flow:
    1. No signature header → 200, nothing processed (LINE probes unsigned)
    2. Verify signature on the raw body (400 if invalid)
    3. Decode to InboundEvents (400 if malformed)
    4. Submit each event to the executor without awaiting its replies
    5. 200 with empty body

    Returns:
        Empty 200 response

    Raises:
        HTTPException(400): Bad signature or malformed payload
    """

    # Step 1: Signature header
    signature = request.headers.get(SIGNATURE_HEADER)
    if signature is None:
        logger.warning(f"No {SIGNATURE_HEADER}, ignoring request")
        return Response(status_code=status.HTTP_200_OK)

    # Step 2: Verify signature on the exact bytes received
    body = await request.body()
    logger.debug(f"Received LINE webhook;signature<{signature}>,payload<{body[:200]!r}>")

    if not verify_signature(body, signature, config.line_channel_secret):
        logger.warning("LINE signature verification failed")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid signature",
        )

    # Step 3: Decode
    try:
        events = decode_events(body)
    except PayloadDecodeError as e:
        logger.warning(f"LINE payload rejected: {e}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid content",
        )

    # Step 4: Submit (fire-and-return unless backpressure is configured)
    for event in events:
        if not recent_events.first_seen(event.event_id):
            logger.info(
                f"Skipping already accepted LINE event;redelivery<{event.redelivery}>",
                extra={
                    "webhook_event_id": event.event_id,
                    "is_redelivery": event.redelivery,
                },
            )
            continue

        ctx = event.to_context()
        bind_logger(logger, ctx).debug("Accepted LINE text event")

        if config.webhook_await_dispatch_start:
            await executor.submit_and_wait(ctx, ctx.text)
        else:
            executor.submit(ctx, ctx.text)

    # Step 5: Acknowledge
    return Response(status_code=status.HTTP_200_OK)
