"""
Reply Dispatcher

Platform-specific egress. Switches on ctx.platform and interprets
ctx.reply_target the way that platform expects:
- LINE: single-use reply token, one HTTP call per reply
- SLACK: channel id, one RTM frame per reply

No retries. Reply tokens are single-use and short-lived.
"""

import logging
from typing import TYPE_CHECKING, Optional

from .context import Platform, RequestContext, bind_logger

if TYPE_CHECKING:
    from transport.line.sender import LineReplySender
    from transport.slack.rtm import SlackRtmSession

logger = logging.getLogger(__name__)


class ReplyDispatchError(Exception):
    """A reply could not be delivered to the provider."""
    pass


class ReplyDispatcher:
    """Routes reply texts to the egress of the originating platform."""

    def __init__(
        self,
        line_sender: Optional["LineReplySender"] = None,
        rtm_session: Optional["SlackRtmSession"] = None,
    ):
        self._line_sender = line_sender
        self._rtm_session = rtm_session

    def bind_rtm(self, rtm_session: "SlackRtmSession") -> None:
        """Attach the RTM session once it exists (it needs the executor first)."""
        self._rtm_session = rtm_session

    async def dispatch(self, ctx: RequestContext, text: str) -> None:
        """
        Deliver one reply.

        Raises:
            ReplyDispatchError: Egress not configured or transport failed
        """
        log = bind_logger(logger, ctx)

        if ctx.platform is Platform.LINE:
            if self._line_sender is None:
                raise ReplyDispatchError("LINE reply sender not configured")
            try:
                delivered = await self._line_sender.reply(ctx.reply_target, text)
            except Exception as e:
                raise ReplyDispatchError(f"LINE reply failed: {e}") from e
            if not delivered:
                log.warning("LINE rejected reply, dropped")

        elif ctx.platform is Platform.SLACK:
            if self._rtm_session is None:
                raise ReplyDispatchError("Slack RTM session not configured")
            try:
                msg_id = await self._rtm_session.send_message(ctx.reply_target, text)
            except Exception as e:
                raise ReplyDispatchError(f"Slack RTM write failed: {e}") from e
            log.debug(f"Replied in channel<{ctx.reply_target}>;id<{msg_id}>")

        else:
            raise ReplyDispatchError(f"Unsupported platform: {ctx.platform}")
