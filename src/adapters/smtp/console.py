"""
Console invite sender adapter - Implements InviteSender protocol.

This module provides a console-based implementation of the domain's
invite sender port, logging invitation links for demo purposes.
"""

import logging

logger = logging.getLogger(__name__)


class ConsoleInviteSender:
    """
    Implements InviteSender protocol via console logging.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def send_invite(self, token: str, link: str) -> None:
        """
        Log the invitation link (simulates email delivery).

        Logged at INFO level so the link shows up in container logs.
        """
        logger.info("[INVITE] Token: %s Link: %s", token, link)
