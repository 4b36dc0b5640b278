"""Human approval gateway.

A Human step asks the gateway for a token and a future, publishes approve and
reject links carrying that token, and then awaits the future. Whatever
confirmation channel receives the click (an HTTP endpoint, a console prompt)
calls :meth:`ApprovalGateway.resolve`, which completes the future exactly once.

Resolution may arrive from a different thread than the one running the
deployment, so the token map is guarded by a lock and futures are completed
on their owning event loop.
"""

from __future__ import annotations

import asyncio
import logging
import secrets
import threading
from dataclasses import dataclass
from typing import Callable, Dict, List, Mapping, Optional, Tuple
from urllib.parse import urlencode

from .constants import APPROVAL_ACTIONS, APPROVE
from .exceptions import AlreadyResolvedError, InvalidActionError, UnknownTokenError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PendingApproval:
    token: str
    message: str


@dataclass(frozen=True)
class ApprovalResolution:
    token: str
    action: str

    @property
    def approved(self) -> bool:
        return self.action == APPROVE


def build_confirmation_link(base_url: str, token: str, action: str) -> str:
    """Return the resolution link for ``token``; links differ only by action."""
    return f"{base_url}?{urlencode({'taskToken': token, 'action': action})}"


def _complete(future: asyncio.Future, action: str) -> None:
    if not future.done():
        future.set_result(action)


def _cancel(future: asyncio.Future) -> None:
    if not future.done():
        future.cancel()


class ApprovalGateway:
    """Owns approval tokens and the suspensions bound to them."""

    def __init__(
        self, on_pending: Optional[Callable[[PendingApproval], None]] = None
    ) -> None:
        self._lock = threading.Lock()
        self._pending: Dict[str, Tuple[asyncio.Future, asyncio.AbstractEventLoop]] = {}
        self._resolved: Dict[str, str] = {}
        self._on_pending = on_pending

    def begin_approval(self, message: str) -> Tuple[str, asyncio.Future]:
        """Issue a single-use token and the future its resolution completes.

        Must be called from a running event loop.
        """
        loop = asyncio.get_running_loop()
        future: asyncio.Future = loop.create_future()
        token = secrets.token_urlsafe(32)
        with self._lock:
            self._pending[token] = (future, loop)
        logger.info(f"Issued approval token {token[:8]}...")

        if self._on_pending is not None:
            self._on_pending(PendingApproval(token=token, message=message))
        return token, future

    def resolve(self, token: str, action: str) -> ApprovalResolution:
        """Complete the approval bound to ``token``.

        The resolution is remembered until the owning step discards the
        token, so a second attempt while the step is live is rejected.

        Raises:
            InvalidActionError: ``action`` is not ``approve`` or ``reject``.
            AlreadyResolvedError: ``token`` was resolved before.
            UnknownTokenError: ``token`` is not pending, or its step stopped
                waiting for it.
        """
        if action not in APPROVAL_ACTIONS:
            raise InvalidActionError(f"Invalid approval action: {action!r}")

        with self._lock:
            if token in self._resolved:
                raise AlreadyResolvedError("Approval token has already been resolved")
            entry = self._pending.get(token)
            if entry is None or entry[0].done():
                raise UnknownTokenError("Approval token is not pending")
            del self._pending[token]
            self._resolved[token] = action

        future, loop = entry
        loop.call_soon_threadsafe(_complete, future, action)
        logger.info(f"Approval token {token[:8]}... resolved with {action}")
        return ApprovalResolution(token=token, action=action)

    def discard(self, token: str) -> Optional[str]:
        """Forget ``token`` once its step is done with it.

        A still-pending approval is cancelled. Returns the action the token
        was resolved with, or ``None`` if it was never resolved; a step that
        timed out uses this to honour a resolution that arrived first.
        """
        with self._lock:
            entry = self._pending.pop(token, None)
            action = self._resolved.pop(token, None)
        if entry is not None:
            future, loop = entry
            loop.call_soon_threadsafe(_cancel, future)
            logger.info(f"Discarded approval token {token[:8]}...")
        return action

    def is_pending(self, token: str) -> bool:
        with self._lock:
            return token in self._pending

    def is_resolved(self, token: str) -> bool:
        with self._lock:
            return token in self._resolved

    def pending_tokens(self) -> List[str]:
        with self._lock:
            return list(self._pending)


@dataclass(frozen=True)
class ConfirmationResponse:
    status_code: int
    body: str


class ConfirmationHandler:
    """Framework-free core of the approval link endpoint.

    Accepts the query parameters of an approve or reject link and maps the
    gateway's outcome to an HTTP-style response.
    """

    def __init__(self, gateway: ApprovalGateway) -> None:
        self._gateway = gateway

    def handle(self, params: Mapping[str, Optional[str]]) -> ConfirmationResponse:
        action = params.get("action")
        token = params.get("taskToken") or params.get("token")

        if not action or not token or action not in APPROVAL_ACTIONS:
            return ConfirmationResponse(400, "Invalid request")

        try:
            resolution = self._gateway.resolve(token, action)
        except UnknownTokenError:
            return ConfirmationResponse(404, "Unknown token")
        except AlreadyResolvedError:
            return ConfirmationResponse(409, "Already resolved")

        if resolution.approved:
            return ConfirmationResponse(200, "Success")
        return ConfirmationResponse(401, "Failure")
