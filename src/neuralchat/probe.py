import logging
from enum import Enum

from neuralchat.gateway import ChatGateway, GatewayError

logger = logging.getLogger(__name__)


class AuthState(str, Enum):
    UNKNOWN = "unknown"
    AUTHENTICATED = "authenticated"
    UNAUTHENTICATED = "unauthenticated"


class SessionProbe:
    """Decides, once per start-up, whether the stored credential is still valid.

    A transient network failure is indistinguishable from a missing session;
    both route to the unauthenticated view and nothing is retried.
    """

    def __init__(self, gateway: ChatGateway):
        self.gateway = gateway
        self.state = AuthState.UNKNOWN

    async def probe(self) -> AuthState:
        try:
            await self.gateway.probe()
        except GatewayError as e:
            logger.debug(f"Session probe failed: {e}")
            self.state = AuthState.UNAUTHENTICATED
        else:
            self.state = AuthState.AUTHENTICATED
        return self.state
