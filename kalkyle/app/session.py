from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from kalkyle.adapters.supabase_rest import SupabaseRestGateway
from kalkyle.domain.entities import Graph
from kalkyle.domain.ports import RemoteGateway
from kalkyle.domain.result import Result
from kalkyle.usecases.load_graph import DEFAULT_LOAD_TIMEOUT_S

from .engine import QuoteEngine
from .settings import Settings


@dataclass(frozen=True)
class Principal:
    """Identity handed over by the authentication collaborator."""

    user_id: str
    access_token: str
    email: Optional[str] = None


GatewayFactory = Callable[[Principal], RemoteGateway]


def supabase_gateway_factory(settings: Settings) -> GatewayFactory:
    """Build REST gateways that act on behalf of the given principal."""

    def _factory(principal: Principal) -> RemoteGateway:
        return SupabaseRestGateway(
            settings.supabase_url,
            settings.supabase_anon_key,
            access_token=principal.access_token,
            cfg=settings.http_config(),
        )

    return _factory


class EngineSession:
    """Ties one ``QuoteEngine`` to the current principal.

    A new principal gets a fresh engine which is loaded right away. When the
    principal goes away the engine is dropped, so nothing cached for the
    previous user stays reachable.
    """

    def __init__(
        self,
        gateway_factory: GatewayFactory,
        *,
        load_timeout_s: float = DEFAULT_LOAD_TIMEOUT_S,
    ) -> None:
        self._log = logging.getLogger(__name__)
        self._gateway_factory = gateway_factory
        self._load_timeout_s = load_timeout_s
        self._principal: Optional[Principal] = None
        self._engine: Optional[QuoteEngine] = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "EngineSession":
        return cls(supabase_gateway_factory(settings), load_timeout_s=settings.load_timeout_s)

    @property
    def principal(self) -> Optional[Principal]:
        return self._principal

    @property
    def engine(self) -> Optional[QuoteEngine]:
        return self._engine

    def on_principal_changed(self, principal: Optional[Principal]) -> Optional[Result[Graph]]:
        """React to a sign-in, sign-out or user switch.

        Returns the load result for a new principal, ``None`` otherwise.
        """
        if principal is None:
            if self._engine is not None:
                self._log.info("Principal signed out; discarding engine")
            self._principal = None
            self._engine = None
            return None
        if principal == self._principal and self._engine is not None:
            return None

        self._log.info("Starting engine for user %s", principal.user_id)
        self._principal = principal
        self._engine = QuoteEngine(
            self._gateway_factory(principal), load_timeout_s=self._load_timeout_s
        )
        return self._engine.load()


__all__ = ["EngineSession", "Principal", "supabase_gateway_factory"]
