"""
Abstract Broker Interface
A broker is the entry point handing out logged-in accounts.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from tradekit.brokers.account import BrokerAccount


class Broker(ABC):
    """
    Abstract broker.

    Concrete integrations implement ``login`` and own everything related
    to connections and authentication.
    """

    def __init__(self, name: str, legal_name: str = "", website_uri: str = "") -> None:
        self._name = name
        self._legal_name = legal_name or name
        self._website_uri = website_uri

    @property
    def name(self) -> str:
        return self._name

    @property
    def legal_name(self) -> str:
        return self._legal_name

    @property
    def website_uri(self) -> str:
        return self._website_uri

    @abstractmethod
    async def login(self, **credentials: Any) -> BrokerAccount:
        """
        Log into an account.

        Args:
            credentials: Broker specific login parameters

        Returns:
            The logged-in account
        """

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self._name!r})"
