"""Broker and broker account contracts, plus the in-memory playground broker."""

from tradekit.brokers.account import BrokerAccount, BrokerAccountParameters
from tradekit.brokers.broker import Broker
from tradekit.brokers.playground import PlaygroundBroker, PlaygroundBrokerAccount

__all__ = [
    "Broker",
    "BrokerAccount",
    "BrokerAccountParameters",
    "PlaygroundBroker",
    "PlaygroundBrokerAccount",
]
