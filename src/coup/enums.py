"""Enumerations for Coup game entities."""

from __future__ import annotations

from enum import Enum


class CardKind(str, Enum):
    """The five canonical character roles.

    Only the kind carries game mechanics; themed names and art are payload.
    """

    DUKE = "duke"
    ASSASSIN = "assassin"
    CAPTAIN = "captain"
    AMBASSADOR = "ambassador"
    CONTESSA = "contessa"


class ActionKind(str, Enum):
    """Actions a player may take on their turn."""

    INCOME = "income"
    FOREIGN_AID = "foreign_aid"
    COUP = "coup"
    TAX = "tax"
    ASSASSINATE = "assassinate"
    STEAL = "steal"
    EXCHANGE = "exchange"


class ReactionKind(str, Enum):
    """Responses other players may make to a pending action."""

    CHALLENGE = "challenge"
    BLOCK = "block"


class PlayerType(str, Enum):
    """Who controls a seat."""

    HUMAN = "human"
    AGENT = "agent"
