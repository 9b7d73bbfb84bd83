"""Player roster: gold, readiness and elimination."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

logger = logging.getLogger(__name__)


class PlayerType(Enum):
    HUMAN = "human"
    AI = "ai"
    REMOTE = "remote"


@dataclass
class Player:
    id: int
    name: str
    type: PlayerType = PlayerType.HUMAN
    is_ready: bool = False
    is_eliminated: bool = False
    gold: int = 100

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type.value,
            "is_ready": self.is_ready,
            "is_eliminated": self.is_eliminated,
            "gold": self.gold,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Player":
        return cls(
            id=data["id"],
            name=data["name"],
            type=PlayerType(data.get("type", "human")),
            is_ready=data.get("is_ready", False),
            is_eliminated=data.get("is_eliminated", False),
            gold=data.get("gold", 0),
        )


class PlayerManager:
    def __init__(self):
        self.players: list[Player] = []

    def add_player(self, name: str, player_type: PlayerType = PlayerType.HUMAN,
                   gold: int = 100) -> Player:
        player = Player(id=len(self.players), name=name, type=player_type, gold=gold)
        self.players.append(player)
        return player

    def get_player(self, player_id: int) -> Optional[Player]:
        for player in self.players:
            if player.id == player_id:
                return player
        return None

    def get_active_players(self) -> list[Player]:
        return [p for p in self.players if not p.is_eliminated]

    def get_ai_players(self) -> list[Player]:
        return [p for p in self.players if p.type == PlayerType.AI]

    def all_players_ready(self) -> bool:
        return all(p.is_ready for p in self.get_active_players())

    def reset_ready(self):
        for player in self.players:
            player.is_ready = False

    def eliminate_player(self, player_id: int) -> bool:
        """Mark a player eliminated. Returns False if already out or unknown."""
        player = self.get_player(player_id)
        if player is None or player.is_eliminated:
            return False
        player.is_eliminated = True
        logger.info(f"Player {player.name} eliminated")
        return True

    def get_winner(self) -> Optional[Player]:
        """The one remaining active player, or None while two or more remain."""
        active = self.get_active_players()
        if len(active) == 1:
            return active[0]
        return None

    def to_dict(self) -> dict:
        return {"players": [p.to_dict() for p in self.players]}

    @classmethod
    def from_dict(cls, data: dict) -> "PlayerManager":
        manager = cls()
        manager.players = [Player.from_dict(p) for p in data.get("players", [])]
        return manager
