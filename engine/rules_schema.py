"""Validation schema for room rule configuration."""

from __future__ import annotations

from typing import Dict, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from .cards import Rank

RANK_VALUES = tuple(rank.value for rank in Rank)

EFFECTS_HAND_SIZE = 5
BLACKJACK_HAND_SIZE = 2


def default_damage_table() -> Dict[str, int]:
    """Number ranks hit for their face value; J, Q, K and A deal nothing."""
    return {rank.value: rank.numeric_value() for rank in Rank}


class RuleSet(BaseModel):
    mode: Literal["effects", "blackjack"] = Field(
        "effects",
        description="Suit-effect play against an enemy, or blackjack hit/stand.",
    )
    min_players: int = Field(2, ge=1, description="Players required before a game may start.")
    max_players: int = Field(6, ge=1, description="Room capacity.")
    hand_size: Optional[int] = Field(
        None,
        ge=0,
        description="Cards dealt per player; defaults to 5 (effects) or 2 (blackjack).",
    )
    enemy_health: Optional[int] = Field(
        50,
        ge=1,
        description="Starting enemy health in effects mode; None disables the counter.",
    )
    end_condition: Literal["enemy_defeated", "deck_exhausted"] = Field(
        "enemy_defeated",
        description="When an effects-mode game is over.",
    )
    damage: Dict[str, int] = Field(default_factory=default_damage_table)
    club_multiplier: int = Field(2, ge=1, description="Damage multiplier for clubs.")
    draw_bonus: int = Field(2, ge=0, description="Extra cards drawn when a diamond is played.")
    turn_timeout_seconds: Optional[float] = Field(
        60.0,
        gt=0,
        description="Skip a turn left idle this long; None waits forever.",
    )

    @field_validator("damage")
    @classmethod
    def validate_damage(cls, value: Dict[str, int]) -> Dict[str, int]:
        table = default_damage_table()
        for rank, points in value.items():
            normalized = rank.strip().upper()
            if normalized not in RANK_VALUES:
                raise ValueError(f"Unknown rank in damage table: {rank!r}")
            if points < 0:
                raise ValueError(f"Rank {rank} has negative damage.")
            table[normalized] = points
        return table

    @model_validator(mode="after")
    def check_capacity(self) -> "RuleSet":
        if self.min_players > self.max_players:
            raise ValueError("min_players cannot exceed max_players.")
        if self.mode == "effects" and self.end_condition == "enemy_defeated" and self.enemy_health is None:
            raise ValueError("The enemy_defeated end condition needs an enemy_health value.")
        deal = self.deal_size * self.max_players
        if deal > 52:
            raise ValueError(f"Dealing {self.deal_size} cards to {self.max_players} players needs {deal} cards.")
        return self

    @property
    def deal_size(self) -> int:
        if self.hand_size is not None:
            return self.hand_size
        return BLACKJACK_HAND_SIZE if self.mode == "blackjack" else EFFECTS_HAND_SIZE

    def damage_for(self, rank: Rank) -> int:
        return self.damage.get(rank.value, 0)
