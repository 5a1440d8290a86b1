from __future__ import annotations

from dataclasses import dataclass, field

from signalsalvage.requirement import Req, Requirement


@dataclass(frozen=True)
class MilestoneDef:
    """A one-time finding that pays DP once its condition holds."""

    id: str
    display_name: str = ""
    description: str = ""
    dp_reward: float = 0.0
    condition: Requirement = field(default_factory=Req.always)

    def __post_init__(self) -> None:
        if not self.display_name:
            object.__setattr__(self, "display_name", self.id)
