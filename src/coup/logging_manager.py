"""Enhanced logging for agent decisions and game analysis."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .agents import ReactionDecision, TurnDecision
    from .players import PlayerId
    from .projections import AgentPerception


class LoggingManager:
    """Manages detailed logging of agent decisions for debugging and analysis."""

    def __init__(self, enabled: bool = False, base_dir: Path | None = None) -> None:
        """Initialize the logging manager.

        Args:
            enabled: Whether enhanced logging is enabled
            base_dir: Base directory for logs (defaults to ./logs)
        """
        self.enabled = enabled
        self.player_files: dict[PlayerId, Path] = {}
        if not enabled:
            return

        if base_dir is None:
            base_dir = Path("logs")
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        self.log_dir = base_dir / timestamp
        self.log_dir.mkdir(parents=True, exist_ok=True)

    def _get_log_file(self, player_id: PlayerId) -> Path:
        """Get or create the log file path for a player."""
        if player_id not in self.player_files:
            self.player_files[player_id] = self.log_dir / f"player_{player_id}.log"
        return self.player_files[player_id]

    def _write_log(self, player_id: PlayerId, content: str) -> None:
        if not self.enabled:
            return

        log_file = self._get_log_file(player_id)
        with open(log_file, "a") as f:
            timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
            f.write(f"\n{'=' * 80}\n")
            f.write(f"[{timestamp}]\n")
            f.write(content)
            f.write("\n")

    def log_action_decision(
        self,
        player_id: PlayerId,
        perception: AgentPerception,
        decision: TurnDecision,
    ) -> None:
        """Log the action an agent chose on its turn."""
        if not self.enabled:
            return

        content = f"""ACTION DECISION

PERCEPTION:
{self._format_perception(perception)}

DECISION:
  Action: {decision.action.value}
  Target: {decision.target_id or '-'}
  True Reasoning: {decision.true_reasoning}
  Public Reasoning: {decision.public_reasoning}
"""
        self._write_log(player_id, content)

    def log_reaction_decision(
        self,
        player_id: PlayerId,
        perception: AgentPerception,
        decision: ReactionDecision,
    ) -> None:
        """Log a challenge, block or pass."""
        if not self.enabled:
            return

        reaction = decision.kind.value if decision.kind else "pass"
        if decision.block_card is not None:
            reaction = f"{reaction} ({decision.block_card.value})"
        content = f"""REACTION DECISION

PERCEPTION:
{self._format_perception(perception)}

DECISION:
  Reaction: {reaction}
  True Reasoning: {decision.true_reasoning}
  Public Reasoning: {decision.public_reasoning}
"""
        self._write_log(player_id, content)

    def _format_perception(self, perception: AgentPerception) -> str:
        lines = []
        lines.append(f"  Player ID: {perception.your_id}")
        lines.append(f"  Display Name: {perception.your_name}")
        lines.append(f"  Hand: {[card.kind.value for card in perception.your_hand]}")
        lines.append(f"  Coins: {perception.your_coins}")
        lines.append(f"  Influence: {perception.your_influence}")
        lines.append(f"  Phase: {perception.phase.value}")
        lines.append(f"  Turn: {perception.turn_number}")
        lines.append(f"  Current Player: {perception.current_player_id}")
        for opponent in perception.opponents:
            lines.append(
                f"  Opponent {opponent.player_id}: {opponent.coins} coins, "
                f"{opponent.influence_count} influence"
                + (" (eliminated)" if opponent.eliminated else "")
            )
        pending = perception.pending_action
        if pending is not None:
            lines.append(
                f"  Pending: {pending.action_name} by {pending.actor_id}"
                + (f" targeting {pending.target_id}" if pending.target_id else "")
            )
            if pending.blocker_id:
                block_card = pending.block_card.value if pending.block_card else "?"
                lines.append(f"  Blocked by {pending.blocker_id} with {block_card}")
        lines.append(f"  Available Actions: {[a.value for a in perception.available_actions]}")

        insights = perception.insights
        if insights.suspicious_behaviors:
            lines.append("  Suspicious Behaviors:")
            for flag in insights.suspicious_behaviors:
                lines.append(f"    - {flag.player_id}: {flag.reason}")
        if insights.recommendations:
            lines.append("  Recommendations:")
            for advice in insights.recommendations:
                lines.append(f"    - {advice}")

        return "\n".join(lines)


__all__ = ["LoggingManager"]
