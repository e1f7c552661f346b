from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Iterable, List

from coup.agents import AgentManager, HeuristicAgent, ReactionDecision, ScriptedAgent, TurnDecision
from coup.config import GameConfig
from coup.config_loader import GameSetupConfig
from coup.enums import ActionKind, PlayerType, ReactionKind
from coup.events import EventLog, EventVisibility, GameEventType
from coup.game_state import GamePhase
from coup.interaction import InteractionEventType, InteractionIO, run_interactive_game
from coup.players import PlayerRegistration


@dataclass
class ScriptedIO(InteractionIO):
    responses: List[str]
    writes: List[str]

    def __init__(self, responses: Iterable[str]):
        self.responses = list(responses)
        self.writes = []

    def read(self, prompt: str) -> str:
        return self._consume(prompt)

    def read_hidden(self, prompt: str) -> str:
        return self._consume(prompt)

    def write(self, message: str) -> None:
        self.writes.append(message)

    def _consume(self, prompt: str) -> str:
        self.writes.append(prompt)
        if not self.responses:
            raise AssertionError(f"No scripted response available for prompt: {prompt}")
        return self.responses.pop(0)


def _ticking_clock() -> Callable[[], datetime]:
    moment = [datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)]

    def clock() -> datetime:
        moment[0] += timedelta(seconds=1)
        return moment[0]

    return clock


def _setup(
    *registrations: PlayerRegistration, config: GameConfig | None = None
) -> GameSetupConfig:
    return GameSetupConfig(
        game_config=config or GameConfig(), registrations=tuple(registrations)
    )


# One card each, so a single lost influence ends a two-seat game.
SUDDEN_DEATH = GameConfig(starting_cards=1)


def _coup_everyone(perception) -> TurnDecision:
    if ActionKind.COUP in perception.available_actions:
        target = next(o for o in perception.opponents if not o.eliminated)
        return TurnDecision(ActionKind.COUP, target.player_id)
    return TurnDecision(ActionKind.INCOME)


def test_agents_only_game_runs_to_completion() -> None:
    setup = _setup(
        PlayerRegistration("Ada", PlayerType.AGENT),
        PlayerRegistration("Bo", PlayerType.AGENT),
        PlayerRegistration("Cy", PlayerType.AGENT),
    )
    io = ScriptedIO([])
    log = EventLog()

    result = run_interactive_game(setup, io=io, seed=3, event_log=log, clock=_ticking_clock())

    state = result.state
    assert state.phase is GamePhase.FINISHED
    assert state.winner is not None
    assert sum(1 for player in state.players if not player.eliminated) == 1
    assert io.writes[-1].startswith("Game over: ")
    assert state.event_log is log
    assert len(log) > 0
    assert log.of_type(GameEventType.GAME_COMPLETED)
    state.check_invariants()


def test_human_and_agent_game_with_scripted_turns() -> None:
    setup = _setup(
        PlayerRegistration("Alice"),
        PlayerRegistration("Bot", PlayerType.AGENT),
        config=GameConfig(starting_cards=1, starting_coins=7),
    )
    io = ScriptedIO(["income"] * 20)
    bot = ScriptedAgent(choose_action_fn=_coup_everyone)
    manager = AgentManager(agents={"p2": bot})

    result = run_interactive_game(
        setup, io=io, seed=1, agent_manager=manager, clock=_ticking_clock()
    )

    assert result.state.winner == "p2"
    assert "Game over: Bot wins after" in io.writes[-1]
    assert any("declares Political Coup on Alice" in line for line in io.writes)
    hands = [
        entry for entry in result.transcript if entry.message.startswith("Private hand for")
    ]
    assert len(hands) == 1
    assert hands[0].visibility is EventVisibility.PRIVATE
    assert hands[0] not in result.public_transcript()
    assert hands[0] in result.transcript_for_player("p1")
    assert hands[0] not in result.transcript_for_player("p2")


def test_invalid_human_input_is_reprompted() -> None:
    setup = _setup(
        PlayerRegistration("Alice"),
        PlayerRegistration("Bot", PlayerType.AGENT),
        config=SUDDEN_DEATH,
    )
    io = ScriptedIO(["dance", "coup p2", "steal", "income"] + ["income"] * 20)
    manager = AgentManager(agents={"p2": ScriptedAgent(choose_action_fn=_coup_everyone)})

    result = run_interactive_game(
        setup, io=io, seed=2, agent_manager=manager, clock=_ticking_clock()
    )

    assert "Please enter an action name, e.g. 'steal p2'." in io.writes
    assert any(line.startswith("Invalid action: Not enough coins") for line in io.writes)
    assert any(line.startswith("Invalid action: steal requires a target") for line in io.writes)
    assert result.state.history[0].action.kind is ActionKind.INCOME


def test_human_challenge_through_hidden_prompt() -> None:
    setup = _setup(
        PlayerRegistration("Alice"),
        PlayerRegistration("Bot", PlayerType.AGENT),
        config=SUDDEN_DEATH,
    )
    bot = ScriptedAgent(
        actions=[TurnDecision(ActionKind.TAX, public_reasoning="I hold the Duke")],
        choose_action_fn=_coup_everyone,
    )
    manager = AgentManager(agents={"p2": bot})
    # Alice takes income, then challenges the tax claim.
    io = ScriptedIO(["income", "c"] + ["income"] * 20)

    result = run_interactive_game(
        setup, io=io, seed=5, agent_manager=manager, clock=_ticking_clock()
    )

    assert "Alice challenges Bot!" in io.writes
    assert 'Bot says: "I hold the Duke"' in " ".join(io.writes)
    challenge_turn = result.state.history[1]
    assert challenge_turn.reactions[0].kind is ReactionKind.CHALLENGE
    hidden = [
        entry
        for entry in result.transcript
        if entry.event is InteractionEventType.HIDDEN_PROMPT
    ]
    assert hidden[0].response == "c"
    assert hidden[0].visibility is EventVisibility.PRIVATE


def test_human_block_reopens_window_for_challenges() -> None:
    setup = _setup(
        PlayerRegistration("Alice"),
        PlayerRegistration("Bot", PlayerType.AGENT),
        config=SUDDEN_DEATH,
    )
    bot = ScriptedAgent(
        actions=[TurnDecision(ActionKind.FOREIGN_AID)],
        reactions=[ReactionDecision(kind=ReactionKind.CHALLENGE)],
        choose_action_fn=_coup_everyone,
    )
    manager = AgentManager(agents={"p2": bot})
    io = ScriptedIO(["income", "b duke"] + ["income"] * 20)

    result = run_interactive_game(
        setup, io=io, seed=8, agent_manager=manager, clock=_ticking_clock()
    )

    assert "Alice blocks with duke" in io.writes
    assert "Bot challenges Alice!" in io.writes
    block_turn = result.state.history[1]
    kinds = [reaction.kind for reaction in block_turn.reactions]
    assert kinds == [ReactionKind.BLOCK, ReactionKind.CHALLENGE]
    assert block_turn.outcome.value in {"block_upheld", "block_bluff_caught"}


def test_default_manager_uses_heuristic_agents() -> None:
    setup = _setup(
        PlayerRegistration("Ada", PlayerType.AGENT),
        PlayerRegistration("Bo", PlayerType.AGENT),
    )

    result = run_interactive_game(setup, io=ScriptedIO([]), seed=11, clock=_ticking_clock())

    assert result.state.phase is GamePhase.FINISHED
    manager = AgentManager.for_state(
        result.state, lambda _player_id: HeuristicAgent(bluff_contessa_when_desperate=False)
    )
    assert set(manager.agents) == {"p1", "p2"}
    assert all(not agent.bluff_contessa_when_desperate for agent in manager.agents.values())
