from __future__ import annotations

import random
from datetime import datetime, timedelta, timezone
from typing import Sequence

import pytest

from coup import resolution
from coup.cards import build_deck, stacked_deck
from coup.config import GameConfig
from coup.enums import ActionKind, CardKind, PlayerType
from coup.events import EventLog, EventVisibility, GameEventType
from coup.exceptions import (
    ActionNotBlockableError,
    ActionNotChallengeableError,
    AlreadyReactedError,
    DuplicatePlayerError,
    ForcedCoupError,
    GameFullError,
    IllegalPhaseError,
    InsufficientFundsError,
    InvalidActionError,
    InvalidBlockCardError,
    InvalidBlockerError,
    InvalidChallengerError,
    InvalidTargetError,
    InvariantViolation,
    NotEnoughPlayersError,
    NotYourTurnError,
    ReactionWindowOpenError,
    SelfTargetForbiddenError,
    TargetEliminatedError,
    TargetRequiredError,
    UnknownPlayerError,
)
from coup.game_state import (
    ChallengeResult,
    GamePhase,
    GameState,
    GameStatus,
    ResolutionOutcome,
)
from coup.persistence import snapshot_game_state
from coup.players import Player
from coup.projections import available_actions
from coup.rules import ACTION_RULES

T0 = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
NAMES = ("Alice", "Bob", "Carol", "Dave", "Erin", "Frank")
SPARE = (
    CardKind.AMBASSADOR,
    CardKind.CONTESSA,
    CardKind.CAPTAIN,
    CardKind.ASSASSIN,
    CardKind.DUKE,
)


def _at(seconds: float) -> datetime:
    return T0 + timedelta(seconds=seconds)


def _dealt_game(*hands: Sequence[CardKind], spare: Sequence[CardKind] = SPARE) -> GameState:
    deck = stacked_deck([kind for hand in hands for kind in hand] + list(spare))
    state = GameState.create_game(
        "g1",
        Player("p1", NAMES[0]),
        deck,
        config=GameConfig(auto_start=False),
        event_log=EventLog(),
        now=T0,
    )
    for seat in range(1, len(hands)):
        state.join_game(f"p{seat + 1}", NAMES[seat], now=T0)
    state.deal_initial_hands(now=T0)
    return state


def _eliminate(state: GameState, player_id: str) -> None:
    player = state.player(player_id)
    while player.hand:
        state.discard_pile.append(player.hand.pop())
    player.eliminated = True


def _strip_to_one_card(state: GameState, player_id: str) -> None:
    state.discard_pile.append(state.player(player_id).hand.pop())


def _assert_conserved(state: GameState) -> None:
    held = sum(len(player.hand) for player in state.players)
    assert len(state.deck) + len(state.discard_pile) + held == state.card_total
    for player in state.players:
        assert player.influence_count == len(player.hand)
        assert player.eliminated == (player.influence_count == 0)


# ----------------------------------------------------------------------
# Lobby


def test_create_game_opens_lobby_with_starting_coins() -> None:
    state = GameState.create_game("g1", Player("p1", "Alice"), build_deck(), now=T0)

    assert state.phase is GamePhase.LOBBY
    assert state.status is GameStatus.WAITING
    assert state.player("p1").coins == 2
    assert state.player("p1").hand == []
    assert state.card_total == 15
    assert state.version == 0


def test_join_game_auto_deals_once_minimum_is_reached() -> None:
    log = EventLog()
    state = GameState.create_game(
        "g1", Player("p1", "Alice"), build_deck(rng=random.Random(3)), event_log=log, now=T0
    )
    state.join_game("p2", "Bob", PlayerType.AGENT, now=_at(1))

    assert state.phase is GamePhase.ACTION
    assert state.current_player.player_id == "p1"
    assert state.player("p2").is_agent
    for player in state.players:
        assert player.influence_count == 2
        assert player.coins == 2
    dealt = log.of_type(GameEventType.HANDS_DEALT)
    assert [event.audience for event in dealt] == [
        ("p1",),
        ("p2",),
    ]
    assert all(event.visibility is EventVisibility.PRIVATE for event in dealt)
    _assert_conserved(state)


def test_join_game_rejects_duplicate_ids_and_full_tables() -> None:
    config = GameConfig(auto_start=False, max_players=2)
    state = GameState.create_game("g1", Player("p1", "Alice"), build_deck(), config=config)

    with pytest.raises(DuplicatePlayerError):
        state.join_game("p1", "Alice again")
    state.join_game("p2", "Bob")
    with pytest.raises(GameFullError):
        state.join_game("p3", "Carol")


def test_join_game_after_start_is_illegal() -> None:
    state = _dealt_game((CardKind.DUKE, CardKind.DUKE), (CardKind.CAPTAIN, CardKind.CAPTAIN))

    with pytest.raises(IllegalPhaseError):
        state.join_game("p3", "Carol")


def test_deal_requires_minimum_players() -> None:
    state = GameState.create_game(
        "g1", Player("p1", "Alice"), build_deck(), config=GameConfig(auto_start=False)
    )

    with pytest.raises(NotEnoughPlayersError):
        state.deal_initial_hands()
    assert state.phase is GamePhase.LOBBY


def test_deal_gives_cards_in_seat_order() -> None:
    state = _dealt_game(
        (CardKind.DUKE, CardKind.CAPTAIN),
        (CardKind.ASSASSIN, CardKind.CONTESSA),
        (CardKind.AMBASSADOR, CardKind.DUKE),
    )

    assert state.player("p1").card_kinds() == (CardKind.DUKE, CardKind.CAPTAIN)
    assert state.player("p2").card_kinds() == (CardKind.ASSASSIN, CardKind.CONTESSA)
    assert state.player("p3").card_kinds() == (CardKind.AMBASSADOR, CardKind.DUKE)
    assert len(state.deck) == len(SPARE)


# ----------------------------------------------------------------------
# Scenarios


def test_income_applies_immediately_and_passes_the_turn() -> None:
    state = _dealt_game((CardKind.DUKE, CardKind.CAPTAIN), (CardKind.ASSASSIN, CardKind.CONTESSA))

    state.submit_action("p1", ActionKind.INCOME, now=_at(1))

    assert state.player("p1").coins == 3
    assert state.phase is GamePhase.ACTION
    assert state.current_player.player_id == "p2"
    assert state.turn_number == 2
    assert state.pending_action is None
    assert state.history[-1].outcome is ResolutionOutcome.SUCCEEDED


def test_challenged_tax_bluff_costs_the_actor_influence() -> None:
    state = _dealt_game((CardKind.CAPTAIN, CardKind.CONTESSA), (CardKind.DUKE, CardKind.ASSASSIN))

    state.submit_action("p1", ActionKind.TAX, now=_at(1))
    state.submit_challenge("p2", now=_at(2))
    assert state.phase is GamePhase.RESOLUTION
    record = state.resolve(now=_at(3))

    actor = state.player("p1")
    assert actor.influence_count == 1
    assert actor.coins == 2
    assert [card.kind for card in state.discard_pile] == [CardKind.CAPTAIN]
    assert record.outcome is ResolutionOutcome.BLUFF_CAUGHT
    assert "caught bluffing" in state.history[-1].result
    assert state.claims[-1].challenge_result is ChallengeResult.SUCCESS
    assert state.claims[-1].caught_bluffing
    assert state.current_player.player_id == "p2"
    _assert_conserved(state)


def test_challenged_honest_tax_replaces_the_duke_and_pays_out() -> None:
    state = _dealt_game((CardKind.DUKE, CardKind.CAPTAIN), (CardKind.ASSASSIN, CardKind.CONTESSA))
    log = state.event_log
    assert log is not None

    state.submit_action("p1", ActionKind.TAX, now=_at(1))
    state.submit_challenge("p2", now=_at(2))
    record = state.resolve(now=_at(3))

    actor = state.player("p1")
    challenger = state.player("p2")
    assert record.outcome is ResolutionOutcome.CHALLENGE_FAILED
    assert actor.coins == 5
    assert actor.influence_count == 2
    assert actor.holds(CardKind.CAPTAIN)
    assert challenger.card_kinds() == (CardKind.CONTESSA,)
    assert state.claims[-1].verified
    replaced = log.of_type(GameEventType.CARD_REPLACED)
    assert len(replaced) == 1
    assert replaced[0].audience == ("p1",)
    assert replaced[0].payload["revealed"] == CardKind.DUKE.value
    assert len(state.deck) == len(SPARE)
    _assert_conserved(state)


def test_blocked_assassination_refunds_the_prepaid_cost() -> None:
    state = _dealt_game((CardKind.ASSASSIN, CardKind.DUKE), (CardKind.CONTESSA, CardKind.CAPTAIN))
    state.player("p1").coins = 3

    state.submit_action("p1", ActionKind.ASSASSINATE, "p2", now=_at(1))
    assert state.player("p1").coins == 0
    state.submit_block("p2", CardKind.CONTESSA, now=_at(5))
    assert state.phase is GamePhase.REACTION
    assert state.reaction_deadline == _at(35)

    with pytest.raises(ReactionWindowOpenError):
        state.resolve(now=_at(20))
    record = state.resolve(now=_at(35))

    assert record.outcome is ResolutionOutcome.BLOCKED
    assert state.player("p2").influence_count == 2
    assert state.player("p1").coins == 3
    assert "blocked by Bob" in record.result
    blocker_claim = state.claims_by("p2")[-1]
    assert blocker_claim.claimed_card is CardKind.CONTESSA
    assert not blocker_claim.challenged


def test_forced_coup_at_ten_coins() -> None:
    state = _dealt_game((CardKind.DUKE, CardKind.CAPTAIN), (CardKind.ASSASSIN, CardKind.CONTESSA))
    state.player("p1").coins = 10
    version = state.version

    with pytest.raises(ForcedCoupError):
        state.submit_action("p1", ActionKind.TAX, now=_at(1))
    assert state.version == version

    state.submit_action("p1", ActionKind.COUP, "p2", now=_at(2))
    assert state.phase is GamePhase.RESOLUTION
    assert state.reaction_deadline is None
    assert state.player("p1").coins == 3
    state.resolve(now=_at(3))

    assert state.player("p2").influence_count == 1
    assert state.player("p1").coins == 3


def test_removing_the_last_influence_finishes_the_game() -> None:
    state = _dealt_game((CardKind.DUKE, CardKind.CAPTAIN), (CardKind.ASSASSIN, CardKind.CONTESSA))
    _strip_to_one_card(state, "p2")
    state.player("p1").coins = 7

    state.submit_action("p1", ActionKind.COUP, "p2", now=_at(1))
    state.resolve(now=_at(2))

    assert state.phase is GamePhase.FINISHED
    assert state.status is GameStatus.FINISHED
    assert state.winner == "p1"
    assert state.player("p2").eliminated
    assert state.event_log is not None
    assert state.event_log.of_type(GameEventType.GAME_COMPLETED)[0].payload["winner"] == "p1"
    with pytest.raises(IllegalPhaseError):
        state.submit_action("p1", ActionKind.INCOME, now=_at(3))
    with pytest.raises(IllegalPhaseError):
        state.submit_action("p2", ActionKind.INCOME, now=_at(3))
    _assert_conserved(state)


# ----------------------------------------------------------------------
# Ordering, rotation and idempotence


def test_challenge_short_circuits_the_reaction_window() -> None:
    state = _dealt_game(
        (CardKind.DUKE, CardKind.CAPTAIN),
        (CardKind.ASSASSIN, CardKind.CONTESSA),
        (CardKind.AMBASSADOR, CardKind.DUKE),
    )

    state.submit_action("p1", ActionKind.STEAL, "p2", now=_at(1))
    state.submit_challenge("p3", now=_at(2))

    assert state.phase is GamePhase.RESOLUTION
    assert state.reaction_deadline is None
    with pytest.raises(IllegalPhaseError):
        state.submit_block("p2", CardKind.CAPTAIN, now=_at(3))
    record = state.resolve(now=_at(3))
    assert record.outcome is ResolutionOutcome.CHALLENGE_FAILED
    assert state.player("p3").influence_count == 1


def test_resolve_without_pending_action_fails_the_same_way_every_time() -> None:
    state = _dealt_game((CardKind.DUKE, CardKind.CAPTAIN), (CardKind.ASSASSIN, CardKind.CONTESSA))
    before = snapshot_game_state(state).to_dict()

    for _ in range(3):
        with pytest.raises(IllegalPhaseError):
            state.resolve(now=_at(100))
    assert snapshot_game_state(state).to_dict() == before


def test_turn_rotation_skips_eliminated_seat() -> None:
    state = _dealt_game(
        (CardKind.DUKE, CardKind.CAPTAIN),
        (CardKind.ASSASSIN, CardKind.CONTESSA),
        (CardKind.AMBASSADOR, CardKind.DUKE),
        (CardKind.CAPTAIN, CardKind.CONTESSA),
    )
    _eliminate(state, "p2")

    assert state.next_active_index(0) == 2
    state.submit_action("p1", ActionKind.INCOME, now=_at(1))
    assert state.current_player.player_id == "p3"


def test_version_increments_on_every_successful_mutation() -> None:
    state = _dealt_game((CardKind.DUKE, CardKind.CAPTAIN), (CardKind.ASSASSIN, CardKind.CONTESSA))
    start = state.version

    state.submit_action("p1", ActionKind.FOREIGN_AID, now=_at(1))
    state.submit_block("p2", CardKind.DUKE, now=_at(2))
    state.resolve(now=_at(40))

    assert state.version == start + 3
    assert state.last_update == _at(40)


# ----------------------------------------------------------------------
# Validation


@pytest.mark.parametrize(
    ("actor", "action", "target", "error"),
    [
        ("p2", ActionKind.INCOME, None, NotYourTurnError),
        ("ghost", ActionKind.INCOME, None, UnknownPlayerError),
        ("p1", ActionKind.COUP, "p2", InsufficientFundsError),
        ("p1", ActionKind.ASSASSINATE, "p2", InsufficientFundsError),
        ("p1", ActionKind.STEAL, None, TargetRequiredError),
        ("p1", ActionKind.INCOME, "p2", InvalidTargetError),
        ("p1", ActionKind.STEAL, "ghost", InvalidTargetError),
        ("p1", ActionKind.STEAL, "p1", SelfTargetForbiddenError),
        ("p1", ActionKind.STEAL, "p3", TargetEliminatedError),
        ("p1", "bribe", None, InvalidActionError),
    ],
)
def test_invalid_actions_leave_state_untouched(
    actor: str, action: ActionKind | str, target: str | None, error: type[Exception]
) -> None:
    state = _dealt_game(
        (CardKind.DUKE, CardKind.CAPTAIN),
        (CardKind.ASSASSIN, CardKind.CONTESSA),
        (CardKind.AMBASSADOR, CardKind.DUKE),
    )
    _eliminate(state, "p3")
    before = snapshot_game_state(state).to_dict()

    with pytest.raises(error):
        state.submit_action(actor, action, target, now=_at(1))
    assert snapshot_game_state(state).to_dict() == before


def test_reaction_validation_errors() -> None:
    state = _dealt_game(
        (CardKind.DUKE, CardKind.CAPTAIN),
        (CardKind.ASSASSIN, CardKind.CONTESSA),
        (CardKind.AMBASSADOR, CardKind.DUKE),
    )
    state.submit_action("p1", ActionKind.STEAL, "p2", now=_at(1))
    before = snapshot_game_state(state).to_dict()

    with pytest.raises(InvalidChallengerError):
        state.submit_challenge("p1", now=_at(2))
    with pytest.raises(InvalidChallengerError):
        state.submit_challenge("ghost", now=_at(2))
    with pytest.raises(InvalidBlockerError):
        state.submit_block("p1", CardKind.CAPTAIN, now=_at(2))
    with pytest.raises(InvalidBlockCardError):
        state.submit_block("p2", CardKind.DUKE, now=_at(2))
    with pytest.raises(InvalidBlockCardError):
        state.submit_block("p2", "joker", now=_at(2))
    assert snapshot_game_state(state).to_dict() == before

    state.submit_block("p2", CardKind.AMBASSADOR, now=_at(2))
    assert state.phase is GamePhase.REACTION
    assert state.reaction_deadline == _at(32)
    with pytest.raises(AlreadyReactedError):
        state.submit_block("p2", CardKind.CAPTAIN, now=_at(3))
    with pytest.raises(InvalidChallengerError):
        state.submit_challenge("p2", now=_at(3))


def test_eliminated_players_cannot_react() -> None:
    state = _dealt_game(
        (CardKind.DUKE, CardKind.CAPTAIN),
        (CardKind.ASSASSIN, CardKind.CONTESSA),
        (CardKind.AMBASSADOR, CardKind.DUKE),
    )
    _eliminate(state, "p3")
    state.submit_action("p1", ActionKind.FOREIGN_AID, now=_at(1))

    with pytest.raises(InvalidBlockerError):
        state.submit_block("p3", CardKind.DUKE, now=_at(2))
    state.submit_block("p2", CardKind.DUKE, now=_at(2))
    with pytest.raises(InvalidChallengerError):
        state.submit_challenge("p3", now=_at(3))


def test_unblockable_claim_rejects_blocks() -> None:
    state = _dealt_game((CardKind.DUKE, CardKind.CAPTAIN), (CardKind.ASSASSIN, CardKind.CONTESSA))
    state.submit_action("p1", ActionKind.TAX, now=_at(1))

    with pytest.raises(ActionNotBlockableError):
        state.submit_block("p2", CardKind.DUKE, now=_at(2))


def test_foreign_aid_is_only_challengeable_once_blocked() -> None:
    state = _dealt_game((CardKind.DUKE, CardKind.CAPTAIN), (CardKind.ASSASSIN, CardKind.CONTESSA))
    state.submit_action("p1", ActionKind.FOREIGN_AID, now=_at(1))

    with pytest.raises(ActionNotChallengeableError):
        state.submit_challenge("p2", now=_at(2))
    state.submit_block("p2", CardKind.DUKE, now=_at(2))
    reaction = state.submit_challenge("p1", now=_at(3))

    assert reaction.challenged_player_id == "p2"
    assert state.phase is GamePhase.RESOLUTION


# ----------------------------------------------------------------------
# Arbitration of blocks and challenges


def test_challenging_a_bluffed_block_lets_the_action_through() -> None:
    state = _dealt_game(
        (CardKind.AMBASSADOR, CardKind.CONTESSA), (CardKind.CAPTAIN, CardKind.ASSASSIN)
    )
    state.submit_action("p1", ActionKind.FOREIGN_AID, now=_at(1))
    state.submit_block("p2", CardKind.DUKE, now=_at(2))
    state.submit_challenge("p1", now=_at(3))
    record = state.resolve(now=_at(4))

    assert record.outcome is ResolutionOutcome.BLOCK_BLUFF_CAUGHT
    assert state.player("p1").coins == 4
    assert state.player("p2").card_kinds() == (CardKind.ASSASSIN,)
    assert state.claims_by("p2")[-1].caught_bluffing


def test_challenging_an_honest_block_upholds_it() -> None:
    state = _dealt_game((CardKind.CAPTAIN, CardKind.CONTESSA), (CardKind.DUKE, CardKind.ASSASSIN))
    state.submit_action("p1", ActionKind.FOREIGN_AID, now=_at(1))
    state.submit_block("p2", CardKind.DUKE, now=_at(2))
    state.submit_challenge("p1", now=_at(3))
    record = state.resolve(now=_at(4))

    assert record.outcome is ResolutionOutcome.BLOCK_UPHELD
    assert state.player("p1").coins == 2
    assert state.player("p1").card_kinds() == (CardKind.CONTESSA,)
    assert state.player("p2").influence_count == 2
    assert state.claims_by("p2")[-1].verified
    _assert_conserved(state)


def test_bluffed_assassination_is_refunded_when_caught() -> None:
    state = _dealt_game((CardKind.DUKE, CardKind.CAPTAIN), (CardKind.ASSASSIN, CardKind.CONTESSA))
    state.player("p1").coins = 3

    state.submit_action("p1", ActionKind.ASSASSINATE, "p2", now=_at(1))
    state.submit_challenge("p2", now=_at(2))
    record = state.resolve(now=_at(3))

    assert record.outcome is ResolutionOutcome.BLUFF_CAUGHT
    assert state.player("p1").coins == 3
    assert state.player("p1").card_kinds() == (CardKind.CAPTAIN,)
    assert state.player("p2").influence_count == 2


def test_failed_challenge_on_assassination_costs_two_influence() -> None:
    state = _dealt_game((CardKind.ASSASSIN, CardKind.DUKE), (CardKind.CAPTAIN, CardKind.CONTESSA))
    state.player("p1").coins = 3

    state.submit_action("p1", ActionKind.ASSASSINATE, "p2", now=_at(1))
    state.submit_challenge("p2", now=_at(2))
    state.resolve(now=_at(3))

    assert state.player("p2").eliminated
    assert state.winner == "p1"
    assert state.player("p1").coins == 0
    _assert_conserved(state)


def test_steal_takes_at_most_what_the_target_holds() -> None:
    state = _dealt_game((CardKind.CAPTAIN, CardKind.DUKE), (CardKind.ASSASSIN, CardKind.CONTESSA))
    state.player("p2").coins = 1

    state.submit_action("p1", ActionKind.STEAL, "p2", now=_at(1))
    state.resolve(now=_at(31))

    assert state.player("p1").coins == 3
    assert state.player("p2").coins == 0


def test_exchange_returns_drawn_cards() -> None:
    state = _dealt_game((CardKind.AMBASSADOR, CardKind.DUKE), (CardKind.ASSASSIN, CardKind.CONTESSA))
    hand_before = state.player("p1").card_kinds()

    state.submit_action("p1", ActionKind.EXCHANGE, now=_at(1))
    record = state.resolve(now=_at(31))

    assert record.outcome is ResolutionOutcome.SUCCEEDED
    assert state.player("p1").card_kinds() == hand_before
    assert len(state.deck) == len(SPARE)
    _assert_conserved(state)


def test_later_reactions_are_recorded_but_not_arbitrated() -> None:
    state = _dealt_game(
        (CardKind.CAPTAIN, CardKind.CONTESSA),
        (CardKind.ASSASSIN, CardKind.CAPTAIN),
        (CardKind.DUKE, CardKind.AMBASSADOR),
    )
    state.submit_action("p1", ActionKind.FOREIGN_AID, now=_at(1))
    state.submit_block("p2", CardKind.DUKE, now=_at(2))
    state.submit_block("p3", CardKind.DUKE, now=_at(3))
    record = state.resolve(now=_at(33))

    assert record.outcome is ResolutionOutcome.BLOCKED
    assert "Bob" in record.result
    assert [reaction.player_id for reaction in record.reactions] == ["p2", "p3"]
    assert state.player("p1").coins == 2


# ----------------------------------------------------------------------
# Atomicity and invariants


def test_failed_resolution_rolls_back_every_change(monkeypatch: pytest.MonkeyPatch) -> None:
    state = _dealt_game((CardKind.DUKE, CardKind.CAPTAIN), (CardKind.ASSASSIN, CardKind.CONTESSA))
    state.submit_action("p1", ActionKind.TAX, now=_at(1))
    before = snapshot_game_state(state).to_dict()

    def overdraw(game: GameState, action: object, now: datetime) -> str:
        game.player("p1").coins = -4
        return "broken"

    monkeypatch.setitem(resolution.ACTION_EFFECTS, ActionKind.TAX, overdraw)
    with pytest.raises(InvariantViolation) as excinfo:
        state.resolve(now=_at(31))

    assert not isinstance(excinfo.value, InvalidActionError)
    assert snapshot_game_state(state).to_dict() == before
    assert state.phase is GamePhase.REACTION


def test_rollback_after_arbitration_keeps_the_shared_log(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    state = _dealt_game((CardKind.DUKE, CardKind.CAPTAIN), (CardKind.ASSASSIN, CardKind.CONTESSA))
    log = state.event_log
    assert log is not None
    state.submit_action("p1", ActionKind.TAX, now=_at(1))
    state.submit_challenge("p2", now=_at(2))
    before = snapshot_game_state(state).to_dict()
    logged = len(log)

    def overdraw(game: GameState, action: object, now: datetime) -> str:
        game.player("p1").coins = -4
        return "broken"

    monkeypatch.setitem(resolution.ACTION_EFFECTS, ActionKind.TAX, overdraw)
    with pytest.raises(InvariantViolation):
        state.resolve(now=_at(3))

    # The failed challenge had already discarded, replaced and logged.
    assert state.event_log is log
    assert len(log) == logged
    assert not log.of_type(GameEventType.INFLUENCE_LOST)
    assert not state.claims[-1].challenged
    assert state.history == ()
    assert snapshot_game_state(state).to_dict() == before

    monkeypatch.undo()
    state.resolve(now=_at(4))
    assert log.of_type(GameEventType.ACTION_RESOLVED)[-1].timestamp == _at(4)


def test_resolution_events_carry_the_resolve_time() -> None:
    state = _dealt_game((CardKind.DUKE, CardKind.CAPTAIN), (CardKind.ASSASSIN, CardKind.CONTESSA))
    log = state.event_log
    assert log is not None
    state.submit_action("p1", ActionKind.TAX, now=_at(1))
    state.submit_challenge("p2", now=_at(2))
    state.resolve(now=_at(3))

    turn = log.for_turn(1)
    stamped = {event.type: event.timestamp for event in turn}
    for event_type in (
        GameEventType.INFLUENCE_LOST,
        GameEventType.CARD_REPLACED,
        GameEventType.CHALLENGE_RESOLVED,
        GameEventType.ACTION_RESOLVED,
    ):
        assert stamped[event_type] == _at(3)
    timestamps = [event.timestamp for event in log.events]
    assert timestamps == sorted(timestamps)
    assert all(event.timestamp <= _at(3) for event in log.events)


def test_check_invariants_detects_hand_and_flag_divergence() -> None:
    state = _dealt_game((CardKind.DUKE, CardKind.CAPTAIN), (CardKind.ASSASSIN, CardKind.CONTESSA))
    state.check_invariants()

    state.player("p2").eliminated = True
    with pytest.raises(InvariantViolation):
        state.check_invariants()
    state.player("p2").eliminated = False

    state.player("p2").hand.pop()
    with pytest.raises(InvariantViolation):
        state.check_invariants()


def test_card_total_is_conserved_over_random_play() -> None:
    rng = random.Random(5)
    state = GameState.create_game(
        "g1",
        Player("p1", NAMES[0]),
        build_deck(rng=random.Random(5)),
        config=GameConfig(auto_start=False),
        seed=5,
        now=T0,
    )
    for seat in range(1, 4):
        state.join_game(f"p{seat + 1}", NAMES[seat], now=T0)
    state.deal_initial_hands(now=T0)

    clock = 0.0
    for _ in range(400):
        if state.phase is GamePhase.FINISHED:
            break
        clock += 31
        moment = _at(clock)
        if state.phase is GamePhase.ACTION:
            actor = state.current_player
            action = rng.choice(available_actions(actor, state.config))
            targets = [p.player_id for p in state.active_players if p is not actor]
            target = rng.choice(targets) if ACTION_RULES[action].requires_target else None
            state.submit_action(actor.player_id, action, target, now=moment)
        elif state.phase is GamePhase.REACTION:
            reactor = rng.choice(state.active_players)
            roll = rng.random()
            try:
                if roll < 0.3:
                    state.submit_challenge(reactor.player_id, now=moment)
                elif roll < 0.5:
                    state.submit_block(reactor.player_id, rng.choice(list(CardKind)), now=moment)
                else:
                    state.resolve(now=moment + state.config.reaction_window)
            except InvalidActionError:
                pass
        else:
            state.resolve(now=moment)
        _assert_conserved(state)
        state.check_invariants()

    assert state.turn_number > 1
