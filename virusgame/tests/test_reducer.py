"""
Tests for the reducer (state transitions).

Tests:
- Turn gate and no-op rejections
- Organ plays, discards, passing
- Hand refill and deck recycling
- Win detection
- Table actions (join, start, reset)
"""

import random
from copy import deepcopy

from virusgame.engine_core.action import Action, ActionType, ActionPayload
from virusgame.engine_core.reducer import Reducer, apply_action
from virusgame.engine_core.state import CardKind, GamePhase, OrganType

from .factories import (
    BONE, BRAIN, HEART, STOMACH,
    filler, hand_ids, make_state, medicine, organ, player, slot, virus,
)


def _with_heart_in_first_hand(state):
    """Swap a heart organ from the deck into p_0's hand (cards stay conserved)."""
    state = state.clone()
    hand = state.players[0].hand
    for idx, card in enumerate(state.deck):
        if card.kind == CardKind.ORGAN and card.organ_type == OrganType.HEART:
            state.deck[idx], hand[0] = hand[0], card
            return state, card
    raise AssertionError("deck has no heart organ")


class TestTurnGate:
    """Rejected actions leave the state untouched."""

    def test_wrong_player_is_noop(self, two_player_game, reducer):
        state = two_player_game
        card_id = state.players[1].hand[0].card_id

        result = reducer.apply(state, Action.play_card("p_1", card_id))

        assert not result.success
        assert result.error_code == "NOT_YOUR_TURN"
        assert result.new_state is state

    def test_card_not_in_hand_is_noop(self, two_player_game, reducer):
        state = two_player_game

        result = reducer.apply(state, Action.play_card("p_0", "nonexistent"))

        assert not result.success
        assert result.error_code == "CARD_NOT_IN_HAND"
        assert result.new_state is state

    def test_unknown_player_is_noop(self, two_player_game):
        state = two_player_game
        assert apply_action(state, Action.next_turn("p_9")) is state

    def test_input_state_never_mutated(self, two_player_game, reducer):
        state = two_player_game
        before = deepcopy(state)

        for card in list(state.players[0].hand):
            reducer.apply(state, Action.play_card("p_0", card.card_id))
        reducer.apply(state, Action.discard_cards("p_0", hand_ids(state.players[0])))
        reducer.apply(state, Action.next_turn("p_0"))

        assert state == before

    def test_apply_action_returns_state(self, two_player_game):
        new_state = apply_action(two_player_game, Action.next_turn("p_0"), rng=random.Random(1))
        assert new_state is not two_player_game
        assert new_state.current_player_id == "p_1"

    def test_unsupported_action_type(self, two_player_game):
        reducer_without_handlers = Reducer(rng=random.Random(0))
        reducer_without_handlers._get_handler = lambda action_type: None

        result = reducer_without_handlers.apply(two_player_game, Action.start())

        assert not result.success
        assert result.error_code == "UNSUPPORTED_ACTION"


class TestOrganPlay:
    """Tests for organ cards."""

    def test_fresh_game_heart_scenario(self, two_player_game, reducer):
        state, heart = _with_heart_in_first_hand(two_player_game)
        assert len(state.deck) == 58

        result = reducer.apply(state, Action.play_card("p_0", heart.card_id))

        assert result.success
        new_state = result.new_state
        p0 = new_state.get_player("p_0")
        assert [s.organ_type for s in p0.organs] == [OrganType.HEART]
        assert len(p0.hand) == 3
        assert new_state.current_player_id == "p_1"
        assert len(new_state.deck) == 57
        assert new_state.log[-1] == f"Ana juega {heart.name}"

    def test_duplicate_organ_is_wasted(self, reducer):
        a = player("p_0", "Ana", hand=[organ("h2", HEART)], organs=[slot(organ("h1", HEART))])
        b = player("p_1", "Luis")
        state = make_state([a, b])

        result = reducer.apply(state, Action.play_card("p_0", "h2"))

        assert result.success
        new_a = result.new_state.get_player("p_0")
        assert len(new_a.organs) == 1
        assert new_a.organs[0].organ.card_id == "h1"
        assert "h2" in {c.card_id for c in result.new_state.discard_pile}
        assert result.new_state.current_player_id == "p_1"


class TestDiscardAndPass:
    """Tests for DISCARD_CARDS and NEXT_TURN."""

    def test_discard_named_cards(self, reducer):
        a = player("p_0", "Ana", hand=[organ("h1", HEART), organ("b1", BRAIN), organ("s1", STOMACH)])
        b = player("p_1", "Luis", hand=filler(3, prefix="lh"))
        state = make_state([a, b])

        result = reducer.apply(state, Action.discard_cards("p_0", ["h1", "s1", "ghost"]))

        assert result.success
        new_state = result.new_state
        assert sorted(c.card_id for c in new_state.discard_pile) == ["h1", "s1"]
        new_a = new_state.get_player("p_0")
        assert hand_ids(new_a)[0] == "b1"
        assert len(new_a.hand) == 3
        assert new_state.current_player_id == "p_1"
        assert new_state.log[-1] == "Ana descarta 2 carta(s)"

    def test_discard_nothing_is_noop(self, two_player_game, reducer):
        result = reducer.apply(two_player_game, Action.discard_cards("p_0", ["ghost"]))

        assert not result.success
        assert result.error_code == "NOTHING_TO_DISCARD"
        assert result.new_state is two_player_game

    def test_next_turn_passes_and_refills(self, reducer):
        a = player("p_0", "Ana", hand=[organ("h1", HEART)])
        b = player("p_1", "Luis", hand=[])
        state = make_state([a, b], deck=filler(10))

        result = reducer.apply(state, Action.next_turn("p_0"))

        new_state = result.new_state
        assert new_state.current_player_id == "p_1"
        assert len(new_state.get_player("p_0").hand) == 3
        assert len(new_state.get_player("p_1").hand) == 3
        assert len(new_state.deck) == 10 - 2 - 3

    def test_turn_wraps_around(self, reducer):
        players = [player(f"p_{i}", hand=filler(3, prefix=f"h{i}_")) for i in range(3)]
        state = make_state(players, current_player_id="p_2")

        result = reducer.apply(state, Action.next_turn("p_2"))

        assert result.new_state.current_player_id == "p_0"


class TestRefillAndRecycle:
    """Hand refill and the deck recycler."""

    def test_recycle_when_deck_empty(self, reducer):
        discard = filler(4, prefix="old")
        a = player("p_0", "Ana", hand=[organ("h1", HEART)])
        b = player("p_1", "Luis", hand=filler(3, prefix="lh"))
        state = make_state([a, b], deck=[], discard=discard)

        result = reducer.apply(state, Action.play_card("p_0", "h1"))

        new_state = result.new_state
        new_a = new_state.get_player("p_0")
        assert len(new_a.hand) == 3
        assert set(hand_ids(new_a)) <= {c.card_id for c in discard}
        assert len(new_state.deck) == 1
        assert new_state.discard_pile == []

    def test_nothing_to_draw_is_legal(self, reducer):
        a = player("p_0", "Ana", hand=[organ("h1", HEART)])
        b = player("p_1", "Luis", hand=[])
        state = make_state([a, b], deck=[], discard=[])

        result = reducer.apply(state, Action.play_card("p_0", "h1"))

        assert result.success
        assert result.new_state.get_player("p_0").hand == []
        assert result.new_state.get_player("p_1").hand == []
        assert result.new_state.current_player_id == "p_1"

    def test_next_player_refilled_before_their_turn(self, reducer):
        a = player("p_0", "Ana", hand=filler(3, prefix="ah"))
        b = player("p_1", "Luis", hand=[organ("h1", HEART)])
        state = make_state([a, b], deck=filler(5))

        result = reducer.apply(state, Action.next_turn("p_0"))

        new_b = result.new_state.get_player("p_1")
        assert len(new_b.hand) == 3
        assert hand_ids(new_b)[0] == "h1"


class TestWinCondition:
    """Tests for victory detection."""

    def _three_organs(self, *, bone_virus=False, immunize_heart=False):
        heart_meds = [medicine("mh1", HEART), medicine("mh2", HEART)] if immunize_heart else []
        bone_viruses = [virus("vb1", BONE)] if bone_virus else []
        return [
            slot(organ("h1", HEART), medicines=heart_meds),
            slot(organ("b1", BRAIN)),
            slot(organ("o1", BONE), viruses=bone_viruses),
        ]

    def test_fourth_healthy_organ_wins(self, reducer):
        a = player("p_0", "Ana", hand=[organ("s1", STOMACH)], organs=self._three_organs(immunize_heart=True))
        b = player("p_1", "Luis")
        state = make_state([a, b])

        result = reducer.apply(state, Action.play_card("p_0", "s1"))

        new_state = result.new_state
        assert new_state.winner_id == "p_0"
        assert new_state.phase == GamePhase.FINISHED
        assert new_state.current_player_id == "p_0"
        assert new_state.log[-2:] == ["Ana juega STOMACH", "Ana gana la partida"]

    def test_infected_organ_does_not_count(self, reducer):
        a = player("p_0", "Ana", hand=[organ("s1", STOMACH)], organs=self._three_organs(bone_virus=True))
        b = player("p_1", "Luis")
        state = make_state([a, b])

        result = reducer.apply(state, Action.play_card("p_0", "s1"))

        assert result.new_state.winner_id is None
        assert result.new_state.phase == GamePhase.PLAYING
        assert result.new_state.current_player_id == "p_1"

    def test_finished_game_is_frozen(self, reducer):
        a = player("p_0", "Ana", hand=[organ("s1", STOMACH), organ("h9", HEART)], organs=self._three_organs())
        b = player("p_1", "Luis", hand=filler(3, prefix="lh"))
        finished = reducer.apply(make_state([a, b]), Action.play_card("p_0", "s1")).new_state

        for action in (
            Action.play_card("p_0", "h9"),
            Action.discard_cards("p_0", ["h9"]),
            Action.next_turn("p_0"),
            Action.join("Marta"),
        ):
            result = reducer.apply(finished, action)
            assert not result.success
            assert result.new_state is finished

        reset = reducer.apply(finished, Action.reset(["Ana", "Luis"]))
        assert reset.success
        assert reset.new_state.phase == GamePhase.PLAYING
        assert reset.new_state.winner_id is None


class TestTableActions:
    """JOIN, START and RESET."""

    def test_join_adds_empty_player(self, two_player_game, reducer):
        result = reducer.apply(two_player_game, Action.join("Marta"))

        assert result.success
        new_state = result.new_state
        assert [p.player_id for p in new_state.players] == ["p_0", "p_1", "p_2"]
        marta = new_state.get_player("p_2")
        assert marta.name == "Marta"
        assert marta.hand == [] and marta.organs == []
        assert new_state.current_player_id == "p_0"
        assert len(new_state.deck) == len(two_player_game.deck)

    def test_join_same_name_is_noop(self, two_player_game, reducer):
        result = reducer.apply(two_player_game, Action.join("ana"))

        assert not result.success
        assert result.error_code == "DUPLICATE_PLAYER"
        assert result.new_state is two_player_game

    def test_joined_player_dealt_when_turn_arrives(self, solo_game, reducer):
        state = reducer.apply(solo_game, Action.join("Luis")).new_state

        state = reducer.apply(state, Action.next_turn("p_0")).new_state

        assert state.current_player_id == "p_1"
        assert len(state.get_player("p_1").hand) == 3

    def test_start_is_inert(self, two_player_game, reducer):
        result = reducer.apply(two_player_game, Action.start())
        assert result.new_state is two_player_game

    def test_reset_rebuilds(self, two_player_game, reducer):
        played = reducer.apply(two_player_game, Action.next_turn("p_0")).new_state

        result = reducer.apply(played, Action.reset(["X", "Y", "Z"]))

        new_state = result.new_state
        assert [p.name for p in new_state.players] == ["X", "Y", "Z"]
        assert len(new_state.deck) == 64 - 9
        assert new_state.current_player_id == "p_0"
        assert new_state.log == ["Partida creada con X, Y, Z"]

    def test_reset_without_names_is_noop(self, two_player_game, reducer):
        result = reducer.apply(two_player_game, Action(ActionType.RESET, ActionPayload(player_names=[])))
        assert not result.success
        assert result.new_state is two_player_game
