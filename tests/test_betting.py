import pytest

from holdem.errors import EngineError
from holdem.game import (
    _post_blinds,
    apply_action,
    create_players,
    is_hand_complete,
    legal_actions,
    next_actor,
    rotate_dealer,
    start_hand,
)
from holdem.models import ActionType, Phase, PlayerStatus, Rejection

from .helpers import act, auto_complete_hand, new_table, perform_actions, stack_deck, start, total_chips


def test_blinds_and_first_actor_four_handed():
    state = start(new_table(seats=4))

    assert state.phase == Phase.PRE_FLOP
    assert state.players[1].current_bet == 10
    assert state.players[2].current_bet == 20
    assert state.betting.highest_bet == 20
    assert state.betting.min_raise == 20
    assert next_actor(state) == 3
    assert all(len(player.hole_cards) == 2 for player in state.players)
    assert len(state.deck) == 52 - 8

    blinds = [event for event in state.events if event["ev"] == "POST_BLINDS"]
    assert blinds == [{"ev": "POST_BLINDS", "sb_seat": 1, "bb_seat": 2, "sb": 10, "bb": 20}]


def test_heads_up_dealer_posts_small_blind_and_acts_first_pre_flop():
    state = start(new_table(seats=2))

    assert state.players[0].current_bet == 10
    assert state.players[1].current_bet == 20
    assert next_actor(state) == 0


def test_heads_up_hand_visits_each_street_once():
    state = start(new_table(seats=2))
    state = perform_actions(state, [(0, ActionType.CALL, None), (1, ActionType.CHECK, None)])
    assert state.phase == Phase.FLOP
    assert len(state.community) == 3
    # Post-flop the big blind acts first heads-up.
    assert next_actor(state) == 1

    state = auto_complete_hand(state)

    streets = [event["ev"] for event in state.events if event["ev"] in ("FLOP", "TURN", "RIVER")]
    assert streets == ["FLOP", "TURN", "RIVER"]
    assert len(state.community) == 5
    assert state.phase == Phase.SHOWDOWN
    assert is_hand_complete(state)
    assert next_actor(state) is None
    assert total_chips(state) == 2_000


def test_stacked_deck_deals_hole_cards_and_burns(monkeypatch):
    stack_deck(
        monkeypatch,
        ["2c", "Ah", "7d", "As", "Kc", "Ad", "9s", "4h", "Qc", "Jd", "3c", "8s"],
    )
    state = start(new_table(seats=2))
    assert [card.label for card in state.players[0].hole_cards] == ["Ah", "As"]
    assert [card.label for card in state.players[1].hole_cards] == ["2c", "7d"]

    state = auto_complete_hand(state)

    assert [card.label for card in state.community] == ["Ad", "9s", "4h", "Jd", "8s"]
    assert state.winners == [0]
    assert state.players[0].stack == 1_020
    assert state.players[1].stack == 980
    showdown = {event["seat"]: event["rank"] for event in state.events if event["ev"] == "SHOWDOWN"}
    assert showdown[0] == "Three of a Kind"


def test_legal_actions_facing_big_blind():
    state = start(new_table(seats=4))
    window = legal_actions(state, 3)

    assert window.legal == [ActionType.FOLD, ActionType.CALL, ActionType.RAISE, ActionType.ALL_IN]
    assert window.call_amount == 20
    assert window.min_total_bet == 40
    assert window.max_total_bet == 1_000
    assert legal_actions(state, 3) == window
    assert legal_actions(state, 0).legal == []


def test_apply_action_leaves_prior_state_untouched():
    state = start(new_table(seats=4))
    events_before = list(state.events)

    result = apply_action(state, 3, ActionType.RAISE, 60)

    assert result.ok
    assert state.players[3].stack == 1_000
    assert state.betting.highest_bet == 20
    assert next_actor(state) == 3
    assert state.events == events_before
    assert result.state.players[3].stack == 940
    assert result.events == ({"ev": "RAISE", "seat": 3, "phase": "PRE_FLOP", "to": 60, "full": True, "all_in": False},)


def test_rejections_return_unchanged_state():
    state = start(new_table(seats=4))
    cases = [
        (0, ActionType.CALL, None, Rejection.OUT_OF_TURN),
        (3, ActionType.CHECK, None, Rejection.CANNOT_CHECK),
        (3, ActionType.BET, 100, Rejection.CANNOT_BET),
        (3, ActionType.RAISE, None, Rejection.AMOUNT_REQUIRED),
        (3, ActionType.RAISE, 20, Rejection.RAISE_NOT_ABOVE_BET),
        (3, ActionType.RAISE, 30, Rejection.RAISE_BELOW_MINIMUM),
    ]
    for seat, action, amount, expected in cases:
        result = apply_action(state, seat, action, amount)
        assert result.rejection == expected, f"{seat} {action} {amount}"
        assert result.state is state
        assert result.events == ()


def test_post_flop_bet_rejections():
    state = start(new_table(seats=2))
    state = perform_actions(state, [(0, ActionType.CALL, None), (1, ActionType.CHECK, None)])

    assert apply_action(state, 1, ActionType.BET, None).rejection == Rejection.AMOUNT_REQUIRED
    assert apply_action(state, 1, ActionType.BET, 5).rejection == Rejection.BET_BELOW_MINIMUM
    assert apply_action(state, 1, ActionType.CALL).rejection == Rejection.NOTHING_TO_CALL

    state = act(state, 1, ActionType.BET, 20)
    assert state.betting.highest_bet == 20
    assert state.betting.reopener == 1
    assert apply_action(state, 0, ActionType.CHECK).rejection == Rejection.CANNOT_CHECK


def test_action_before_hand_starts_is_rejected():
    state = new_table(seats=2)
    result = apply_action(state, 0, ActionType.CHECK)
    assert result.rejection == Rejection.HAND_NOT_IN_PROGRESS


def test_caller_errors_raise():
    state = start(new_table(seats=2))
    with pytest.raises(EngineError, match="Unknown seat"):
        apply_action(state, 5, ActionType.FOLD)
    with pytest.raises(ValueError, match="Unsupported action"):
        apply_action(state, 0, "DANCE")
    with pytest.raises(EngineError, match="already in progress"):
        start_hand(state)
    with pytest.raises(EngineError):
        rotate_dealer(state)


def test_start_hand_requires_blinds_and_two_funded_seats():
    with pytest.raises(EngineError, match="Blinds are not configured"):
        start(new_table(seats=2, sb=0, bb=0))
    with pytest.raises(EngineError, match="Not enough active players"):
        start(new_table(seats=3, stacks=[1_000, 0, 0]))


def test_create_players_validates_seat_count():
    with pytest.raises(ValueError):
        create_players(1, 1_000)
    with pytest.raises(ValueError):
        create_players(23, 1_000)
    assert [player.name for player in create_players(2, 100, ["alice"])] == ["alice", "Player1"]


def test_full_raise_updates_betting_round():
    state = start(new_table(seats=3))
    state = act(state, 0, ActionType.RAISE, 100)
    state = act(state, 1, ActionType.RAISE, 300)

    betting = state.betting
    assert betting.highest_bet == 300
    assert betting.last_full_raise == 200
    assert betting.min_raise == 200
    assert betting.acted_since_full_raise == {1}
    assert betting.reopener == 1
    assert legal_actions(state, 2).min_total_bet == 500

    state = act(state, 2, ActionType.CALL)
    window = legal_actions(state, 0)
    assert window.can_raise
    assert window.call_amount == 200


def test_short_all_in_does_not_reopen_betting():
    state = start(new_table(seats=3, sb=5, bb=10, stacks=[1_000, 1_000, 130]))
    state = act(state, 0, ActionType.RAISE, 100)
    state = act(state, 1, ActionType.CALL)
    state = act(state, 2, ActionType.ALL_IN)

    raise_event = state.events[-1]
    assert raise_event["ev"] == "RAISE"
    assert raise_event["to"] == 130
    assert raise_event["full"] is False
    assert state.betting.highest_bet == 130
    assert state.betting.last_full_raise == 90

    assert next_actor(state) == 0
    window = legal_actions(state, 0)
    assert window.call_amount == 30
    assert not window.can_raise
    assert not window.can_all_in
    assert apply_action(state, 0, ActionType.RAISE, 400).rejection == Rejection.CANNOT_RAISE
    assert apply_action(state, 0, ActionType.ALL_IN).rejection == Rejection.CANNOT_RAISE

    state = act(state, 0, ActionType.CALL)
    state = act(state, 1, ActionType.CALL)
    assert state.phase == Phase.FLOP
    assert state.pot_total == 390


def test_short_all_in_call_does_not_change_betting():
    state = start(new_table(seats=3, stacks=[1_000, 60, 1_000]))
    state = act(state, 0, ActionType.RAISE, 100)
    betting_before = (state.betting.highest_bet, state.betting.reopener, state.betting.last_full_raise)

    result = apply_action(state, 1, ActionType.ALL_IN)

    assert result.ok
    assert result.events == ({"ev": "CALL", "seat": 1, "phase": "PRE_FLOP", "amount": 50, "all_in": True},)
    state = result.state
    assert state.players[1].status == PlayerStatus.ALL_IN
    assert (state.betting.highest_bet, state.betting.reopener, state.betting.last_full_raise) == betting_before
    assert betting_before == (100, 0, 80)
    assert next_actor(state) == 2
    window = legal_actions(state, 2)
    assert window.min_total_bet == 180
    assert window.can_raise


def test_whole_stack_bet_below_big_blind_is_accepted():
    state = start(new_table(seats=2, stacks=[1_000, 35]))
    state = perform_actions(state, [(0, ActionType.CALL, None), (1, ActionType.CHECK, None)])
    assert state.phase == Phase.FLOP
    assert state.players[1].stack == 15

    result = apply_action(state, 1, ActionType.BET, 15)

    assert result.ok
    assert result.events[0]["ev"] == "BET"
    assert result.events[0]["all_in"] is True
    state = result.state
    assert state.players[1].status == PlayerStatus.ALL_IN
    assert state.betting.highest_bet == 15
    assert state.betting.min_raise == 15
    assert state.betting.last_full_raise == 15


def test_amounts_above_stack_are_capped_at_all_in():
    state = start(new_table(seats=2))
    max_total = legal_actions(state, 0).max_total_bet

    state = act(state, 0, ActionType.RAISE, 5_000)
    assert state.events[-1] == {"ev": "RAISE", "seat": 0, "phase": "PRE_FLOP", "to": max_total, "full": True, "all_in": True}
    assert state.players[0].stack == 0
    assert state.players[0].status == PlayerStatus.ALL_IN

    state = start(new_table(seats=2))
    state = perform_actions(state, [(0, ActionType.CALL, None), (1, ActionType.CHECK, None)])
    state = act(state, 1, ActionType.BET, 5_000)
    assert state.events[-1]["amount"] == 980
    assert state.events[-1]["all_in"] is True
    assert state.betting.highest_bet == 980


def test_posting_blinds_needs_two_live_seats():
    state = start(new_table(seats=3)).clone()
    for player in state.players[1:]:
        player.status = PlayerStatus.FOLDED
    with pytest.raises(EngineError, match="post blinds"):
        _post_blinds(state)


def test_big_blind_gets_option_after_limps():
    state = start(new_table(seats=4))
    state = perform_actions(
        state,
        [(3, ActionType.CALL, None), (0, ActionType.CALL, None), (1, ActionType.CALL, None)],
    )
    assert state.phase == Phase.PRE_FLOP
    assert next_actor(state) == 2
    window = legal_actions(state, 2)
    assert window.can_check
    assert window.can_raise

    state = act(state, 2, ActionType.RAISE, 60)
    assert state.phase == Phase.PRE_FLOP
    assert next_actor(state) == 3


def test_checking_round_moves_to_next_street_from_left_of_dealer():
    state = start(new_table(seats=4))
    state = perform_actions(
        state,
        [
            (3, ActionType.CALL, None),
            (0, ActionType.CALL, None),
            (1, ActionType.CALL, None),
            (2, ActionType.CHECK, None),
        ],
    )
    assert state.phase == Phase.FLOP
    assert next_actor(state) == 1
    assert all(player.current_bet == 0 for player in state.players)
    assert state.pot_total == 80


def test_everyone_folds_to_big_blind():
    state = start(new_table(seats=4))
    state = perform_actions(
        state,
        [(3, ActionType.FOLD, None), (0, ActionType.FOLD, None), (1, ActionType.FOLD, None)],
    )
    assert state.hand_over
    assert state.winners == [2]
    assert state.players[2].stack == 1_010
    assert state.players[1].stack == 990
    assert state.community == []
    assert total_chips(state) == 4_000


def test_folded_seat_is_skipped():
    state = start(new_table(seats=4))
    state = perform_actions(
        state,
        [(3, ActionType.FOLD, None), (0, ActionType.CALL, None), (1, ActionType.CALL, None), (2, ActionType.CHECK, None)],
    )
    assert state.players[3].status == PlayerStatus.FOLDED
    state = perform_actions(state, [(1, ActionType.CHECK, None), (2, ActionType.CHECK, None)])
    assert next_actor(state) == 0
    state = act(state, 0, ActionType.CHECK)
    assert state.phase == Phase.TURN


def test_all_in_and_call_runs_out_the_board():
    state = start(new_table(seats=2))
    state = act(state, 0, ActionType.ALL_IN)
    assert state.players[0].status == PlayerStatus.ALL_IN
    state = act(state, 1, ActionType.CALL)

    assert state.hand_over
    assert len(state.community) == 5
    assert total_chips(state) == 2_000
    assert sorted(player.stack for player in state.players) in ([0, 2_000], [1_000, 1_000])


def test_short_small_blind_goes_all_in():
    state = start(new_table(seats=3, stacks=[1_000, 5, 1_000]))
    assert state.players[1].current_bet == 5
    assert state.players[1].status == PlayerStatus.ALL_IN
    assert state.players[2].current_bet == 20
    assert [event for event in state.events if event["ev"] == "POST_BLINDS"][0]["sb"] == 5
    assert next_actor(state) == 0


def test_blinds_alone_can_run_out_the_hand():
    state = start(new_table(seats=2, stacks=[10, 1_000]))

    assert state.hand_over
    assert len(state.community) == 5
    assert [pot.amount for pot in state.pots] == [20, 10]
    assert state.pots[1].eligible == (1,)
    assert total_chips(state) == 1_010


def test_broke_seats_are_eliminated_and_skipped():
    state = start(new_table(seats=3, dealer=2, stacks=[1_000, 0, 1_000]))
    assert state.players[1].status == PlayerStatus.ELIMINATED
    assert state.players[1].hole_cards == []
    # Heads-up between seats 2 and 0: the dealer posts the small blind.
    assert state.players[2].current_bet == 10
    assert state.players[0].current_bet == 20


def test_rotate_dealer_skips_broke_seats():
    state = new_table(seats=4, stacks=[1_000, 0, 0, 1_000])
    assert rotate_dealer(state).dealer == 3
    assert rotate_dealer(rotate_dealer(state)).dealer == 0
