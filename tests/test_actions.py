"""Tests for the action layer: engine errors become alerts, never exceptions."""

from tessera.data.balance import BALANCE
from tessera.engine import actions
from tessera.engine.game_state import GameState
from tessera.engine.hooks import Hooks


def _hooks() -> tuple[Hooks, list[str], list[str]]:
    alerts: list[str] = []
    notices: list[str] = []
    return Hooks(alert=alerts.append, notify=notices.append), alerts, notices


def test_buy_success_alerts_and_refreshes():
    state = GameState()
    state.wallet("golden_quarks").value = 10
    refreshed = []
    hooks = Hooks(refresh=lambda: refreshed.append(True))

    assert actions.buy_upgrade(state, "singularity", "sing_offerings1", hooks, 3)

    assert state.registry("singularity")["sing_offerings1"].level == 3
    assert hooks.messages == ["Bought 3 level(s) of Offering Charge."]
    assert refreshed == [True]


def test_failed_buy_reports_and_leaves_state_alone():
    state = GameState()
    state.wallet("golden_quarks").value = 0
    hooks, alerts, _ = _hooks()

    assert not actions.buy_upgrade(state, "singularity", "sing_offerings1", hooks)

    assert len(alerts) == 1
    assert state.registry("singularity")["sing_offerings1"].level == 0


def test_locked_upgrade_reports_gate():
    state = GameState()
    state.wallet("golden_quarks").value = 1e12
    hooks, alerts, _ = _hooks()

    assert not actions.buy_upgrade(state, "singularity", "octeract_unlock", hooks)

    assert "not powerful enough" in alerts[0]
    assert "Octeracts" in alerts[0]


def test_unknown_upgrade_is_reported():
    hooks, alerts, _ = _hooks()
    assert not actions.buy_upgrade(GameState(), "singularity", "nope", hooks)
    assert not actions.buy_upgrade(GameState(), "nowhere", "sing_cubes1", hooks)
    assert len(alerts) == 2


def test_budget_purchase_respects_budget():
    state = GameState()
    state.wallet("golden_quarks").value = 100
    hooks = Hooks()

    # Levels cost 1, 2, 3, 4 ... so a budget of 10 buys four
    assert actions.buy_upgrade_with_budget(state, "singularity", "sing_offerings1", "10", hooks)

    assert state.registry("singularity")["sing_offerings1"].level == 4
    assert state.wallet("golden_quarks").get() == 90


def test_cancelled_prompts_do_nothing():
    state = GameState()
    state.wallet("golden_quarks").value = 100
    state.wallet("cubes").value = 100
    state.wallet("quarks").value = 1e6
    hooks = Hooks()

    assert not actions.buy_upgrade_with_budget(state, "singularity", "sing_offerings1", None, hooks)
    assert not actions.toggle_upgrade(state, "singularity", "sing_offerings1", None, hooks)
    assert not actions.open_custom(state, "cubes", None, hooks)
    assert not actions.buy_golden_quarks(state, None, hooks)

    assert hooks.messages == [actions.CANCELLED] * 4
    assert state.wallet("golden_quarks").get() == 100
    assert state.wallet("cubes").get() == 100
    assert state.wallet("quarks").get() == 1e6


def test_bad_budget_answer_is_reported():
    state = GameState()
    state.wallet("golden_quarks").value = 100
    hooks = Hooks()
    assert not actions.buy_upgrade_with_budget(state, "singularity", "sing_offerings1", "lots", hooks)
    assert not actions.buy_upgrade_with_budget(state, "singularity", "sing_offerings1", "inf", hooks)
    assert len(hooks.messages) == 2
    assert state.wallet("golden_quarks").get() == 100


def test_toggle_sets_per_click_amount():
    state = GameState()
    hooks = Hooks()
    assert actions.toggle_upgrade(state, "singularity", "sing_offerings1", "-1", hooks)
    assert state.registry("singularity")["sing_offerings1"].toggle_buy == -1
    assert "max" in hooks.messages[-1]


def test_sell_then_integrity():
    state = GameState()
    state.wallet("golden_quarks").value = 10
    actions.buy_upgrade(state, "singularity", "sing_offerings1", Hooks(), 3)
    hooks = Hooks()

    assert actions.sell_upgrade(state, "singularity", "sing_offerings1", hooks, 1)

    assert state.registry("singularity")["sing_offerings1"].level == 2
    assert state.wallet("golden_quarks").get() == 7
    assert hooks.messages == ["Sold 1 level(s) of Offering Charge."]


def test_open_reports_quarks():
    state = GameState()
    state.wallet("cubes").value = 100
    hooks = Hooks()

    assert actions.open_cubes(state, "cubes", hooks, 100)

    assert len(hooks.messages) == 1
    assert hooks.messages[0].startswith("Opened 100 cubes.")
    assert "Quarks!" in hooks.messages[0]
    assert state.wallet("quarks").get() == 10


def test_open_custom_percentage():
    state = GameState()
    state.wallet("tesseracts").value = 80
    hooks = Hooks()

    assert actions.open_custom(state, "tesseracts", "25%", hooks)

    assert state.wallet("tesseracts").get() == 60


def test_open_custom_rejects_bad_input_and_unknown_kind():
    state = GameState()
    state.wallet("cubes").value = 80
    hooks = Hooks()
    assert not actions.open_custom(state, "cubes", "abc", hooks)
    assert not actions.open_custom(state, "octeracts", "5", hooks)
    assert len(hooks.messages) == 2
    assert state.wallet("cubes").get() == 80


def test_open_custom_more_than_held_opens_nothing():
    state = GameState()
    state.wallet("cubes").value = 100
    hooks = Hooks()

    assert not actions.open_custom(state, "cubes", "200", hooks)

    assert "enough" in hooks.messages[0]
    assert state.wallet("cubes").get() == 100
    assert state.opened_daily["cubes"] == 0


def test_refresh_failure_does_not_undo_the_action():
    state = GameState()
    state.wallet("golden_quarks").value = 10

    def broken_refresh():
        raise RuntimeError("screen went away")

    hooks = Hooks(refresh=broken_refresh)
    assert actions.buy_upgrade(state, "singularity", "sing_offerings1", hooks, 1)
    assert state.registry("singularity")["sing_offerings1"].level == 1


def test_integrity_notice_goes_to_notify():
    state = GameState()
    up = state.registry("singularity")["sing_offerings1"]
    up.level = 3
    up.invested = 999
    hooks, alerts, notices = _hooks()

    refunded = actions.run_integrity(state, hooks)

    assert refunded == ["Offering Charge"]
    assert len(notices) == 1
    assert alerts == []


def test_singularity_announces_automation():
    state = GameState(singularity_count=999, highest_singularity_count=999)
    automation = state.registry("singularity")["sing_automation"]
    automation.level = 50
    automation.invested = 50 * 51 / 2
    hooks, alerts, notices = _hooks()

    assert actions.enter_singularity(state, hooks)

    assert alerts == ["Welcome to Singularity #1000."]
    assert "Automation unlocked: Auto Coin Buildings" in notices


def test_singularity_rejects_bad_target():
    state = GameState(singularity_count=2, highest_singularity_count=2)
    hooks = Hooks()
    assert not actions.enter_singularity(state, hooks, target=50)
    assert state.singularity_count == 2
    assert len(hooks.messages) == 1


def test_auto_open_setting_is_reported():
    state = GameState(highest_singularity_count=BALANCE.cubes.auto_open_singularity)
    hooks, alerts, _ = _hooks()

    assert actions.set_auto_open(state, "tesseracts", "30", hooks)
    assert not actions.set_auto_open(state, "tesseracts", None, hooks)
    assert not actions.set_auto_open(state, "tesseracts", "300", hooks)

    assert alerts[0] == "Wow! Tesseracts now auto-open 30% of what you gain."
    assert len(alerts) == 3
    assert state.auto_open_percent["tesseracts"] == 30


def test_locked_auto_open_is_reported():
    state = GameState()
    hooks, alerts, _ = _hooks()
    assert not actions.set_auto_open(state, "cubes", "30", hooks)
    assert len(alerts) == 1
    assert state.auto_open_percent["cubes"] == 0


def test_advance_announces_auto_opened_quarks():
    state = GameState(highest_singularity_count=BALANCE.cubes.auto_open_singularity)
    state.auto_open_percent["cubes"] = 100
    hooks, alerts, notices = _hooks()

    actions.advance(state, 100 / BALANCE.income.cubes_per_s, hooks)

    assert alerts == []
    assert notices == ["Auto-opened cubes: +10 Quarks!"]
    assert state.opened_daily["cubes"] == 100
    assert state.wallet("quarks").get() == 10
