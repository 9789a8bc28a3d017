"""Tests for the singularity reset and the Golden Quark shop."""

import math

import pytest

from tessera.data.balance import BALANCE
from tessera.engine.curves import LINEAR
from tessera.engine.exceptions import AffordabilityError, ValidationError
from tessera.engine.game_state import GameState
from tessera.engine.singularity import (
    buy_golden_quarks,
    golden_quark_cost,
    max_golden_quarks,
    perform_singularity,
    singularity_reward,
)
from tessera.engine.upgrades import BUY_MAX


# ── Golden Quark shop ────────────────────────────────────────────────────────

def test_base_golden_quark_cost():
    cost, discount = golden_quark_cost(GameState())
    assert cost == BALANCE.singularity.golden_quark_base_cost
    assert discount == 0


def test_discounts_from_upgrades_and_singularities():
    state = GameState(singularity_count=10)
    state.registry("singularity")["golden_quarks1"].level = 2
    state.registry("singularity")["sing_gq_discount"].level = 3
    cost, discount = golden_quark_cost(state)
    assert discount == 2 * 500 + 3 * 1000 + 10 * 100
    assert cost == 100_000 - discount


def test_cost_never_drops_below_floor():
    state = GameState(singularity_count=5000)
    cost, _ = golden_quark_cost(state)
    assert cost == BALANCE.singularity.golden_quark_min_cost


def test_buy_golden_quarks():
    state = GameState()
    state.wallet("quarks").value = 250_000
    assert max_golden_quarks(state) == 2
    assert buy_golden_quarks(state, 1) == 1
    assert state.wallet("golden_quarks").get() == 1
    assert state.wallet("quarks").get() == 150_000


def test_buy_max_golden_quarks():
    state = GameState()
    state.wallet("quarks").value = 350_000
    assert buy_golden_quarks(state, BUY_MAX) == 3
    assert state.wallet("quarks").get() == 50_000


def test_cannot_buy_golden_quarks_when_broke():
    state = GameState()
    state.wallet("quarks").value = 10
    with pytest.raises(AffordabilityError):
        buy_golden_quarks(state, 1)


def test_cannot_buy_more_than_affordable():
    state = GameState()
    state.wallet("quarks").value = 150_000
    with pytest.raises(AffordabilityError):
        buy_golden_quarks(state, 2)
    assert state.wallet("quarks").get() == 150_000


def test_buy_golden_quarks_rejects_zero():
    state = GameState()
    state.wallet("quarks").value = 150_000
    with pytest.raises(ValidationError):
        buy_golden_quarks(state, 0)


# ── Singularity ──────────────────────────────────────────────────────────────

def test_singularity_advances_counters():
    state = GameState()
    result = perform_singularity(state)
    assert result.singularity_count == 1
    assert state.singularity_count == 1
    assert state.highest_singularity_count == 1


def test_singularity_resets_cubes_but_keeps_upgrades():
    state = GameState()
    state.wallet("cubes").value = 500
    state.blessings["cubes"]["accelerator"] = 42
    state.wallet("quarks").value = 77
    offerings = state.registry("singularity")["sing_offerings1"]
    offerings.level = 4
    offerings.invested = LINEAR.total(4, 1)

    perform_singularity(state)

    assert state.wallet("cubes").get() == 0
    assert state.blessings["cubes"]["accelerator"] == 0
    assert state.wallet("quarks").get() == 77
    assert offerings.level == 4


def test_golden_quarks_earned_are_boosted():
    state = GameState()
    gq1 = state.registry("singularity")["golden_quarks1"]
    gq1.level = 2
    gq1.invested = LINEAR.total(2, 12)
    result = perform_singularity(state, golden_quarks=100)
    assert result.golden_quarks == pytest.approx(110)
    assert state.wallet("golden_quarks").get() == pytest.approx(110)


@pytest.mark.parametrize("golden_quarks", [-5, math.nan, math.inf])
def test_bad_golden_quarks_are_rejected_before_anything_resets(golden_quarks):
    state = GameState()
    state.wallet("cubes").value = 10
    with pytest.raises(ValidationError):
        perform_singularity(state, golden_quarks=golden_quarks)
    assert state.singularity_count == 0
    assert state.wallet("cubes").get() == 10
    assert state.wallet("golden_quarks").get() == 0


def test_singularity_reward_grows_with_target():
    state = GameState(singularity_count=4, highest_singularity_count=9)
    per = BALANCE.singularity.golden_quarks_per_singularity
    assert singularity_reward(state) == per * 5
    assert singularity_reward(state, target=2) == per * 2


def test_can_revisit_lower_singularity():
    state = GameState(singularity_count=20, highest_singularity_count=20)
    perform_singularity(state, target=5)
    assert state.singularity_count == 5
    assert state.highest_singularity_count == 20


def test_cannot_skip_ahead():
    state = GameState(singularity_count=2, highest_singularity_count=2)
    with pytest.raises(ValidationError):
        perform_singularity(state, target=10)
    assert state.singularity_count == 2


def test_dropping_below_a_gate_refunds_the_upgrade():
    state = GameState(singularity_count=12, highest_singularity_count=12)
    octeracts = state.registry("singularity")["octeract_unlock"]
    octeracts.level = 1
    octeracts.invested = 8888

    result = perform_singularity(state, target=3)

    assert result.refunded == ["Octeracts"]
    assert octeracts.level == 0
    assert state.wallet("golden_quarks").get() == 8888


def test_singularity_rolls_automation():
    state = GameState(singularity_count=999, highest_singularity_count=999)
    automation = state.registry("singularity")["sing_automation"]
    automation.level = 50
    automation.invested = LINEAR.total(50, 1)
    result = perform_singularity(state)
    assert "Auto Coin Buildings" in result.automations
    assert "auto_coin_buildings" in state.automation_unlocks
