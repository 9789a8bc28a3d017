"""Tests for batched blessing distribution, cube opening and quark yield."""

import math
import random
from unittest.mock import patch

import pytest

from tessera.data.balance import BALANCE
from tessera.data.blessings import BLESSINGS, PLATONIC_BLESSINGS, Bucket, BucketTable
from tessera.engine.cubes import (
    check_quark_gain,
    cubes_to_next_quark,
    distribute,
    gain_cubes,
    open_cubes,
    parse_open_amount,
    set_auto_open,
)
from tessera.engine.exceptions import AffordabilityError, UnlockGateError, ValidationError
from tessera.engine.game_state import GameState


def _two_bucket_table() -> BucketTable:
    return BucketTable(
        name="halves",
        buckets=(Bucket("left", 10, 0.0, 50.0), Bucket("right", 10, 50.0, 100.0)),
    )


# ── Tables ───────────────────────────────────────────────────────────────────

def test_shipped_batch_sizes():
    assert BLESSINGS.batch_size == 20
    assert PLATONIC_BLESSINGS.batch_size == 40000


def test_classify_covers_whole_domain():
    assert BLESSINGS.classify(0.0) == "accelerator"
    assert BLESSINGS.classify(19.999) == "accelerator"
    assert BLESSINGS.classify(20.0) == "multiplier"
    assert BLESSINGS.classify(100.0) == "global_speed"


def test_classify_rejects_out_of_range():
    with pytest.raises(ValueError):
        BLESSINGS.classify(100.5)


def test_table_with_gap_is_rejected():
    with pytest.raises(ValueError):
        BucketTable(
            name="gappy",
            buckets=(Bucket("a", 1, 0.0, 40.0), Bucket("b", 1, 60.0, 100.0)),
        )


def test_table_width_must_match_weight():
    with pytest.raises(ValueError):
        BucketTable(
            name="lopsided",
            buckets=(Bucket("a", 1, 0.0, 70.0), Bucket("b", 1, 70.0, 100.0)),
        )


# ── distribute ───────────────────────────────────────────────────────────────

def test_distribute_47_over_two_buckets():
    random.seed(1234)
    counts = distribute(47, _two_bucket_table())
    assert counts["left"] >= 20
    assert counts["right"] >= 20
    assert counts["left"] + counts["right"] == 47


def test_distribute_zero_draws_nothing():
    with patch("tessera.engine.cubes.random") as mock_rng:
        counts = distribute(0, BLESSINGS)
    mock_rng.random.assert_not_called()
    assert all(n == 0 for n in counts.values())


@pytest.mark.parametrize("seed", [0, 1, 42])
def test_full_batches_are_deterministic(seed):
    random.seed(seed)
    counts = distribute(20 * 7, BLESSINGS)
    assert counts == {b.name: b.weight * 7 for b in BLESSINGS.buckets}


def test_full_batches_draw_nothing():
    with patch("tessera.engine.cubes.random") as mock_rng:
        distribute(40000 * 3, PLATONIC_BLESSINGS)
    mock_rng.random.assert_not_called()


@pytest.mark.parametrize("amount", [1, 19, 21, 999, 12345])
def test_distribution_conserves_units(amount):
    random.seed(amount)
    assert sum(distribute(amount, BLESSINGS).values()) == amount


def test_huge_amount_is_cheap_and_exact():
    amount = 10**15 + 3
    counts = distribute(amount, BLESSINGS)
    assert sum(counts.values()) == amount


def test_remainder_follows_draws():
    # 0.1 * 100 = 10 -> accelerator, 0.97 * 100 = 97 -> global_speed
    with patch("tessera.engine.cubes.random") as mock_rng:
        mock_rng.random.side_effect = [0.1, 0.97]
        counts = distribute(22, BLESSINGS)
    assert counts["accelerator"] == 5
    assert counts["global_speed"] == 2


def test_multiplier_scales_every_bucket():
    counts = distribute(40, BLESSINGS, multiplier=3)
    assert counts["accelerator"] == 4 * 2 * 3
    assert sum(counts.values()) == 120


@pytest.mark.parametrize("amount", [-1, 2.5])
def test_distribute_rejects_bad_amounts(amount):
    with pytest.raises(ValidationError):
        distribute(amount, BLESSINGS)


# ── Opening ──────────────────────────────────────────────────────────────────

def test_open_moves_units_into_blessings():
    state = GameState()
    state.wallet("cubes").value = 100

    result = open_cubes(state, "cubes", 40)

    assert result.opened == 40
    assert state.wallet("cubes").get() == 60
    assert sum(state.blessings["cubes"].values()) == 40
    assert state.opened_daily["cubes"] == 40


def test_open_clamps_to_held():
    state = GameState()
    state.wallet("tesseracts").value = 10
    assert open_cubes(state, "tesseracts", 500).opened == 10
    assert state.wallet("tesseracts").get() == 0


def test_open_all():
    state = GameState()
    state.wallet("hypercubes").value = 60.7
    assert open_cubes(state, "hypercubes", open_all=True).opened == 60


def test_open_nothing_raises():
    state = GameState()
    with pytest.raises(AffordabilityError):
        open_cubes(state, "cubes", 5)


def test_open_unknown_kind_raises():
    with pytest.raises(ValidationError):
        open_cubes(GameState(), "octeracts", 1)


def test_challenge_bonus_multiplies_cube_blessings():
    state = GameState(ascension_challenge_bonus=2.7)
    state.wallet("cubes").value = 20
    open_cubes(state, "cubes", 20)
    assert sum(state.blessings["cubes"].values()) == 60


def test_challenge_bonus_ignored_for_tesseracts():
    state = GameState(ascension_challenge_bonus=5)
    state.wallet("tesseracts").value = 20
    open_cubes(state, "tesseracts", 20)
    assert sum(state.blessings["tesseracts"].values()) == 20


# ── Quarks ───────────────────────────────────────────────────────────────────

def test_no_quarks_below_one_unit():
    state = GameState()
    assert check_quark_gain(state, "cubes") == 0


def test_quark_gain_formula():
    state = GameState()
    state.opened_daily["cubes"] = 1000
    # log10(1000) * 5
    assert check_quark_gain(state, "cubes") == 15

    state.shop_quark_upgrades.add("cubes")
    assert check_quark_gain(state, "cubes") == math.floor(3 * 5 * BALANCE.cubes.shop_quark_mult)


def test_platonics_always_have_shop_multiplier():
    state = GameState()
    state.opened_daily["platonics"] = 100
    assert check_quark_gain(state, "platonics") == math.floor(2 * 15 * 1.5)


def test_quarks_are_only_paid_once():
    state = GameState()
    state.wallet("cubes").value = 1000
    first = open_cubes(state, "cubes", 100)
    assert first.quarks == 10
    assert state.wallet("quarks").get() == 10

    # Recomputing at the same cumulative amount pays nothing more
    second_total = check_quark_gain(state, "cubes")
    assert second_total == state.quark_daily["cubes"]

    third = open_cubes(state, "cubes", 900)
    assert third.quarks == 5
    assert state.wallet("quarks").get() == 15


def test_lower_bonus_never_claws_back_quarks():
    state = GameState()
    state.wallet("cubes").value = 200
    open_cubes(state, "cubes", 100)
    state.quark_bonus = 0.5
    result = open_cubes(state, "cubes", 100)
    assert result.quarks == 0
    assert state.wallet("quarks").get() == 10
    assert state.quark_daily["cubes"] == 10


def test_cubes_to_next_quark():
    state = GameState()
    state.opened_daily["cubes"] = 1000
    # Next quark at 16 = log10(x) * 5 -> x = 10^3.2
    assert cubes_to_next_quark(state, "cubes") == math.ceil(10 ** 3.2 - 1000)


# ── Auto-open ────────────────────────────────────────────────────────────────

def test_gain_without_auto_open_just_credits():
    state = GameState(highest_singularity_count=100)
    assert gain_cubes(state, "cubes", 50) is None
    assert state.wallet("cubes").get() == 50


def test_auto_open_needs_singularity_threshold():
    state = GameState(highest_singularity_count=BALANCE.cubes.auto_open_singularity - 1)
    state.auto_open_percent["cubes"] = 50
    assert gain_cubes(state, "cubes", 100) is None
    assert state.wallet("cubes").get() == 100


def test_auto_open_opens_share_of_gain():
    state = GameState(highest_singularity_count=BALANCE.cubes.auto_open_singularity)
    state.auto_open_percent["cubes"] = 25
    result = gain_cubes(state, "cubes", 100)
    assert result is not None and result.opened == 25
    assert state.wallet("cubes").get() == 75


def test_auto_open_carries_fractions_between_gains():
    state = GameState(highest_singularity_count=BALANCE.cubes.auto_open_singularity)
    state.auto_open_percent["cubes"] = 25
    opened = 0
    for _ in range(10):
        result = gain_cubes(state, "cubes", 1)
        if result is not None:
            opened += result.opened
    assert opened == 2
    assert state.wallet("cubes").get() == 8
    assert state.auto_open_carry["cubes"] == 0.5


@pytest.mark.parametrize("amount", [-1, math.inf, math.nan])
def test_gain_rejects_bad_amounts(amount):
    with pytest.raises(ValidationError):
        gain_cubes(GameState(), "cubes", amount)
    with pytest.raises(ValidationError):
        gain_cubes(GameState(), "nope", 1)


def test_set_auto_open_is_gated():
    state = GameState(highest_singularity_count=BALANCE.cubes.auto_open_singularity - 1)
    with pytest.raises(UnlockGateError):
        set_auto_open(state, "cubes", "50")
    assert state.auto_open_percent["cubes"] == 0


@pytest.mark.parametrize("text", ["abc", "-1", "101", "12.5", "nan"])
def test_set_auto_open_rejects(text):
    state = GameState(highest_singularity_count=BALANCE.cubes.auto_open_singularity)
    with pytest.raises(ValidationError):
        set_auto_open(state, "cubes", text)
    assert state.auto_open_percent["cubes"] == 0


def test_set_auto_open():
    state = GameState(highest_singularity_count=BALANCE.cubes.auto_open_singularity)
    assert set_auto_open(state, "hypercubes", " 40 ") == 40
    assert state.auto_open_percent["hypercubes"] == 40


# ── Custom amounts ───────────────────────────────────────────────────────────

@pytest.mark.parametrize(
    "text, expected",
    [("40", 40), ("-40", 60), ("25%", 25), ("-25%", 75), ("100%", 100), (" 7 ", 7)],
)
def test_parse_open_amount(text, expected):
    assert parse_open_amount(text, 100) == expected


@pytest.mark.parametrize(
    "text",
    ["abc", "inf", "nan", "2.5", "150%", "-150%", "-200", "0", "0%", "-100%",
     "200", "101", "33.5%", "-33.5%"],
)
def test_parse_open_amount_rejects(text):
    with pytest.raises(ValidationError):
        parse_open_amount(text, 100)
