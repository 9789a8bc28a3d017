"""Sanity checks on the shipped game data."""

import pytest

from tessera.data.automation import AUTOMATION_GATES
from tessera.data.blessings import ALL_TABLES
from tessera.data.cubes import OPENABLES
from tessera.data.upgrades import (
    GOLDEN_QUARK_DISCOUNTS,
    SINGULARITY_UPGRADES,
    UPGRADE_FAMILIES,
    UpgradeDef,
    UpgradeKind,
)
from tessera.engine.economy import CURRENCIES
from tessera.engine.game_state import GameState


@pytest.mark.parametrize("max_level", [0, 0.5, 2.5, -2])
def test_bad_max_level_is_rejected(max_level):
    with pytest.raises(ValueError):
        UpgradeDef(id="bad", name="Bad", description="", cost_per_level=1, max_level=max_level)


def test_flag_must_have_one_level():
    with pytest.raises(ValueError):
        UpgradeDef(id="bad", name="Bad", description="", cost_per_level=1,
                   max_level=5, kind=UpgradeKind.FLAG)


def test_every_upgrade_is_well_formed():
    state = GameState()
    for family in UPGRADE_FAMILIES.values():
        for udef in family.values():
            assert udef.currency in CURRENCIES
            assert hasattr(state, udef.unlock_counter)
            assert udef.cost_per_level > 0
            if udef.effect is not None:
                assert udef.describe_effect(0)


def test_discounts_name_real_upgrades():
    assert set(GOLDEN_QUARK_DISCOUNTS) <= set(SINGULARITY_UPGRADES)


def test_gate_requirements_come_earlier():
    seen: set[str] = set()
    for gate in AUTOMATION_GATES.values():
        if gate.requires is not None:
            assert gate.requires in seen
        seen.add(gate.id)


def test_openables_use_known_tables_and_wallets():
    for kind, openable in OPENABLES.items():
        assert kind in CURRENCIES
        assert openable.table in ALL_TABLES.values()
