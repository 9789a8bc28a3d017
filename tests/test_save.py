"""Tests for save/load round trips and malformed save handling."""

import json

from tessera.engine.curves import LINEAR
from tessera.engine.game_state import GameState
from tessera.engine.hooks import Hooks
from tessera.engine.save import delete_save, load_game, save_game
from tessera.engine.upgrades import buy_level


def test_missing_save_loads_nothing(tmp_path):
    assert load_game(tmp_path / "nope.json") is None


def test_round_trip_keeps_progress(tmp_path):
    path = tmp_path / "save.json"
    state = GameState(singularity_count=12, highest_singularity_count=15)
    state.wallet("golden_quarks").value = 100
    up = state.registry("singularity")["sing_offerings1"]
    buy_level(state, up, 4)
    up.toggle_buy = -1
    state.blessings["cubes"]["offering"] = 9
    state.opened_daily["cubes"] = 1234
    state.quark_daily["cubes"] = 15
    state.shop_quark_upgrades.add("cubes")
    state.automation_unlocks.add("accelerators")

    assert save_game(state, path)
    loaded = load_game(path)

    assert loaded is not None
    restored = loaded.registry("singularity")["sing_offerings1"]
    assert restored.level == 4
    assert restored.invested == LINEAR.total(4, 1)
    assert restored.toggle_buy == -1
    assert loaded.wallet("golden_quarks").get() == 90
    assert loaded.singularity_count == 12
    assert loaded.highest_singularity_count == 15
    assert loaded.blessings["cubes"]["offering"] == 9
    assert loaded.opened_daily["cubes"] == 1234
    assert loaded.quark_daily["cubes"] == 15
    assert loaded.shop_quark_upgrades == {"cubes"}
    assert loaded.automation_unlocks == {"accelerators"}


def test_load_runs_integrity_pass(tmp_path):
    path = tmp_path / "save.json"
    state = GameState()
    state.wallet("golden_quarks").value = 10
    buy_level(state, state.registry("singularity")["sing_offerings1"], 3)
    save_game(state, path)

    data = json.loads(path.read_text())
    data["upgrades"]["singularity"]["sing_offerings1"]["invested"] = 999
    path.write_text(json.dumps(data))

    hooks = Hooks()
    loaded = load_game(path, hooks)

    assert loaded is not None
    assert loaded.registry("singularity")["sing_offerings1"].level == 0
    assert loaded.wallet("golden_quarks").get() == 10
    assert len(hooks.messages) == 1
    assert "Offering Charge" in hooks.messages[0]


def test_corrupt_file_loads_nothing(tmp_path):
    path = tmp_path / "save.json"
    path.write_text("{not json")
    assert load_game(path) is None


def test_non_object_save_loads_nothing(tmp_path):
    path = tmp_path / "save.json"
    path.write_text("[1, 2, 3]")
    assert load_game(path) is None


def test_malformed_values_become_safe_defaults(tmp_path):
    path = tmp_path / "save.json"
    path.write_text(json.dumps({
        "wallets": {"golden_quarks": "lots", "quarks": -5, "cubes": 12},
        "upgrades": {
            "singularity": {
                "sing_offerings1": {"level": "three", "invested": 6},
                "sing_cubes1": {"level": 1.5, "invested": 1},
                "not_a_real_upgrade": {"level": 1},
            },
            "mystery_family": {},
        },
        "singularity_count": "NaN",
        "blessings": "broken",
        "automation_unlocks": ["accelerators", "made_up"],
    }))

    loaded = load_game(path)

    assert loaded is not None
    assert loaded.wallet("golden_quarks").get() == 0
    assert loaded.wallet("quarks").get() == 0
    assert loaded.wallet("cubes").get() == 12
    assert loaded.registry("singularity")["sing_offerings1"].level == 0
    assert loaded.registry("singularity")["sing_cubes1"].level == 0
    assert loaded.singularity_count == 0
    assert loaded.automation_unlocks == {"accelerators"}


def test_delete_save(tmp_path):
    path = tmp_path / "save.json"
    save_game(GameState(), path)
    delete_save(path)
    assert not path.exists()
    delete_save(path)


def test_malformed_toggles_and_auto_open_are_clamped(tmp_path):
    path = tmp_path / "save.json"
    path.write_text(json.dumps({
        "upgrades": {
            "singularity": {
                "sing_offerings1": {"toggle_buy": True},
                "sing_offerings2": {"toggle_buy": 10**9},
                "sing_cubes1": {"toggle_buy": "x"},
                "sing_cubes2": {"toggle_buy": -1},
            },
        },
        "auto_open_percent": {"cubes": 500, "tesseracts": 30},
    }))

    loaded = load_game(path)

    assert loaded is not None
    registry = loaded.registry("singularity")
    assert registry["sing_offerings1"].toggle_buy == 1
    assert registry["sing_offerings2"].toggle_buy == 1
    assert registry["sing_cubes1"].toggle_buy == 1
    assert registry["sing_cubes2"].toggle_buy == -1
    assert loaded.auto_open_percent["cubes"] == 100
    assert loaded.auto_open_percent["tesseracts"] == 30
