"""Openable currencies — cubes and their higher tiers."""

from __future__ import annotations

from dataclasses import dataclass

from tessera.data.blessings import BLESSINGS, PLATONIC_BLESSINGS, BucketTable


@dataclass(frozen=True)
class OpenableDef:
    """A wallet whose units can be opened into blessings."""

    kind: str
    name: str
    table: BucketTable
    # Quarks: floor(log10(opened) * quark_base * mult)
    quark_base: float
    # Platonics come with the shop quark multiplier built in
    shop_mult_always: bool = False
    # Challenge completions multiply every blessing gained
    challenge_bonus: bool = False


OPENABLES: dict[str, OpenableDef] = {
    o.kind: o for o in [
        OpenableDef("cubes", "Wow! Cubes", BLESSINGS, quark_base=5.0, challenge_bonus=True),
        OpenableDef("tesseracts", "Wow! Tesseracts", BLESSINGS, quark_base=7.0),
        OpenableDef("hypercubes", "Wow! Hypercubes", BLESSINGS, quark_base=10.0),
        OpenableDef(
            "platonics",
            "Platonic Cubes",
            PLATONIC_BLESSINGS,
            quark_base=15.0,
            shop_mult_always=True,
        ),
    ]
}
