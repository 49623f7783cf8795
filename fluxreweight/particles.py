"""Particle codes and masses."""

from __future__ import annotations


class UnknownParticle(LookupError):
    """Raised for a particle code that has no known mass."""

    def __init__(self, pdg: int) -> None:
        super().__init__(pdg)
        self.pdg = pdg

    def __str__(self) -> str:
        return f"unknown particle code {self.pdg}"


_NUMI_TO_PDG = {
    5: -13,
    6: 13,
    7: 111,
    8: 211,
    9: -211,
    10: 130,
    11: 321,
    12: -321,
    13: 2112,
    14: 2212,
    15: -2212,
    16: 310,
    17: 221,
    18: 3122,
    19: 3222,
    20: 3212,
    21: 3112,
    22: 3322,
    23: 3312,
    24: 3334,
    25: -2112,
    26: -3122,
    27: -3112,
    28: -3212,
    29: -3222,
    30: -3322,
    31: -3312,
    52: -12,
    53: 12,
    55: -14,
    56: 14,
    99: 0,
}

# Masses in GeV, keyed by particle code; antiparticles share them.
_MASSES = {
    11: 0.000510999,
    12: 0.0,
    13: 0.105658,
    14: 0.0,
    15: 1.77686,
    16: 0.0,
    22: 0.0,
    111: 0.134977,
    211: 0.13957,
    113: 0.77526,
    213: 0.77526,
    130: 0.497614,
    310: 0.497614,
    311: 0.497614,
    321: 0.493677,
    221: 0.547862,
    223: 0.78265,
    331: 0.95778,
    333: 1.019461,
    2112: 0.939565,
    2212: 0.938272,
    3122: 1.115683,
    3112: 1.197449,
    3212: 1.192642,
    3222: 1.18937,
    3312: 1.32171,
    3322: 1.31486,
    3334: 1.67245,
    1000010020: 1.875613,
}

_SELF_CONJUGATE = frozenset({22, 111, 113, 130, 221, 223, 310, 331, 333})


def numi_to_pdg(numi_code: int) -> int:
    """Translate a legacy beam-simulation particle code to a PDG code.

    Codes without a translation give 0.
    """
    return _NUMI_TO_PDG.get(numi_code, 0)


def particle_mass(pdg: int) -> float:
    """Return the mass in GeV of the particle with PDG code ``pdg``."""
    if pdg in _MASSES:
        return _MASSES[pdg]
    if pdg < 0 and -pdg in _MASSES and -pdg not in _SELF_CONJUGATE:
        return _MASSES[-pdg]
    raise UnknownParticle(pdg)