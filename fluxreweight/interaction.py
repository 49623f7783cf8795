"""Single hadronic interactions and particles crossing beamline volumes."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence

from .particles import particle_mass

Vector3 = tuple[float, float, float]
Vector4 = tuple[float, float, float, float]


def _sqrt(value: float) -> float:
    return math.sqrt(value) if value >= 0 else math.nan


def _acos(value: float) -> float:
    return math.acos(value) if -1.0 <= value <= 1.0 else math.nan


def _div(num: float, den: float) -> float:
    if den == 0:
        return math.nan if num == 0 or math.isnan(num) else math.copysign(math.inf, num)
    return num / den


@dataclass(frozen=True)
class InteractionData:
    """Kinematics of one interaction: an incident particle producing another.

    Four-momenta are ``(px, py, pz, E)`` in GeV. The longitudinal axis is the
    direction of the incident particle.
    """

    gen: int = 0
    inc_pdg: int = 0
    prod_pdg: int = 0
    inc_p: float = -1000.0
    prod_p: float = -1000.0
    inc_mass: float = -1000.0
    prod_mass: float = -1000.0
    inc_p4: Vector4 = (0.0, 0.0, 0.0, 0.0)
    prod_p4: Vector4 = (0.0, 0.0, 0.0, 0.0)
    vtx: Vector3 = (0.0, 0.0, 0.0)
    xf: float = -1000.0
    pz: float = -1000.0
    theta: float = -1000.0
    pt: float = -1000.0
    ecm: float = -1000.0
    betacm: float = -1000.0
    gammacm: float = -1000.0
    vol: str = "NoDefinied"
    proc: str = ""

    @classmethod
    def from_momenta(
        cls,
        gen: int,
        inc_mom: Sequence[float],
        inc_pdg: int,
        prod_mom: Sequence[float],
        prod_pdg: int,
        volume: str,
        process: str,
        vertex: Sequence[float],
    ) -> "InteractionData":
        """Build an interaction from lab-frame momenta in GeV."""
        inc = tuple(float(c) for c in inc_mom)
        prod = tuple(float(c) for c in prod_mom)
        inc_p = math.sqrt(sum(c * c for c in inc))
        prod_p = math.sqrt(sum(c * c for c in prod))

        cos_theta = _div(sum(a * b for a, b in zip(inc, prod)), inc_p * prod_p)
        sin_theta = _sqrt(1.0 - cos_theta**2)
        theta = _acos(cos_theta)
        pt = prod_p * sin_theta
        pz = prod_p * cos_theta

        inc_mass = particle_mass(inc_pdg)
        prod_mass = particle_mass(prod_pdg)

        inc_e = math.sqrt(inc_p**2 + inc_mass**2)
        ecm = math.sqrt(2.0 * inc_mass**2 + 2.0 * inc_e * inc_mass)
        betacm = _div(_sqrt(inc_e**2 - inc_mass**2), inc_e + inc_mass)
        gammacm = _div(1.0, _sqrt(1.0 - betacm**2))

        prod_e = math.sqrt(prod_p**2 + prod_mass**2)
        pl_cm = gammacm * (pz - betacm * prod_e)
        xf = _div(pl_cm * 2.0, ecm)

        return cls(
            gen=gen,
            inc_pdg=inc_pdg,
            prod_pdg=prod_pdg,
            inc_p=inc_p,
            prod_p=prod_p,
            inc_mass=inc_mass,
            prod_mass=prod_mass,
            inc_p4=(inc[0], inc[1], inc[2], inc_e),
            prod_p4=(prod[0], prod[1], prod[2], prod_e),
            vtx=(float(vertex[0]), float(vertex[1]), float(vertex[2])),
            xf=xf,
            pz=pz,
            theta=theta,
            pt=pt,
            ecm=ecm,
            betacm=betacm,
            gammacm=gammacm,
            vol=volume,
            proc=process,
        )

    def format(self) -> str:
        """One-line text summary, ending in a newline."""
        inc = "".join(f"{v:6.2f} " for v in self.inc_p4[:3])
        prod = "".join(f"{v:6.2f} " for v in self.prod_p4[:3])
        vtx = "".join(f"{v:5.2f} " for v in self.vtx)
        return (
            f"in:{self.inc_pdg:5d}|p3:{inc}"
            f"||out:{self.prod_pdg:5d}|p3:{prod}"
            f"|v3:{vtx}"
            f"xF,pT:{self.xf:.2f},{self.pt:.2f}\n"
        )


@dataclass(frozen=True)
class ParticlesThroughVolumesData:
    """The last three ancestors and the amount of material each crossed in a volume."""

    pdgs: tuple[int, int, int] = (0, 0, 0)
    amount_mat: Vector3 = (-1.0, -1.0, -1.0)
    moms: Vector3 = (0.0, 0.0, 0.0)
    vol: str = "None"

    def format(self) -> str:
        lines = [f"Vol: {self.vol}\n"]
        lines.extend(
            f"pid:{pdg:5d}|dist, mom: {amount:.2f},{mom:.2f}\n"
            for pdg, amount, mom in zip(self.pdgs, self.amount_mat, self.moms)
        )
        return "".join(lines)