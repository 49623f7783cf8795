"""The chain of interactions that led to a neutrino, built from a dk2nu entry."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Sequence

from .interaction import InteractionData, ParticlesThroughVolumesData

logger = logging.getLogger(__name__)

Vector3 = tuple[float, float, float]

_DEUTERON = 1000010020
_FAST_DECAYS = frozenset({221, 331, 3212, 113, 223})


def is_fast_decay(pdg: int) -> bool:
    """True for swiftly decaying particles whose daughters are followed instead."""
    return pdg in _FAST_DECAYS


@dataclass
class Ancestor:
    """One particle in the ancestry of a neutrino (GeV, cm)."""

    pdg: int
    proc: str = ""
    ivol: str = ""
    start_position: Vector3 = (0.0, 0.0, 0.0)
    start_momentum: Vector3 = (0.0, 0.0, 0.0)
    stop_momentum: Vector3 = (0.0, 0.0, 0.0)
    pprod_momentum: Vector3 = (0.0, 0.0, 0.0)


@dataclass
class TargetExit:
    """The hadron that left the target."""

    momentum: Vector3 = (0.0, 0.0, 0.0)
    position: Vector3 = (0.0, 0.0, 0.0)
    ptype: int = 0


@dataclass
class DecayInfo:
    """Kinematics of the decay that produced the neutrino."""

    ntype: int = 0
    nimpwt: float = 1.0
    vx: float = 0.0
    vy: float = 0.0
    vz: float = 0.0
    pdpx: float = 0.0
    pdpy: float = 0.0
    pdpz: float = 0.0
    ppdxdz: float = 0.0
    ppdydz: float = 0.0
    pppz: float = 0.0
    ppenergy: float = 0.0
    muparpx: float = 0.0
    muparpy: float = 0.0
    muparpz: float = 0.0
    mupare: float = 0.0
    necm: float = 0.0


@dataclass
class Dk2NuEntry:
    """One simulated neutrino with its ancestry and auxiliary values."""

    ancestors: list[Ancestor] = field(default_factory=list)
    tgtexit: TargetExit = field(default_factory=TargetExit)
    decay: DecayInfo = field(default_factory=DecayInfo)
    vint: list[int] = field(default_factory=list)
    vdbl: list[float] = field(default_factory=list)


@dataclass
class DkMeta:
    """Run-level metadata for a set of entries."""

    tgtcfg: str = ""
    horncfg: str = ""
    vintnames: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class TargetData:
    """The hadron exiting the target and its position in the interaction chain."""

    momentum: Vector3
    pdg: int
    position: Vector3
    idx_ancestry: int = -1

    @property
    def pz(self) -> float:
        return self.momentum[2]

    @property
    def pt(self) -> float:
        return math.hypot(self.momentum[0], self.momentum[1])

    def format(self) -> str:
        p3 = "".join(f"{v:6.2f} " for v in self.momentum)
        v3 = "".join(f"{v:5.2f} " for v in self.position)
        return f"pdg:{self.pdg:5d}|p3:{p3}|v3:{v3}|idx:{self.idx_ancestry}"


def _norm(vector: Sequence[float]) -> float:
    return math.sqrt(sum(c * c for c in vector))


@dataclass
class InteractionChainData:
    """Every interaction leading to a neutrino, plus target-exit and volume data."""

    interaction_chain: list[InteractionData] = field(default_factory=list)
    tar_info: TargetData = field(
        default_factory=lambda: TargetData((0.0, 0.0, 0.0), 0, (0.0, 0.0, 0.0), -1)
    )
    ptv_info: list[ParticlesThroughVolumesData] = field(default_factory=list)
    target_config: str = ""
    horn_config: str = ""
    playlist: int = -1

    @classmethod
    def from_dk2nu(cls, entry: Dk2NuEntry, meta: DkMeta) -> "InteractionChainData":
        ancestors = entry.ancestors
        if len(ancestors) < 3:
            raise ValueError("an ancestry needs at least three particles")
        ntraj = len(ancestors)
        nskip = 0
        chain: list[InteractionData] = []

        for itraj, incident in enumerate(ancestors[:-1]):
            # pprod holds the momentum just before an interaction; it is zero
            # when that is not recorded, and the stop momentum is used instead.
            if incident.pprod_momentum[2] != 0:
                inc_mom = incident.pprod_momentum
            else:
                inc_mom = incident.stop_momentum

            prod_idx = itraj + 1
            process = ancestors[prod_idx].proc
            pdg_prod = ancestors[prod_idx].pdg
            while is_fast_decay(pdg_prod) and prod_idx < ntraj - 2:
                prod_idx += 1
                nskip += 1
                pdg_prod = ancestors[prod_idx].pdg

            product = ancestors[prod_idx]
            if _DEUTERON in (pdg_prod, incident.pdg):
                continue

            chain.append(
                InteractionData.from_momenta(
                    itraj,
                    inc_mom,
                    incident.pdg,
                    product.start_momentum,
                    pdg_prod,
                    product.ivol,
                    process,
                    product.start_position,
                )
            )

        exit_ = entry.tgtexit
        idx = entry.vint[0] - nskip if meta.vintnames else -1
        tar_info = TargetData(tuple(exit_.momentum), exit_.ptype, tuple(exit_.position), idx)

        pdgs = [0, 0, 0]
        moms = [0.0, 0.0, 0.0]
        amount_ic = [0.0, 0.0, 0.0]
        amount_dpip = [0.0, 0.0, 0.0]
        amount_dvol = [0.0, 0.0, 0.0]
        vdbl = entry.vdbl
        for ii in range(3):
            if ntraj == 3 and ii == 2:
                continue
            ancestor = ancestors[ntraj - ii - 2]
            pdgs[ii] = ancestor.pdg
            moms[ii] = _norm(ancestor.start_momentum)
            if min(vdbl[ii], vdbl[ii + 3], vdbl[ii + 6], vdbl[ii + 9]) < 0:
                logger.error("negative amount of material crossed in ancestry")
            amount_ic[ii] = vdbl[ii] + vdbl[ii + 3]
            amount_dpip[ii] = vdbl[ii + 6]
            amount_dvol[ii] = vdbl[ii + 9]

        ptv_info = [
            ParticlesThroughVolumesData(tuple(pdgs), tuple(amounts), tuple(moms), vol)
            for amounts, vol in (
                (amount_ic, "IC"),
                (amount_dpip, "DPIP"),
                (amount_dvol, "DVOL"),
            )
        ]

        playlist = entry.vint[1] if len(meta.vintnames) > 1 else -1

        return cls(
            interaction_chain=chain,
            tar_info=tar_info,
            ptv_info=ptv_info,
            target_config=meta.tgtcfg,
            horn_config=meta.horncfg,
            playlist=playlist,
        )

    def format(self) -> str:
        parts = [
            "==== InteractionChainData ====\n",
            f" *config* {self.target_config} {self.horn_config}",
            "\n *target info*\n  ",
            self.tar_info.format(),
            "\n *ancestors*\n",
        ]
        parts.extend("   " + inter.format() for inter in self.interaction_chain)
        parts.append("\n *Particlethrough volumes:*\n")
        parts.extend("   " + ptv.format() for ptv in self.ptv_info)
        parts.append("\n")
        return "".join(parts)