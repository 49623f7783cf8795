"""Corrections for hadrons absorbed while crossing beamline volumes."""

from __future__ import annotations

import math
import struct
from collections.abc import Iterator

from .chain import InteractionChainData
from .interaction import InteractionData, ParticlesThroughVolumesData
from .parameters import ParameterTable

# Avogadro's number scaled so that amount (g/cm^2) * NA_MB * xsec (mb) is dimensionless.
NA_MB = 6.02e-4
_LOW_VALUE = 1.0e-20
_MOMENTUM_SPLIT = 2.0
_NUCLEONS = frozenset({2212, 2112})

IC, DPIP, DVOL = 0, 1, 2


def _single_precision(value: float) -> float:
    """Round a value to single precision."""
    return struct.unpack("f", struct.pack("f", value))[0]


def _crossings(ptv: ParticlesThroughVolumesData) -> Iterator[tuple[int, float, float]]:
    return zip(ptv.pdgs, ptv.amount_mat, ptv.moms)


def _all_crossings(chain: InteractionChainData) -> Iterator[tuple[int, float, float]]:
    for ptv in chain.ptv_info[:3]:
        yield from _crossings(ptv)


def _survival(amount: float, xsec: float) -> float:
    return math.exp(-amount * NA_MB * xsec)


def _is_meson(pdg: int) -> bool:
    return abs(pdg) in (211, 321)


class _VolumeAbsorptionReweighter:
    """Pion and kaon absorption in one volume, scaled by inelastic cross sections on Al."""

    def __init__(
        self, universe: int, cv_pars: ParameterTable, univ_pars: ParameterTable
    ) -> None:
        self.universe = universe
        self.cv_pars = cv_pars
        self.univ_pars = univ_pars
        self.inel_piAl_xsec = univ_pars.get_value("inel_piAl_xsec")
        self.inel_kapAl_xsec_lowP = univ_pars.get_value("inel_kapAl_xsec_lowP")
        self.inel_kapAl_xsec_highP = univ_pars.get_value("inel_kapAl_xsec_highP")
        self.inel_kamAl_xsec_lowP = univ_pars.get_value("inel_kamAl_xsec_lowP")
        self.inel_kamAl_xsec_highP = univ_pars.get_value("inel_kamAl_xsec_highP")

    def _covered(self, chain: InteractionChainData, volume: int) -> list[bool]:
        ptv = chain.ptv_info[volume]
        covered = any(
            amount > _LOW_VALUE and _is_meson(pdg) for pdg, amount, _ in _crossings(ptv)
        )
        return [covered]

    def _cross_section(self, pdg: int, mom: float) -> float:
        if abs(pdg) == 211:
            xsec = self.inel_piAl_xsec
        elif pdg == 321 and mom < _MOMENTUM_SPLIT:
            xsec = self.inel_kapAl_xsec_lowP
        elif pdg == 321 and mom > _MOMENTUM_SPLIT:
            xsec = self.inel_kapAl_xsec_highP
        elif pdg == -321 and mom < _MOMENTUM_SPLIT:
            xsec = self.inel_kamAl_xsec_lowP
        elif pdg == -321 and mom > _MOMENTUM_SPLIT:
            xsec = self.inel_kamAl_xsec_highP
        else:
            xsec = 0.0
        return _single_precision(xsec)

    def _weight(self, chain: InteractionChainData, volume: int) -> float:
        ptv = chain.ptv_info[volume]
        weight = 1.0
        for pdg, amount, mom in _crossings(ptv):
            if amount < _LOW_VALUE or not _is_meson(pdg):
                continue
            weight *= _survival(amount, self._cross_section(pdg, mom))
        return weight


class AbsorptionICReweighter(_VolumeAbsorptionReweighter):
    """Pion and kaon absorption in the inner conductors of the horns."""

    def can_reweight(self, chain: InteractionChainData) -> list[bool]:
        """A single flag: whether a pion or kaon crossed material in the horns."""
        return self._covered(chain, IC)

    def calculate_weight(self, chain: InteractionChainData) -> float:
        return self._weight(chain, IC)


class AbsorptionDPIPReweighter(_VolumeAbsorptionReweighter):
    """Pion and kaon absorption in the decay pipe walls."""

    def can_reweight(self, chain: InteractionChainData) -> list[bool]:
        """A single flag: whether a pion or kaon crossed the decay pipe walls."""
        return self._covered(chain, DPIP)

    def calculate_weight(self, chain: InteractionChainData) -> float:
        return self._weight(chain, DPIP)


class AbsorptionDVOLReweighter(_VolumeAbsorptionReweighter):
    """Pion and kaon absorption in the decay volume gas."""

    def can_reweight(self, chain: InteractionChainData) -> list[bool]:
        """A single flag: whether a pion or kaon crossed the decay volume gas."""
        return self._covered(chain, DVOL)

    def calculate_weight(self, chain: InteractionChainData) -> float:
        return self._weight(chain, DVOL)


class NucleonAbsorptionOutOfTargetReweighter:
    """Proton and neutron absorption in all volumes outside the target."""

    def __init__(
        self, universe: int, cv_pars: ParameterTable, univ_pars: ParameterTable
    ) -> None:
        self.universe = universe
        self.cv_pars = cv_pars
        self.univ_pars = univ_pars
        self.inel_piAl_xsec = univ_pars.get_value("inel_piAl_xsec")

    def can_reweight(self, chain: InteractionChainData) -> list[bool]:
        covered = any(
            amount > _LOW_VALUE and pdg in _NUCLEONS
            for pdg, amount, _ in _all_crossings(chain)
        )
        return [covered]

    def calculate_weight(self, chain: InteractionChainData) -> float:
        weight = 1.0
        for pdg, amount, _ in _all_crossings(chain):
            if amount < _LOW_VALUE or pdg not in _NUCLEONS:
                continue
            weight *= _survival(amount, self.inel_piAl_xsec)
        return weight


def _is_other_hadron(pdg: int) -> bool:
    return not _is_meson(pdg) and pdg not in _NUCLEONS and abs(pdg) > 99


class OtherAbsorptionOutOfTargetReweighter:
    """Absorption of any other hadron in all volumes outside the target."""

    def __init__(
        self, universe: int, cv_pars: ParameterTable, univ_pars: ParameterTable
    ) -> None:
        self.universe = universe
        self.cv_pars = cv_pars
        self.univ_pars = univ_pars
        self.inel_kapAl_xsec_lowP = univ_pars.get_value("inel_kapAl_xsec_lowP")
        self.inel_kapAl_xsec_highP = univ_pars.get_value("inel_kapAl_xsec_highP")

    def can_reweight(self, chain: InteractionChainData) -> list[bool]:
        covered = any(
            amount > _LOW_VALUE and _is_other_hadron(pdg)
            for pdg, amount, _ in _all_crossings(chain)
        )
        return [covered]

    def calculate_weight(self, chain: InteractionChainData) -> float:
        weight = 1.0
        for pdg, amount, mom in _all_crossings(chain):
            if amount < _LOW_VALUE or not _is_other_hadron(pdg):
                continue
            if mom < _MOMENTUM_SPLIT:
                xsec = self.inel_kapAl_xsec_lowP
            else:
                xsec = self.inel_kapAl_xsec_highP
            weight *= _survival(amount, xsec)
        return weight


class OtherReweighter:
    """A flat scaling for any inelastic interaction no other reweighter handles."""

    def __init__(
        self, universe: int, cv_pars: ParameterTable, univ_pars: ParameterTable
    ) -> None:
        self.universe = universe
        self.cv_pars = cv_pars
        self.univ_pars = univ_pars
        self.inel_A_scaling = univ_pars.get_value("inel_A_scaling")

    def can_reweight(self, interaction: InteractionData) -> bool:
        return 0 <= interaction.proc.find("Inelastic") < 100

    def calculate_weight(self, interaction: InteractionData) -> float:
        return self.inel_A_scaling