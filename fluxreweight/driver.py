"""Combining every reweighter into per-universe neutrino weights."""

from __future__ import annotations

import logging
import math
import xml.etree.ElementTree as ET
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from os import PathLike
from typing import Protocol

from .absorption import (
    AbsorptionDPIPReweighter,
    AbsorptionDVOLReweighter,
    AbsorptionICReweighter,
    NucleonAbsorptionOutOfTargetReweighter,
    OtherAbsorptionOutOfTargetReweighter,
    OtherReweighter,
)
from .chain import InteractionChainData
from .interaction import InteractionData
from .mipp import MIPPNumiMC, MIPPNumiYieldsBins
from .mipp_reweighters import MIPPNumiKaonYieldsReweighter, MIPPNumiPionYieldsReweighter
from .parameters import ParameterTable
from .uncertainties import CentralValuesAndUncertainties

logger = logging.getLogger(__name__)

# Thin-target reweighters, in the order they claim interactions.
THIN_TARGET_COMPONENTS = (
    "ThinTargetpCPion",
    "ThinTargetpCKaon",
    "ThinTargetnCPion",
    "ThinTargetpCNucleon",
    "ThinTargetMesonIncident",
    "ThinTargetnucleonA",
)

COMPONENTS = (
    "MIPPNumiPionYields",
    "MIPPNumiKaonYields",
    "TargetAttenuation",
    "AbsorptionIC",
    "AbsorptionDPIP",
    "AbsorptionDVOL",
    "AbsorptionNucleon",
    "AbsorptionOther",
    "TotalAbsorption",
    *THIN_TARGET_COMPONENTS,
    "Other",
)

CV_UNIVERSE = -1


class InteractionReweighter(Protocol):
    def can_reweight(self, interaction: InteractionData) -> bool: ...

    def calculate_weight(self, interaction: InteractionData) -> float: ...


class ChainReweighter(Protocol):
    def can_reweight(self, chain: InteractionChainData) -> list[bool]: ...

    def calculate_weight(self, chain: InteractionChainData) -> float: ...


InteractionReweighterFactory = Callable[
    [int, ParameterTable, ParameterTable], Mapping[str, InteractionReweighter]
]
ChainReweighterFactory = Callable[[int, ParameterTable, ParameterTable], ChainReweighter]


@dataclass(frozen=True)
class Settings:
    """Options read from the ``inputs.Settings`` section of an input file."""

    mipp_corr_option: str
    n_universes: int
    reweighters: str

    @property
    def do_mipp_numi(self) -> bool:
        return self.reweighters == "MIPPNuMIOn"


def _setting(section: ET.Element, name: str) -> str:
    child = section.find(name)
    if child is None or child.text is None:
        raise ValueError(f"missing setting {name!r}")
    return child.text.strip()


def read_settings(path: str | PathLike[str]) -> Settings:
    """Read the reweighting options from an XML input file."""
    root = ET.parse(path).getroot()
    section = root.find("Settings") if root.tag == "inputs" else None
    if section is None:
        raise ValueError("missing section 'inputs.Settings'")
    n_text = _setting(section, "NumberOfUniverses")
    try:
        n_universes = int(n_text)
    except ValueError:
        raise ValueError(f"NumberOfUniverses is not an integer: {n_text!r}") from None
    return Settings(
        mipp_corr_option=_setting(section, "MIPPCorrOption"),
        n_universes=n_universes,
        reweighters=_setting(section, "Reweighters"),
    )


def _claim_interactions(
    reweighter: InteractionReweighter,
    chain: InteractionChainData,
    nodes: list[bool],
) -> float:
    """Reweight every unclaimed interaction this reweighter handles, last first."""
    weight = 1.0
    for index in reversed(range(len(nodes))):
        if nodes[index]:
            continue
        interaction = chain.interaction_chain[index]
        if reweighter.can_reweight(interaction):
            weight *= reweighter.calculate_weight(interaction)
            nodes[index] = True
    return weight


def _chain_weight(reweighter: ChainReweighter, chain: InteractionChainData) -> float:
    nodes = reweighter.can_reweight(chain)
    if nodes and nodes[0]:
        return reweighter.calculate_weight(chain)
    return 1.0


class ReweightDriver:
    """All reweighters of one universe, applied to a chain in a fixed order.

    Thin-target reweighters and the target attenuation reweighter are supplied
    by the caller; any that are absent contribute a weight of one.
    """

    def __init__(
        self,
        universe: int,
        cv_pars: ParameterTable,
        univ_pars: ParameterTable,
        settings: Settings,
        bins: MIPPNumiYieldsBins | None = None,
        mc: MIPPNumiMC | None = None,
        thin_target: Mapping[str, InteractionReweighter] | None = None,
        target_attenuation: ChainReweighter | None = None,
    ) -> None:
        self.universe = universe
        self.cv_pars = cv_pars
        self.univ_pars = univ_pars
        self.settings = settings
        self.do_mipp_numi = settings.do_mipp_numi

        self.mipp_pion: MIPPNumiPionYieldsReweighter | None = None
        self.mipp_kaon: MIPPNumiKaonYieldsReweighter | None = None
        if self.do_mipp_numi:
            if bins is None or mc is None:
                raise ValueError("MIPP NuMI reweighting needs the MIPP bins and MC values")
            self.mipp_pion = MIPPNumiPionYieldsReweighter(universe, cv_pars, univ_pars, bins, mc)
            self.mipp_kaon = MIPPNumiKaonYieldsReweighter(universe, cv_pars, univ_pars, bins, mc)

        thin_target = dict(thin_target or {})
        unknown = set(thin_target) - set(THIN_TARGET_COMPONENTS)
        if unknown:
            raise ValueError(f"unknown thin-target reweighters: {sorted(unknown)}")
        self.thin_target = thin_target
        self.target_attenuation = target_attenuation

        self.absorption: dict[str, ChainReweighter] = {
            "AbsorptionIC": AbsorptionICReweighter(universe, cv_pars, univ_pars),
            "AbsorptionDPIP": AbsorptionDPIPReweighter(universe, cv_pars, univ_pars),
            "AbsorptionDVOL": AbsorptionDVOLReweighter(universe, cv_pars, univ_pars),
            "AbsorptionNucleon": NucleonAbsorptionOutOfTargetReweighter(
                universe, cv_pars, univ_pars
            ),
            "AbsorptionOther": OtherAbsorptionOutOfTargetReweighter(
                universe, cv_pars, univ_pars
            ),
        }
        self.other = OtherReweighter(universe, cv_pars, univ_pars)
        self.component_weights: dict[str, float] = dict.fromkeys(COMPONENTS, 1.0)

    def calculate_weight(self, chain: InteractionChainData) -> float:
        """Total weight of the chain; the parts are kept in ``component_weights``."""
        weights = dict.fromkeys(COMPONENTS, 1.0)
        total = 1.0
        nodes = [False] * len(chain.interaction_chain)

        if self.do_mipp_numi:
            assert self.mipp_pion is not None and self.mipp_kaon is not None
            nodes = list(self.mipp_pion.can_reweight(chain))
            has_mipp = any(nodes)
            if has_mipp:
                weights["MIPPNumiPionYields"] = self.mipp_pion.calculate_weight(chain)
            total *= weights["MIPPNumiPionYields"]
            if not has_mipp:
                nodes = list(self.mipp_kaon.can_reweight(chain))
                if any(nodes):
                    weights["MIPPNumiKaonYields"] = self.mipp_kaon.calculate_weight(chain)
                total *= weights["MIPPNumiKaonYields"]

        for name in THIN_TARGET_COMPONENTS:
            reweighter = self.thin_target.get(name)
            if reweighter is not None:
                weights[name] = _claim_interactions(reweighter, chain, nodes)
            total *= weights[name]

        weights["Other"] = _claim_interactions(self.other, chain, nodes)
        total *= weights["Other"]

        if self.target_attenuation is not None:
            weights["TargetAttenuation"] = _chain_weight(self.target_attenuation, chain)
        total *= weights["TargetAttenuation"]

        total_abs = 1.0
        for name, reweighter in self.absorption.items():
            weights[name] = _chain_weight(reweighter, chain)
            total *= weights[name]
            total_abs *= weights[name]
        weights["TotalAbsorption"] = total_abs

        self.component_weights = weights
        if math.isnan(total):
            logger.warning("NaN total weight in universe %d", self.universe)
            return 1.0
        return total


class UniverseReweighter:
    """Weights of a chain in every random universe and in the central value."""

    def __init__(
        self,
        settings: Settings,
        uncertainties: CentralValuesAndUncertainties,
        bins: MIPPNumiYieldsBins | None = None,
        mc: MIPPNumiMC | None = None,
        base_universe: int = 0,
        thin_target: InteractionReweighterFactory | None = None,
        target_attenuation: ChainReweighterFactory | None = None,
    ) -> None:
        self.settings = settings
        self.base_universe = base_universe
        cv_pars = uncertainties.cv_pars()

        def build(universe: int, univ_pars: ParameterTable) -> ReweightDriver:
            return ReweightDriver(
                universe,
                cv_pars,
                univ_pars,
                settings,
                bins,
                mc,
                thin_target(universe, cv_pars, univ_pars) if thin_target else None,
                target_attenuation(universe, cv_pars, univ_pars)
                if target_attenuation
                else None,
            )

        logger.info("Initializing reweight drivers for %d universes", settings.n_universes)
        self.univ_pars: list[ParameterTable] = []
        self.drivers: list[ReweightDriver] = []
        for index in range(settings.n_universes):
            pars = uncertainties.pars_for_universe(index + base_universe)
            self.univ_pars.append(pars)
            self.drivers.append(build(index, pars))

        cv_univ_pars = uncertainties.pars_for_universe(CV_UNIVERSE)
        self.univ_pars.append(cv_univ_pars)
        self.cv_driver = build(CV_UNIVERSE, cv_univ_pars)

        self._weights = [1.0] * settings.n_universes
        self._cv_weight = 1.0
        self._components: dict[str, list[float]] = {}

    def calculate_weights(self, chain: InteractionChainData) -> None:
        """Weight the chain in every universe and in the central value."""
        components: dict[str, list[float]] = {name: [] for name in COMPONENTS}
        for index, driver in enumerate(self.drivers):
            self._weights[index] = driver.calculate_weight(chain)
            for name in COMPONENTS:
                components[name].append(driver.component_weights[name])
        self._components = components
        self._cv_weight = self.cv_driver.calculate_weight(chain)

    def weights(self, name: str) -> list[float]:
        """Per-universe weights of one component, empty if it is unknown."""
        return list(self._components.get(name, []))

    def total_weights(self) -> list[float]:
        return list(self._weights)

    def cv_weight(self) -> float:
        return self._cv_weight

    def n_universes(self) -> int:
        return self.settings.n_universes