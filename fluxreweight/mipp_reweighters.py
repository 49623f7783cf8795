"""Reweighting of hadrons leaving the target with MIPP NuMI yield data."""

from __future__ import annotations

import logging

from .chain import InteractionChainData, TargetData
from .mipp import MIPPNumiMC, MIPPNumiYieldsBins
from .parameters import ParameterTable

logger = logging.getLogger(__name__)

_LOW_VALUE = 1.0e-18
_KAONS = frozenset({321, -321, 130, 310})
_NEUTRAL_KAONS = frozenset({130, 310})


def _covered_nodes(chain: InteractionChainData) -> list[bool]:
    """Mark every interaction before the target-exit hadron as covered."""
    idx = chain.tar_info.idx_ancestry
    return [index < idx for index in range(len(chain.interaction_chain))]


def _bin_data(
    cv_pars: ParameterTable,
    univ_pars: ParameterTable,
    label: str,
    index: int,
    scale: float = 1.0,
) -> tuple[float, float, float]:
    """Central, systematic and statistical values of one data bin."""
    sys_name = f"MIPP_NuMI_{label}_sys_{index}"
    stats_name = f"MIPP_NuMI_{label}_stats_{index}"
    cv = cv_pars.get_value(sys_name) / scale
    sys = univ_pars.get_value(sys_name) / scale
    sta = univ_pars.get_value(stats_name) / scale
    return cv, sys, sta


class MIPPNumiPionYieldsReweighter:
    """Weights for charged pions leaving the target, from MIPP NuMI pion yields."""

    def __init__(
        self,
        universe: int,
        cv_pars: ParameterTable,
        univ_pars: ParameterTable,
        bins: MIPPNumiYieldsBins,
        mc: MIPPNumiMC,
    ) -> None:
        self.universe = universe
        self.cv_pars = cv_pars
        self.univ_pars = univ_pars
        self.bins = bins
        self.mc = mc
        self.prt_no_inter = univ_pars.get_value("prt_no_interacting")
        scale = 1.0 - self.prt_no_inter
        self._data = {
            211: self._yields("pip", bins.n_bins_pip(), scale),
            -211: self._yields("pim", bins.n_bins_pim(), scale),
        }

    def _yields(self, label: str, nbins: int, scale: float) -> list[float]:
        values = []
        for index in range(nbins):
            cv, sys, sta = _bin_data(self.cv_pars, self.univ_pars, label, index, scale)
            values.append(sys + sta - cv)
        return values

    def can_reweight(self, chain: InteractionChainData) -> list[bool]:
        """Which interactions of the chain this reweighter covers."""
        tar = chain.tar_info
        nothing = [False] * len(chain.interaction_chain)
        if tar.pdg not in (211, -211):
            return nothing
        if self.bins.bin_id(tar.pz, tar.pt, tar.pdg) < 0:
            return nothing
        return _covered_nodes(chain)

    def calculate_weight(self, chain: InteractionChainData) -> float:
        tar = chain.tar_info
        bin_id = self.bins.bin_id(tar.pz, tar.pt, tar.pdg)
        if bin_id < 0:
            logger.warning("no MIPP bin for pz=%g pt=%g pdg=%d", tar.pz, tar.pt, tar.pdg)
            return 1.0
        mc_value = self.mc.mc_value(tar.pz, tar.pt, tar.pdg)
        if mc_value < _LOW_VALUE:
            logger.warning("low MC value: %g", mc_value)
            return 1.0
        data = self._data.get(tar.pdg)
        weight = data[bin_id] / mc_value if data is not None else 1.0
        if weight < 0:
            logger.warning(
                "negative MIPP pion weight in universe %d: pz=%g pt=%g pdg=%d",
                self.universe,
                tar.pz,
                tar.pt,
                tar.pdg,
            )
        return weight


class MIPPNumiKaonYieldsReweighter:
    """Weights for kaons leaving the target, from MIPP NuMI kaon-to-pion ratios."""

    def __init__(
        self,
        universe: int,
        cv_pars: ParameterTable,
        univ_pars: ParameterTable,
        bins: MIPPNumiYieldsBins,
        mc: MIPPNumiMC,
    ) -> None:
        self.universe = universe
        self.cv_pars = cv_pars
        self.univ_pars = univ_pars
        self.bins = bins
        self.mc = mc
        self.prt_no_inter = univ_pars.get_value("prt_no_interacting")
        scale = 1.0 - self.prt_no_inter
        self._pip = [
            _bin_data(cv_pars, univ_pars, "pip", i, scale) for i in range(bins.n_bins_pip())
        ]
        self._pim = [
            _bin_data(cv_pars, univ_pars, "pim", i, scale) for i in range(bins.n_bins_pim())
        ]
        nk = bins.n_bins_k()
        self._kap_pip = [_bin_data(cv_pars, univ_pars, "kap_pip", i) for i in range(nk)]
        self._kam_pim = [_bin_data(cv_pars, univ_pars, "kam_pim", i) for i in range(nk)]
        aux = univ_pars.get_value("aux_parameter")
        self.aux_par = 1.0 if aux < 1.0e-15 else aux

    def _bins_for(self, tar: TargetData) -> tuple[int, int, int] | None:
        """Kaon, pi+ and pi- bins for the target hadron, or None if not covered."""
        if tar.pdg not in _KAONS:
            return None
        if tar.pz < 20.0 or tar.pz > 80.0 or tar.pt > 2.0:
            return None
        bin_id = self.bins.bin_id(tar.pz, tar.pt, tar.pdg)
        if bin_id < 0:
            return None
        pip_bin = self.bins.bin_id(tar.pz, tar.pt, 211)
        pim_bin = self.bins.bin_id(tar.pz, tar.pt, -211)
        if tar.pdg == 321 and pip_bin < 0:
            return None
        if tar.pdg == -321 and pim_bin < 0:
            return None
        if tar.pdg in _NEUTRAL_KAONS and (pip_bin < 0 or pim_bin < 0):
            return None
        return bin_id, pip_bin, pim_bin

    def can_reweight(self, chain: InteractionChainData) -> list[bool]:
        """Which interactions of the chain this reweighter covers."""
        if self._bins_for(chain.tar_info) is None:
            return [False] * len(chain.interaction_chain)
        return _covered_nodes(chain)

    @staticmethod
    def _product(
        pion: tuple[float, float, float], ratio: tuple[float, float, float]
    ) -> tuple[float, float, float, float]:
        cv = pion[0] * ratio[0]
        sys = pion[1] * ratio[1]
        sta = pion[2] * ratio[2]
        return cv, sys, sta, sys + sta - cv

    def calculate_weight(self, chain: InteractionChainData) -> float:
        tar = chain.tar_info
        found = self._bins_for(tar)
        if found is None:
            return self.aux_par
        bin_id, pip_bin, pim_bin = found

        mc_value = self.mc.mc_value(tar.pz, tar.pt, tar.pdg)
        if mc_value < _LOW_VALUE:
            return self.aux_par

        if tar.pdg == 321:
            cv, sys, sta, data = self._product(self._pip[pip_bin], self._kap_pip[bin_id])
        elif tar.pdg == -321:
            cv, sys, sta, data = self._product(self._pim[pim_bin], self._kam_pim[bin_id])
        else:
            *_, plus = self._product(self._pip[pip_bin], self._kap_pip[bin_id])
            cv, sys, sta, minus = self._product(self._pim[pim_bin], self._kam_pim[bin_id])
            data = 0.25 * (3.0 * minus + plus)

        if min(cv, sys, sta, data) < _LOW_VALUE:
            return 1.0

        weight = data / mc_value
        if weight < _LOW_VALUE:
            return self.aux_par
        return weight