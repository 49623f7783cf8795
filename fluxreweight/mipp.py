"""MIPP NuMI target yield binning and the simulated yields in those bins."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from dataclasses import dataclass
from os import PathLike

_KAON_CODES = frozenset({321, -321, 130, 310})
_MC_CODES = {211: "pip", -211: "pim", 321: "kap", -321: "kam", 130: "k0l", 310: "k0s"}


@dataclass(frozen=True)
class _Bin:
    pz_min: float
    pz_max: float
    pt_min: float
    pt_max: float

    def contains(self, pz: float, pt: float) -> bool:
        return self.pz_min < pz < self.pz_max and self.pt_min < pt < self.pt_max


def _pair(text: str | None) -> tuple[float, float]:
    tokens = (text or "").split()
    if len(tokens) < 2:
        raise ValueError(f"expected a range of two numbers, got {text!r}")
    return float(tokens[0]), float(tokens[1])


def _entries(path: str | PathLike[str], section: str) -> list[ET.Element]:
    root = ET.parse(path).getroot()
    top, child = section.split(".")
    node = root.find(child) if root.tag == top else None
    if node is None:
        raise ValueError(f"missing section {section!r}")
    return list(node)


def _text(entry: ET.Element, name: str) -> str:
    child = entry.find(name)
    if child is None or child.text is None:
        raise ValueError(f"entry {entry.tag!r} has no {name!r}")
    return child.text


def _read_bin(entry: ET.Element) -> _Bin:
    pz_min, pz_max = _pair(_text(entry, "pzrange"))
    pt_min, pt_max = _pair(_text(entry, "ptrange"))
    return _Bin(pz_min, pz_max, pt_min, pt_max)


def _last_match(bins: list[_Bin], pz: float, pt: float) -> int:
    found = -1
    for index, bin_ in enumerate(bins):
        if bin_.contains(pz, pt):
            found = index
    return found


class MIPPNumiYieldsBins:
    """The (pz, pt) bins of the MIPP NuMI target yield measurements."""

    def __init__(self) -> None:
        self._pip: list[_Bin] = []
        self._pim: list[_Bin] = []
        self._k_pi: list[_Bin] = []

    def load_pip(self, path: str | PathLike[str]) -> None:
        self._pip.extend(_read_bin(e) for e in _entries(path, "bins.MIPP_Numi_pip"))

    def load_pim(self, path: str | PathLike[str]) -> None:
        self._pim.extend(_read_bin(e) for e in _entries(path, "bins.MIPP_Numi_pim"))

    def load_k_pi(self, path: str | PathLike[str]) -> None:
        self._k_pi.extend(_read_bin(e) for e in _entries(path, "bins.MIPP_Numi_k_pi"))

    def bin_id(self, pz: float, pt: float, pdg: int) -> int:
        """Index of the bin holding (pz, pt) for this particle, or -1."""
        if pdg == 211:
            return _last_match(self._pip, pz, pt)
        if pdg == -211:
            return _last_match(self._pim, pz, pt)
        if pdg in _KAON_CODES:
            return _last_match(self._k_pi, pz, pt)
        return -1

    def n_bins_pip(self) -> int:
        if not self._pip:
            raise RuntimeError("MIPPNumiYieldsBins has not been initialized")
        return len(self._pip)

    def n_bins_pim(self) -> int:
        if not self._pip:
            raise RuntimeError("MIPPNumiYieldsBins has not been initialized")
        return len(self._pim)

    def n_bins_k(self) -> int:
        if not self._k_pi:
            raise RuntimeError("MIPPNumiYieldsBins has not been initialized")
        return len(self._k_pi)


class MIPPNumiMC:
    """Simulated target yields per MIPP bin, converted to yields per interaction."""

    SPECIES = ("pip", "pim", "kap", "kam", "k0l", "k0s")
    # Fraction of protons not interacting in the target or budal monitor (LE, FTFP).
    PROTON_NO_INTERACTING = 0.13288294

    def __init__(self) -> None:
        self.proton_no_interacting = self.PROTON_NO_INTERACTING
        self._values: dict[str, list[float]] = {s: [] for s in self.SPECIES}
        self._bins: list[_Bin] = []
        self._ranges_filled = False

    def load(self, species: str, path: str | PathLike[str]) -> None:
        """Load the simulated yields of one species; the first load sets the binning."""
        if species not in self._values:
            raise ValueError(f"unknown species {species!r}")
        for entry in _entries(path, f"mcbin.MIPPNuMI_MC_{species}"):
            tokens = _text(entry, "cvmc").split()
            if not tokens:
                raise ValueError(f"entry {entry.tag!r} has an empty 'cvmc'")
            self._values[species].append(float(tokens[0]))
            bin_ = _read_bin(entry)
            if not self._ranges_filled:
                self._bins.append(bin_)
        self._ranges_filled = True

    def mc_value(self, pz: float, pt: float, pdg: int) -> float:
        """Simulated yield per interaction in the bin holding (pz, pt).

        Returns -1 for particles without simulated yields; a point outside every
        bin gives -1 scaled like a yield.
        """
        species = _MC_CODES.get(pdg)
        if species is None:
            return -1.0
        value = -1.0
        for cv, bin_ in zip(self._values[species], self._bins):
            if bin_.contains(pz, pt):
                value = cv
        return value / (1.0 - self.proton_no_interacting)