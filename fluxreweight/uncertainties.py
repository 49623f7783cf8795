"""Central values and uncertainties of the parameters, and random universes drawn from them."""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from collections.abc import Iterator
from os import PathLike

import numpy as np

from .parameters import ParameterTable

logger = logging.getLogger(__name__)

# Thin-target systematics whose bins move together (100% bin-to-bin correlation).
_FULLY_CORRELATED_PREFIXES = (
    "ThinTarget_pC_pip_sys",
    "ThinTarget_pC_pim_sys",
    "ThinTargetLowxF_pC_kap_sys",
    "ThinTargetLowxF_pC_kam_sys",
    "ThinTarget_pC_p_sys",
    "ThinTarget_pC_n_sys",
)

_SEED_MODULUS = 2**32


def _numbers(text: str | None) -> Iterator[float]:
    """Yield the leading whitespace-separated numbers of ``text``."""
    for token in (text or "").split():
        try:
            yield float(token)
        except ValueError:
            return


def _section(root: ET.Element, path: str) -> ET.Element:
    first, *rest = path.split(".")
    if root.tag != first:
        raise ValueError(f"missing section {path!r}")
    node = root
    for part in rest:
        child = node.find(part)
        if child is None:
            raise ValueError(f"missing section {path!r}")
        node = child
    return node


def _field(node: ET.Element, name: str) -> str:
    child = node.find(name)
    if child is None or child.text is None:
        raise ValueError(f"entry {node.tag!r} has no {name!r}")
    return child.text.strip()


def _rng_seed(seed: int) -> int | None:
    """Map a seed to the generator; a seed of zero draws fresh entropy."""
    wrapped = seed % _SEED_MODULUS
    return None if wrapped == 0 else wrapped


def _bin_index(name: str) -> int:
    return int(name.rsplit("_", 1)[-1])


class CentralValuesAndUncertainties:
    """Holds central values, their errors and covariances, and draws universes."""

    def __init__(self) -> None:
        self._uncorrelated = ParameterTable()
        self._errors: dict[str, float] = {}
        self._correlated: list[tuple[ParameterTable, np.ndarray]] = []
        self.base_seed = 0

    def read_xml(self, path: str | PathLike[str]) -> None:
        """Load uncorrelated, listed and correlated parameters from an XML file."""
        root = ET.parse(path).getroot()

        for entry in _section(root, "pars.uncorrelated"):
            cv = float(_field(entry, "cv"))
            err = float(_field(entry, "err"))
            self.add_uncorrelated(entry.tag, cv, err)

        for entry in _section(root, "pars.uncorrelated_list"):
            cvs = list(_numbers(_field(entry, "cvs")))
            errs = list(_numbers(_field(entry, "errs")))
            if len(errs) > len(cvs):
                raise ValueError(f"entry {entry.tag!r} has more errors than values")
            for index, (cv, err) in enumerate(zip(cvs, errs)):
                self.add_uncorrelated(f"{entry.tag}_{index}", cv, err)

        for entry in _section(root, "pars.correlated"):
            cvs = list(_numbers(_field(entry, "cvs")))
            elements = list(_numbers(_field(entry, "covmx")))
            n = len(cvs)
            if len(elements) > n * n:
                raise ValueError(f"entry {entry.tag!r} has too many covariance elements")
            table = ParameterTable(
                {f"{entry.tag}_{index}": cv for index, cv in enumerate(cvs)}
            )
            flat = np.zeros(n * n)
            flat[: len(elements)] = elements
            self.add_correlated(table, flat.reshape(n, n))

        # Auxiliary parameter: central value 1 with a 100% error.
        self.add_uncorrelated("aux_parameter", 1.0, 1.0)

    def add_uncorrelated(self, name: str, value: float, uncertainty: float) -> None:
        self._uncorrelated.set_parameter(name, value)
        self._errors[name] = float(uncertainty)

    def add_correlated(self, table: ParameterTable, covariance) -> None:
        """Add a group of parameters that vary together with ``covariance``."""
        matrix = np.asarray(covariance, dtype=float)
        if matrix.ndim != 2 or matrix.shape[0] != matrix.shape[1]:
            raise ValueError("covariance must be a square matrix")
        self._correlated.append((table, matrix))

    def set_base_seed(self, seed: int) -> None:
        self.base_seed = seed

    def pars_for_universe(self, universe: int) -> ParameterTable:
        """Draw the parameters of one universe; universe -1 is the central value."""
        cvfactor = 0.0 if universe == -1 else 1.0
        seed = self.base_seed + universe
        logger.info(
            "The current seed is: %d  Base Seed is: %d Universe is: %d",
            seed,
            self.base_seed,
            universe,
        )
        rng = np.random.default_rng(_rng_seed(seed))
        table = ParameterTable()

        group_sigmas = [rng.standard_normal() for _ in _FULLY_CORRELATED_PREFIXES]
        for name, value in self._uncorrelated.items():
            sigma = rng.standard_normal()
            for prefix, group_sigma in zip(_FULLY_CORRELATED_PREFIXES, group_sigmas):
                if 0 <= name.find(prefix) < 10:
                    sigma = group_sigma
            table.set_parameter(name, value + cvfactor * sigma * self._errors[name])

        for cv_table, covariance in self._correlated:
            n = covariance.shape[0]
            try:
                lower = np.linalg.cholesky(covariance) if n else None
            except np.linalg.LinAlgError:
                lower = None
            sigmas = cvfactor * rng.standard_normal(n)
            if lower is None:
                continue
            shift = lower @ sigmas
            for name, value in cv_table.items():
                table.set_parameter(name, value + shift[_bin_index(name)])

        return table

    def cv_pars(self) -> ParameterTable:
        """All central values, uncorrelated and correlated."""
        table = ParameterTable()
        for name, value in self._uncorrelated.items():
            table.set_parameter(name, value)
        for cv_table, _ in self._correlated:
            for name, value in cv_table.items():
                table.set_parameter(name, value)
        return table