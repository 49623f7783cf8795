"""Neutrino energy and weight at a point-like detector."""

from __future__ import annotations

import logging
import math
from typing import Sequence

from .chain import Dk2NuEntry
from .particles import particle_mass

logger = logging.getLogger(__name__)

# Detector radius in cm.
RDET = 100.0
_LIKELY_ION = 100_000_000


class DecayKinematicsError(ValueError):
    """Raised when a decay cannot be weighted to the detector."""


def _dot(a: Sequence[float], b: Sequence[float]) -> float:
    return sum(x * y for x, y in zip(a, b))


def _norm(a: Sequence[float]) -> float:
    return math.sqrt(_dot(a, a))


class NuWeight:
    """Computes the energy and weight of a neutrino pointed at a detector position (cm)."""

    def __init__(self, position: Sequence[float]) -> None:
        self.xdet, self.ydet, self.zdet = (float(c) for c in position[:3])
        self.enu = -1.0
        self.wgt = -1.0

    def calculate(self, entry: Dk2NuEntry) -> tuple[float, float]:
        """Return and store ``(enu, wgt)`` for a neutrino aimed at the detector."""
        if len(entry.ancestors) < 2:
            raise DecayKinematicsError("the ancestry has no parent of the neutrino")
        pdg = entry.ancestors[-2].pdg
        if pdg > _LIKELY_ION or pdg < -_LIKELY_ION:
            raise DecayKinematicsError(f"ions are not handled, pdg: {pdg}")
        mpar = particle_mass(pdg)

        d = entry.decay
        parent_p = (d.pdpx, d.pdpy, d.pdpz)
        to_det = (self.xdet - d.vx, self.ydet - d.vy, self.zdet - d.vz)

        ppar = _norm(parent_p)
        epar = math.sqrt(ppar**2 + mpar**2)
        gamma = epar / mpar
        beta = math.sqrt(gamma**2 - 1.0) / gamma

        rr = _norm(to_det)
        if ppar * rr == 0:
            raise DecayKinematicsError("the decay direction is undefined")
        cos_theta = _dot(parent_p, to_det) / (ppar * rr)
        if cos_theta > 1 or cos_theta < -1:
            raise DecayKinematicsError(f"cosine of neutrino not allowed: {cos_theta}")

        mm = 1.0 / (gamma * (1.0 - beta * cos_theta))
        angdet = RDET**2 / rr**2 / 4.0
        enu = mm * d.necm
        wgt = angdet * mm**2

        if pdg in (13, -13):
            wgt *= self._muon_polarization(entry, mpar, gamma, epar, enu, to_det, rr)

        self.enu = enu
        self.wgt = wgt
        return enu, wgt

    @staticmethod
    def _muon_polarization(
        entry: Dk2NuEntry,
        mpar: float,
        gamma: float,
        epar: float,
        enu: float,
        to_det: Sequence[float],
        rr: float,
    ) -> float:
        d = entry.decay

        # Boost the new neutrino to the muon decay rest frame.
        vbeta = [d.pdpx / epar, d.pdpy / epar, d.pdpz / epar]
        p_nu = [c * enu / rr for c in to_det]
        partial = gamma * _dot(vbeta, p_nu)
        partial = enu - partial / (gamma + 1.0)
        p_dcm_nu = [p - b * gamma * partial for p, b in zip(p_nu, vbeta)]
        p_dcm_nu_mag = _norm(p_dcm_nu)

        # Boost the muon's parent to the muon production rest frame.
        gamma = d.ppenergy / mpar
        vbeta = [
            d.ppdxdz * d.pppz / d.ppenergy,
            d.ppdydz * d.pppz / d.ppenergy,
            d.pppz / d.ppenergy,
        ]
        mupar = (d.muparpx, d.muparpy, d.muparpz)
        partial = gamma * _dot(vbeta, mupar)
        partial = d.mupare - partial / (gamma + 1.0)
        p_pcm_mp = [p - b * gamma * partial for p, b in zip(mupar, vbeta)]
        p_pcm_mp_mag = _norm(p_pcm_mp)

        # Zero when the muon parent's momentum is not recorded.
        if p_pcm_mp_mag == 0.0:
            return 1.0

        costh = _dot(p_dcm_nu, p_pcm_mp) / (p_dcm_nu_mag * p_pcm_mp_mag)
        costh = max(-1.0, min(1.0, costh))

        if d.ntype in (12, -12):
            return 1.0 - costh
        if d.ntype in (14, -14):
            xnu = 2.0 * d.necm / particle_mass(13)
            return ((3.0 - 2.0 * xnu) - (1.0 - 2.0 * xnu) * costh) / (3.0 - 2.0 * xnu)
        logger.warning("bad neutrino type %d", d.ntype)
        return 1.0