"""Hadron-production reweighting of simulated neutrino fluxes: parameters and
universes, interaction chains, MIPP yield, absorption and inelastic
reweighters, per-universe drivers, and detector neutrino weights."""

__version__ = "0.1.0"

__all__ = [
    "parameters",
    "particles",
    "interaction",
    "chain",
    "uncertainties",
    "mipp",
    "mipp_reweighters",
    "nuweight",
    "absorption",
    "driver",
]