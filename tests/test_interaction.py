import math

import pytest

from fluxreweight.interaction import InteractionData, ParticlesThroughVolumesData
from fluxreweight.particles import UnknownParticle, particle_mass


def make(inc, prod, inc_pdg=2212, prod_pdg=211):
    return InteractionData.from_momenta(
        3, inc, inc_pdg, prod, prod_pdg, "TGT1", "hadronInelastic", (1.0, 2.0, 3.0)
    )


def test_collinear_production():
    inter = make((0.0, 0.0, 120.0), (0.0, 0.0, 30.0))
    assert inter.theta == pytest.approx(0.0)
    assert inter.pt == pytest.approx(0.0)
    assert inter.pz == pytest.approx(30.0)
    assert inter.prod_p == pytest.approx(30.0)
    assert inter.inc_p == pytest.approx(120.0)


def test_perpendicular_production():
    inter = make((0.0, 0.0, 10.0), (3.0, 0.0, 0.0))
    assert inter.theta == pytest.approx(math.pi / 2)
    assert inter.pt == pytest.approx(3.0)
    assert inter.pz == pytest.approx(0.0, abs=1e-12)


def test_energy_mass_shell():
    inter = make((0.5, 0.2, 60.0), (0.3, 0.1, 12.0))
    e, p = inter.inc_p4[3], inter.inc_p
    assert e**2 - p**2 == pytest.approx(particle_mass(2212) ** 2, rel=1e-6)
    e, p = inter.prod_p4[3], inter.prod_p
    assert e**2 - p**2 == pytest.approx(particle_mass(211) ** 2, rel=1e-4)


def test_boost_consistency():
    inter = make((0.0, 0.0, 120.0), (0.1, 0.0, 10.0))
    assert inter.gammacm**2 * (1 - inter.betacm**2) == pytest.approx(1.0)
    assert 0 < inter.betacm < 1


def test_fields_copied():
    inter = make((0.0, 0.0, 120.0), (0.1, 0.0, 10.0))
    assert inter.gen == 3
    assert inter.vol == "TGT1"
    assert inter.proc == "hadronInelastic"
    assert inter.vtx == (1.0, 2.0, 3.0)
    assert inter.inc_p4[:3] == (0.0, 0.0, 120.0)
    assert inter.prod_mass == particle_mass(211)


def test_forward_has_larger_xf_than_backward_in_cm():
    fast = make((0.0, 0.0, 120.0), (0.0, 0.0, 60.0))
    slow = make((0.0, 0.0, 120.0), (0.0, 0.0, 1.0))
    assert fast.xf > slow.xf


def test_unknown_particle_rejected():
    with pytest.raises(UnknownParticle):
        make((0.0, 0.0, 1.0), (0.0, 0.0, 1.0), prod_pdg=123456)


def test_default_format():
    assert InteractionData().format() == (
        "in:    0|p3:  0.00   0.00   0.00 ||out:    0|p3:  0.00   0.00   0.00 "
        "|v3: 0.00  0.00  0.00 xF,pT:-1000.00,-1000.00\n"
    )


def test_format_includes_codes():
    text = make((0.0, 0.0, 120.0), (0.0, 0.0, 30.0)).format()
    assert text.startswith("in: 2212|p3:")
    assert "||out:  211|p3:" in text
    assert text.endswith("\n")


def test_ptv_defaults_and_format():
    ptv = ParticlesThroughVolumesData()
    assert ptv.amount_mat == (-1.0, -1.0, -1.0)
    text = ParticlesThroughVolumesData((211, 2212, 0), (1.5, 2.0, 0.0), (10.0, 120.0, 0.0), "IC").format()
    lines = text.splitlines()
    assert lines[0] == "Vol: IC"
    assert lines[1] == "pid:  211|dist, mom: 1.50,10.00"
    assert len(lines) == 4