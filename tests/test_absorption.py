import math

import pytest

from fluxreweight.absorption import (
    AbsorptionDPIPReweighter,
    AbsorptionDVOLReweighter,
    AbsorptionICReweighter,
    NucleonAbsorptionOutOfTargetReweighter,
    OtherAbsorptionOutOfTargetReweighter,
    OtherReweighter,
)
from fluxreweight.chain import InteractionChainData
from fluxreweight.interaction import InteractionData, ParticlesThroughVolumesData
from fluxreweight.parameters import NoParameterFound, ParameterTable


def _params(**overrides):
    values = {
        "inel_piAl_xsec": 0.5,
        "inel_kapAl_xsec_lowP": 0.25,
        "inel_kapAl_xsec_highP": 0.75,
        "inel_kamAl_xsec_lowP": 0.125,
        "inel_kamAl_xsec_highP": 1.5,
        "inel_A_scaling": 1.25,
    }
    values.update(overrides)
    return ParameterTable(values)


def _empty():
    return ParticlesThroughVolumesData((0, 0, 0), (0.0, 0.0, 0.0), (0.0, 0.0, 0.0), "X")


def _chain(volume_index, pdgs, amounts, moms=(5.0, 5.0, 5.0)):
    ptv = [_empty(), _empty(), _empty()]
    ptv[volume_index] = ParticlesThroughVolumesData(
        tuple(pdgs), tuple(amounts), tuple(moms), "V"
    )
    return InteractionChainData(ptv_info=ptv)


VOLUME_CLASSES = [
    (AbsorptionICReweighter, 0),
    (AbsorptionDPIPReweighter, 1),
    (AbsorptionDVOLReweighter, 2),
]


@pytest.mark.parametrize("cls,index", VOLUME_CLASSES)
def test_volume_reweighter_covers_pion_in_its_volume(cls, index):
    rw = cls(0, _params(), _params())
    chain = _chain(index, (211, 0, 0), (10.0, 0.0, 0.0))
    assert rw.can_reweight(chain) == [True]
    assert 0.0 < rw.calculate_weight(chain) < 1.0


@pytest.mark.parametrize("cls,index", VOLUME_CLASSES)
def test_volume_reweighter_ignores_other_volumes(cls, index):
    rw = cls(0, _params(), _params())
    other = (index + 1) % 3
    chain = _chain(other, (211, 321, -321), (10.0, 10.0, 10.0))
    assert rw.can_reweight(chain) == [False]
    assert rw.calculate_weight(chain) == 1.0


def test_volume_reweighter_ignores_protons_and_tiny_amounts():
    rw = AbsorptionICReweighter(0, _params(), _params())
    chain = _chain(0, (2212, 211, 13), (10.0, 1e-25, 10.0))
    assert rw.can_reweight(chain) == [False]
    assert rw.calculate_weight(chain) == 1.0


def test_pion_weight_matches_nucleon_weight_with_same_cross_section():
    pars = _params()
    pion = AbsorptionICReweighter(0, pars, pars).calculate_weight(
        _chain(0, (211, 0, 0), (20.0, 0.0, 0.0))
    )
    nucleon = NucleonAbsorptionOutOfTargetReweighter(0, pars, pars).calculate_weight(
        _chain(0, (2212, 0, 0), (20.0, 0.0, 0.0))
    )
    assert pion == pytest.approx(nucleon)


def test_weights_multiply_over_particles():
    rw = AbsorptionDPIPReweighter(0, _params(), _params())
    single_a = rw.calculate_weight(_chain(1, (211, 0, 0), (10.0, 0.0, 0.0)))
    single_b = rw.calculate_weight(_chain(1, (-211, 0, 0), (30.0, 0.0, 0.0)))
    both = rw.calculate_weight(_chain(1, (211, -211, 0), (10.0, 30.0, 0.0)))
    assert both == pytest.approx(single_a * single_b)


def test_log_weight_is_linear_in_amount():
    rw = AbsorptionDVOLReweighter(0, _params(), _params())
    w1 = rw.calculate_weight(_chain(2, (321, 0, 0), (7.0, 0.0, 0.0)))
    w2 = rw.calculate_weight(_chain(2, (321, 0, 0), (14.0, 0.0, 0.0)))
    assert -math.log(w2) == pytest.approx(2 * -math.log(w1))


def test_kaon_cross_sections_depend_on_charge_and_momentum():
    rw = AbsorptionICReweighter(0, _params(), _params())

    def weight(pdg, mom):
        return rw.calculate_weight(_chain(0, (pdg, 0, 0), (10.0, 0.0, 0.0), (mom, 0, 0)))

    # Larger cross section, stronger absorption.
    assert weight(321, 1.0) > weight(321, 3.0)
    assert weight(-321, 1.0) > weight(-321, 3.0)
    assert weight(-321, 3.0) < weight(321, 3.0)
    # ln ratio follows the cross-section ratio 0.75 / 0.25.
    assert math.log(weight(321, 3.0)) == pytest.approx(3 * math.log(weight(321, 1.0)))


def test_kaon_at_exactly_two_gev_is_not_absorbed():
    rw = AbsorptionICReweighter(0, _params(), _params())
    chain = _chain(0, (321, -321, 0), (10.0, 10.0, 0.0), (2.0, 2.0, 0.0))
    assert rw.can_reweight(chain) == [True]
    assert rw.calculate_weight(chain) == 1.0


def test_zero_cross_section_gives_unit_weight():
    pars = _params(inel_piAl_xsec=0.0)
    rw = AbsorptionICReweighter(0, pars, pars)
    assert rw.calculate_weight(_chain(0, (211, -211, 0), (5.0, 5.0, 0.0))) == 1.0


def test_missing_parameter_raises():
    pars = ParameterTable({"inel_piAl_xsec": 1.0})
    with pytest.raises(NoParameterFound):
        AbsorptionICReweighter(0, pars, pars)


def test_nucleon_reweighter_covers_every_volume():
    rw = NucleonAbsorptionOutOfTargetReweighter(0, _params(), _params())
    for index in range(3):
        chain = _chain(index, (2112, 0, 0), (10.0, 0.0, 0.0))
        assert rw.can_reweight(chain) == [True]
        assert rw.calculate_weight(chain) < 1.0


def test_nucleon_reweighter_ignores_antinucleons_and_mesons():
    rw = NucleonAbsorptionOutOfTargetReweighter(0, _params(), _params())
    chain = _chain(0, (-2212, 211, -2112), (10.0, 10.0, 10.0))
    assert rw.can_reweight(chain) == [False]
    assert rw.calculate_weight(chain) == 1.0


def test_nucleon_weights_multiply_across_volumes():
    rw = NucleonAbsorptionOutOfTargetReweighter(0, _params(), _params())
    ptv = [
        ParticlesThroughVolumesData((2212, 0, 0), (4.0, 0.0, 0.0), (1.0, 0.0, 0.0), "IC"),
        ParticlesThroughVolumesData((2212, 0, 0), (6.0, 0.0, 0.0), (1.0, 0.0, 0.0), "DPIP"),
        _empty(),
    ]
    combined = rw.calculate_weight(InteractionChainData(ptv_info=ptv))
    whole = rw.calculate_weight(_chain(0, (2212, 0, 0), (10.0, 0.0, 0.0)))
    assert combined == pytest.approx(whole)


def test_other_absorption_covers_heavy_hadrons_only():
    rw = OtherAbsorptionOutOfTargetReweighter(0, _params(), _params())
    assert rw.can_reweight(_chain(1, (3122, 0, 0), (10.0, 0.0, 0.0))) == [True]
    chain = _chain(1, (211, 2212, 13), (10.0, 10.0, 10.0))
    assert rw.can_reweight(chain) == [False]
    assert rw.calculate_weight(chain) == 1.0


def test_other_absorption_momentum_split_includes_two_in_high():
    rw = OtherAbsorptionOutOfTargetReweighter(0, _params(), _params())

    def weight(mom):
        return rw.calculate_weight(_chain(2, (3122, 0, 0), (10.0, 0.0, 0.0), (mom, 0, 0)))

    assert weight(2.0) == pytest.approx(weight(5.0))
    assert math.log(weight(2.0)) == pytest.approx(3 * math.log(weight(1.0)))


def _interaction(proc):
    return InteractionData(proc=proc)


def test_other_reweighter_handles_inelastic_processes():
    rw = OtherReweighter(0, _params(), _params())
    inter = _interaction("ProtonInelastic")
    assert rw.can_reweight(inter) is True
    assert rw.calculate_weight(inter) == 1.25


@pytest.mark.parametrize("proc", ["Decay", "hElastic", ""])
def test_other_reweighter_rejects_non_inelastic(proc):
    rw = OtherReweighter(0, _params(), _params())
    assert rw.can_reweight(_interaction(proc)) is False


def test_other_reweighter_rejects_inelastic_far_into_the_name():
    rw = OtherReweighter(0, _params(), _params())
    assert rw.can_reweight(_interaction("x" * 100 + "Inelastic")) is False
    assert rw.can_reweight(_interaction("x" * 99 + "Inelastic")) is True