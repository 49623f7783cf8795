import pytest

from fluxreweight.chain import (
    Ancestor,
    DkMeta,
    Dk2NuEntry,
    InteractionChainData,
    TargetExit,
    is_fast_decay,
)

VDBL = [float(i) for i in range(1, 13)]


def ancestor(pdg, proc="hadronInelastic", pz=10.0, pprod=True):
    mom = (0.1, 0.0, pz)
    return Ancestor(
        pdg=pdg,
        proc=proc,
        ivol=f"VOL{pdg}",
        start_position=(0.0, 0.0, pz),
        start_momentum=mom,
        stop_momentum=(0.0, 0.2, pz / 2),
        pprod_momentum=mom if pprod else (0.0, 0.0, 0.0),
    )


def entry(pdgs, vint=(1, 7), **kwargs):
    return Dk2NuEntry(
        ancestors=[ancestor(p, pz=120.0 / (i + 1)) for i, p in enumerate(pdgs)],
        tgtexit=TargetExit((0.3, 0.4, 25.0), (0.0, 0.0, 50.0), 211),
        vint=list(vint),
        vdbl=list(VDBL),
        **kwargs,
    )


META = DkMeta(tgtcfg="le010z", horncfg="185i", vintnames=["Index_Tar_In_Ancestry", "playlistID"])


@pytest.mark.parametrize("pdg", [221, 331, 3212, 113, 223])
def test_fast_decays(pdg):
    assert is_fast_decay(pdg)


@pytest.mark.parametrize("pdg", [211, 321, 2212, 111])
def test_not_fast_decays(pdg):
    assert not is_fast_decay(pdg)


def test_simple_chain():
    icd = InteractionChainData.from_dk2nu(entry([2212, 211, 14]), META)
    assert [i.gen for i in icd.interaction_chain] == [0, 1]
    assert [(i.inc_pdg, i.prod_pdg) for i in icd.interaction_chain] == [(2212, 211), (211, 14)]
    assert icd.interaction_chain[0].vol == "VOL211"
    assert icd.target_config == "le010z"
    assert icd.horn_config == "185i"
    assert icd.playlist == 7


def test_target_info():
    icd = InteractionChainData.from_dk2nu(entry([2212, 211, 14]), META)
    assert icd.tar_info.pdg == 211
    assert icd.tar_info.idx_ancestry == 1
    assert icd.tar_info.pz == 25.0
    assert icd.tar_info.pt == pytest.approx(0.5)


def test_no_vint_names():
    icd = InteractionChainData.from_dk2nu(entry([2212, 211, 14]), DkMeta())
    assert icd.tar_info.idx_ancestry == -1
    assert icd.playlist == -1


def test_fast_decay_skipped():
    icd = InteractionChainData.from_dk2nu(entry([2212, 221, 211, 14], vint=(2, 5)), META)
    first = icd.interaction_chain[0]
    assert (first.inc_pdg, first.prod_pdg) == (2212, 211)
    assert first.prod_p4[2] == pytest.approx(40.0)
    assert len(icd.interaction_chain) == 3
    assert icd.tar_info.idx_ancestry == 1


def test_deuteron_skipped():
    icd = InteractionChainData.from_dk2nu(entry([2212, 1000010020, 211, 14]), META)
    assert [i.gen for i in icd.interaction_chain] == [2]


def test_stop_momentum_used_without_pprod():
    e = entry([2212, 211, 14])
    e.ancestors[0] = ancestor(2212, pz=120.0, pprod=False)
    icd = InteractionChainData.from_dk2nu(e, META)
    assert icd.interaction_chain[0].inc_p4[:3] == (0.0, 0.2, 60.0)


def test_particles_through_volumes_three_ancestors():
    icd = InteractionChainData.from_dk2nu(entry([2212, 211, 14]), META)
    ic, dpip, dvol = icd.ptv_info
    assert [p.vol for p in icd.ptv_info] == ["IC", "DPIP", "DVOL"]
    assert ic.pdgs == (211, 2212, 0)
    assert ic.amount_mat == (VDBL[0] + VDBL[3], VDBL[1] + VDBL[4], 0.0)
    assert dpip.amount_mat == (VDBL[6], VDBL[7], 0.0)
    assert dvol.amount_mat == (VDBL[9], VDBL[10], 0.0)
    assert ic.moms[2] == 0.0


def test_particles_through_volumes_four_ancestors():
    icd = InteractionChainData.from_dk2nu(entry([2212, 2212, 211, -13]), META)
    ic = icd.ptv_info[0]
    assert ic.pdgs == (211, 2212, 2212)
    assert ic.amount_mat[2] == VDBL[2] + VDBL[5]


def test_too_short_ancestry_rejected():
    with pytest.raises(ValueError):
        InteractionChainData.from_dk2nu(entry([211, 14]), META)


def test_format_sections():
    text = InteractionChainData.from_dk2nu(entry([2212, 211, 14]), META).format()
    assert text.startswith("==== InteractionChainData ====\n *config* le010z 185i")
    assert " *ancestors*\n   in: 2212" in text
    assert "Vol: DVOL" in text
    assert text.count("Vol: ") == 3