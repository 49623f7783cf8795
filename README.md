# fluxreweight

`fluxreweight` corrects simulated accelerator neutrino fluxes for what is known
about hadron production. Every neutrino in a beam simulation comes from a chain
of hadronic interactions that starts with a primary proton on the target. The
package walks that chain and gives each step a weight. The weights are:

* **MIPP NuMI yields** (`fluxreweight.mipp_reweighters`). A pion or kaon that
  leaves the target in a measured (pz, pt) bin gets the ratio of data to
  simulation. The interactions before it in the chain are then marked as
  covered.
* **Thin-target interactions.** These are applied through reweighters that you
  supply (see *Reweighting* below).
* **Other inelastic interactions** (`OtherReweighter`). Any interaction whose
  process name contains `Inelastic` and that nothing else has claimed is scaled
  by the parameter `inel_A_scaling`.
* **Absorption** (`fluxreweight.absorption`). The last three ancestors of the
  neutrino cross the horn inner conductors (IC), the decay pipe walls (DPIP) and
  the decay volume (DVOL). Each crossing with material gets a survival factor
  `exp(-amount * 6.02e-4 * xsec)`. The reweighters are:
  * `AbsorptionICReweighter`, `AbsorptionDPIPReweighter` and
    `AbsorptionDVOLReweighter` for pions and kaons;
  * `NucleonAbsorptionOutOfTargetReweighter` for protons and neutrons;
  * `OtherAbsorptionOutOfTargetReweighter` for other hadrons.

Systematic uncertainties are spread by drawing many *universes*. In each
universe every parameter is shifted by its uncertainty. Correlated groups are
shifted through the Cholesky factor of their covariance matrix.

## Installation

You need Python 3.10 or later. The only dependency is `numpy`. The `test` extra
adds `pytest`.

## Parameters

`fluxreweight.parameters.ParameterTable` maps parameter names to values. It is
iterated in name order. Asking for a name the table does not hold raises
`NoParameterFound`, which is a `LookupError`.

```python
from fluxreweight.parameters import ParameterTable, NoParameterFound

table = ParameterTable({"inel_piAl_xsec": 0.0})
table.set_parameter("inel_A_scaling", 1.02)
table.get_value("inel_A_scaling")        # 1.02
table.get_parameter("inel_piAl_xsec")    # ("inel_piAl_xsec", 0.0)
table.has_parameter("aux_parameter")     # False
table.items()                            # pairs sorted by name

try:
    table.get_value("aux_parameter")
except NoParameterFound as exc:
    print(exc)                           # no parameter named 'aux_parameter'
```

## Central values and universes

`fluxreweight.uncertainties.CentralValuesAndUncertainties` holds the central
values, their errors and the covariance matrices. You can add entries directly
with `add_uncorrelated(name, value, uncertainty)` and
`add_correlated(table, covariance)`. You can also load them with
`read_xml(path)` from a file shaped like this:

```xml
<pars>
  <uncorrelated>
    <inel_A_scaling><cv>1.0</cv><err>0.05</err></inel_A_scaling>
  </uncorrelated>
  <uncorrelated_list>
    <MIPP_NuMI_pip_stats><cvs>1.0 2.0</cvs><errs>0.1 0.2</errs></MIPP_NuMI_pip_stats>
  </uncorrelated_list>
  <correlated>
    <MIPP_NuMI_pip_sys><cvs>1.0 2.0</cvs><covmx>0.01 0 0 0.04</covmx></MIPP_NuMI_pip_sys>
  </correlated>
</pars>
```

List and correlated entries become parameters named `<tag>_0`, `<tag>_1`, and
so on. `read_xml` also adds `aux_parameter` with central value 1 and error 1.

```python
from fluxreweight.uncertainties import CentralValuesAndUncertainties

cvu = CentralValuesAndUncertainties()
cvu.add_uncorrelated("inel_A_scaling", 1.0, 0.05)
cvu.set_base_seed(1000)

central = cvu.cv_pars()              # central values only
shifted = cvu.pars_for_universe(3)   # seeded with base seed + universe
same = cvu.pars_for_universe(-1)     # universe -1: central values, no shifts
```

Rules for the draws:

* The same seed always gives the same draw, except that a seed of 0 draws fresh
  entropy.
* Thin-target systematics named `ThinTarget_pC_pip_sys…` and similar move
  together across all their bins.
* A correlated group whose covariance is not positive definite is left out of
  the universe table.

## Particles

```python
from fluxreweight.particles import numi_to_pdg, particle_mass

numi_to_pdg(8)        # 211, a positive pion; unknown codes give 0
particle_mass(2212)   # proton mass in GeV
particle_mass(-321)   # antiparticles share the mass of their partner
```

`particle_mass` raises `UnknownParticle` for codes it has no mass for.

## Interaction chains

One simulated neutrino is described by these classes in `fluxreweight.chain`:

* `Dk2NuEntry` holds the neutrino's ancestry, the target-exit hadron and the
  decay kinematics, as `Ancestor`, `TargetExit` and `DecayInfo`. Its `vint`
  and `vdbl` lists hold the auxiliary values.
* `DkMeta` holds the run metadata.

`InteractionChainData.from_dk2nu(entry, meta)` builds a chain from them. The
resulting chain holds:

* `interaction_chain`: one `InteractionData` per interaction, with xF, pT, θ
  and four-momenta. Fast-decaying intermediates (η, η′, Σ⁰, ρ⁰, ω) are skipped
  in favour of their daughters, and interactions involving deuterons are
  dropped.
* `tar_info`: the target-exit hadron, as `TargetData`.
* `ptv_info`: the material crossed in the IC, DPIP and DVOL volumes, as three
  `ParticlesThroughVolumesData`. These are read from `vdbl`, which must hold at
  least 12 values.

The ancestry must have at least three particles. Every object has a `format()`
method that returns a readable text summary.

## MIPP binning and simulated yields

`fluxreweight.mipp` provides two classes:

* `MIPPNumiYieldsBins` loads the measured bins with `load_pip`, `load_pim` and
  `load_k_pi`. `bin_id(pz, pt, pdg)` returns the bin index, or -1.
  `n_bins_pip()`, `n_bins_pim()` and `n_bins_k()` raise `RuntimeError` until the
  bins are loaded.
* `MIPPNumiMC.load(species, path)` loads the simulated yields of one species:
  `pip`, `pim`, `kap`, `kam`, `k0l` or `k0s`. `mc_value(pz, pt, pdg)` returns
  the yield per interaction.

Bin files hold entries with `pzrange` and `ptrange`, and simulated yield entries
also hold `cvmc`. The sections are:

* `bins.MIPP_Numi_pip`, `bins.MIPP_Numi_pim` and `bins.MIPP_Numi_k_pi` for the
  bins;
* `mcbin.MIPPNuMI_MC_<species>` for the simulated yields.

## Reweighting

`fluxreweight.driver.read_settings(path)` reads the `inputs.Settings` section
of an XML file into a `Settings`. The section holds:

* `MIPPCorrOption`, which is stored but not otherwise used;
* `NumberOfUniverses`;
* `Reweighters`, where the value `MIPPNuMIOn` turns the MIPP reweighters on.

`ReweightDriver(universe, cv_pars, univ_pars, settings, bins, mc, thin_target,
target_attenuation)` applies every reweighter of one universe to a chain, in a
fixed order. `calculate_weight(chain)` returns the total weight and keeps each
part in `component_weights`. A NaN total gives 1.

The parameters the drivers expect depend on the reweighters in use:

| Reweighter | Parameters |
|---|---|
| Absorption | `inel_piAl_xsec`, `inel_kapAl_xsec_lowP`, `inel_kapAl_xsec_highP`, `inel_kamAl_xsec_lowP`, `inel_kamAl_xsec_highP` |
| Other inelastic interactions | `inel_A_scaling` |
| MIPP (when on) | `prt_no_interacting`, `aux_parameter`, and the `MIPP_NuMI_<label>_sys_<i>` / `MIPP_NuMI_<label>_stats_<i>` bins for `pip`, `pim`, `kap_pip` and `kam_pim` |

When MIPP reweighting is on, the driver also needs loaded `bins` and `mc`.

`UniverseReweighter(settings, uncertainties, bins, mc, base_universe,
thin_target, target_attenuation)` builds one driver per universe, plus one for
the central value (universe -1). Its methods are:

* `calculate_weights(chain)` weights the chain in every universe;
* `total_weights()` returns the total weight in each universe;
* `cv_weight()` returns the central-value weight;
* `weights(name)` returns the per-universe weights of one component;
* `n_universes()` returns the number of universes.

`weights(name)` accepts any name in `driver.COMPONENTS`, for example
`"MIPPNumiPionYields"`, `"ThinTargetpCPion"`, `"AbsorptionIC"` or
`"TotalAbsorption"`. It returns an empty list for unknown names.

## Neutrino weights at a detector

`fluxreweight.nuweight.NuWeight(position)` takes a detector position in cm.
`calculate(entry)` returns the neutrino energy and the probability weight
`(enu, wgt)` for a neutrino aimed at that position, for a detector of radius
100 cm. It takes the polarisation of muon parents into account. It raises
`DecayKinematicsError` when the decay cannot be handled, for example when the
parent is an ion or the cosine of the decay angle is out of range.

## What the package does not do

* **No file reading for events.** It does not read simulation files. You fill
  `Dk2NuEntry` and `DkMeta` yourself from whatever reader you use.
* **No built-in thin-target or target-attenuation reweighters.** The
  reweighters for p+C → π, p+C → K, n+C → π, p+C → nucleon, meson-incident and
  nucleon+A interactions, and the target-attenuation correction, are not
  included. Pass your own to `ReweightDriver` or `UniverseReweighter`:
  * a mapping of `THIN_TARGET_COMPONENTS` names to objects with
    `can_reweight(interaction)` and `calculate_weight(interaction)`;
  * an object with `can_reweight(chain)` and `calculate_weight(chain)`.

  A missing reweighter contributes a weight of 1.
* **No command-line tool and no histogramming.** The package is a library only.