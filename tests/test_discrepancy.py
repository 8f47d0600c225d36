"""Tests for dopaminergic / hippocampal discrepancy signals and learning by signal."""

import sys
import os

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
from selnet_config import ActivationSettings, ReactivationThreshold, SelNetConfig
from selnet_foundation import SimpleBinarySensor
from selnet_network import Network
from selnet_primitives import logistic

L1 = logistic(1.0)


def make_network():
    return Network("N", SelNetConfig(
        activation=ActivationSettings(
            reactivation_threshold=ReactivationThreshold(is_random=False)
        ),
        seed=0,
    ))


def reinforcer_network():
    """Sensor Sr → respondent input S_Star ══► dopaminergic unit d."""
    net = make_network()
    sr = net.append_sensor(SimpleBinarySensor("Sr"))
    star = net.create_respondent_sensory_input_neuron("S_Star")
    d = net.create_dopaminergic_unit("d")
    sr.send_to(star)
    star.send_respondent_excitation(d)
    return net, sr, d


class TestDopaminergicUnit:
    """discrepancy = a(t) − a(t−1)."""

    def test_onset_is_positive(self):
        net, sr, d = reinforcer_network()
        sr.is_on = True
        net.update()
        assert d.activation_level == 1.0
        assert d.discrepancy_signal == pytest.approx(1.0)
        assert net.dopaminergic_signal == pytest.approx(1.0)

    def test_sustained_input_gives_zero(self):
        net, sr, d = reinforcer_network()
        sr.is_on = True
        net.update()
        net.update()
        assert d.discrepancy_signal == pytest.approx(0.0)

    def test_offset_is_negative(self):
        net, sr, d = reinforcer_network()
        sr.is_on = True
        net.update()
        sr.is_on = False
        net.update()
        # no operant input: the body level decays from L(1)
        expected = L1 - 0.1 * L1 * (1 - L1)
        assert d.activation_level == pytest.approx(expected)
        assert d.discrepancy_signal == pytest.approx(expected - 1.0)
        assert net.dopaminergic_signal < 0.0

    def test_equals_current_minus_previous_published(self):
        net, sr, d = reinforcer_network()
        for on in (True, False, False, True, True, False):
            sr.is_on = on
            net.update()
            assert d.discrepancy_signal == pytest.approx(
                d.activation_level - d.previous_activation_level
            )

    def test_reset_zeroes_discrepancy(self):
        net, sr, d = reinforcer_network()
        sr.is_on = True
        net.update()
        net.inter_trial_interval()
        assert d.discrepancy_signal == 0.0
        assert net.dopaminergic_signal == 0.0
        assert d.activation_level == pytest.approx(logistic(0.0))


class TestHippocampalUnit:
    """discrepancy = |Δa| + dopaminergic × (1 − previous discrepancy)."""

    def setup_unit(self):
        net = make_network()
        s = net.create_sensory_input_neuron("S")
        h = net.create_hippocampal_unit("h")
        s.send_excitation(h)
        h.set_excitatory_weights(0.5)
        s.load_levels(1.0)
        return net, h

    def test_formula(self):
        net, h = self.setup_unit()
        net.force_dopaminergic_signal(0.2)
        h.prepare_activation()
        assert h.discrepancy_signal == pytest.approx(0.5 + 0.2)
        h.commit_activation()
        h.prepare_activation()
        assert h.discrepancy_signal == pytest.approx(0.025 + 0.2 * (1 - 0.7))

    def test_without_dopamine_tracks_change(self):
        net, h = self.setup_unit()
        h.prepare_activation()
        assert h.discrepancy_signal == pytest.approx(0.5)

    def test_reset(self):
        net, h = self.setup_unit()
        h.prepare_activation()
        h.reset_activation()
        assert h.discrepancy_signal == 0.0


class TestNetworkSignals:
    """Means over the feedback areas, latched once per timestep."""

    def test_empty_areas_give_zero(self):
        net = make_network()
        net.update()
        assert net.dopaminergic_signal == 0.0
        assert net.hippocampal_signal == 0.0

    def test_mean_over_units(self):
        net, sr, d = reinforcer_network()
        net.create_dopaminergic_unit("d2")
        sr.is_on = True
        net.update()
        assert net.dopaminergic_signal == pytest.approx(0.5)
        assert net.ventral_tegmental_area.dopaminergic_signal == pytest.approx(0.5)

    def test_hippocampal_mean(self):
        net = make_network()
        x = net.append_sensor(SimpleBinarySensor("X"))
        s = net.create_sensory_input_neuron("S")
        h1 = net.create_hippocampal_unit("h1")
        net.create_hippocampal_unit("h2")
        x.send_to(s)
        s.send_excitation(h1)
        h1.set_excitatory_weights(0.5)
        x.is_on = True
        net.update()
        assert net.hippocampal_signal == pytest.approx(0.25)


class TestForcedSignals:
    """A forced value is returned exactly until it is unforced."""

    def test_force_persists_across_updates(self):
        net, sr, d = reinforcer_network()
        net.force_dopaminergic_signal(0.42)
        assert net.is_dopaminergic_signal_forced()
        sr.is_on = True
        for _ in range(3):
            net.update()
            assert net.dopaminergic_signal == 0.42
        net.inter_trial_interval()
        assert net.dopaminergic_signal == 0.42

    def test_unforce_restores_natural_value(self):
        net, sr, d = reinforcer_network()
        net.force_dopaminergic_signal(0.42)
        net.unforce_dopaminergic_signal()
        assert not net.is_dopaminergic_signal_forced()
        sr.is_on = True
        net.update()
        assert net.dopaminergic_signal == pytest.approx(1.0)

    def test_force_hippocampal(self):
        net = make_network()
        net.force_hippocampal_signal(-0.3)
        assert net.is_hippocampal_signal_forced()
        net.update()
        assert net.hippocampal_signal == -0.3
        net.unforce_hippocampal_signal()
        net.update()
        assert net.hippocampal_signal == 0.0


class TestLearningSignalByKind:
    """Sensory side learns from the hippocampus, motor side from the VTA."""

    def test_signal_selection(self):
        net = make_network()
        kinds = {
            "sensory": net.create_sensory_interneuron("SI"),
            "motor": net.create_motor_interneuron("MI"),
            "output": net.create_motor_output_neuron("MO"),
            "hippocampal": net.create_hippocampal_unit("H"),
            "dopaminergic": net.create_dopaminergic_unit("D"),
        }
        net.force_dopaminergic_signal(0.9)
        net.force_hippocampal_signal(0.1)
        assert kinds["sensory"].learning_signal == 0.1
        assert kinds["hippocampal"].learning_signal == 0.1
        assert kinds["motor"].learning_signal == 0.9
        assert kinds["output"].learning_signal == 0.9
        assert kinds["dopaminergic"].learning_signal == 0.9

    def setup_paths(self):
        net = make_network()
        x = net.append_sensor(SimpleBinarySensor("X"))
        s = net.create_sensory_input_neuron("S")
        si = net.create_sensory_interneuron("SI")
        mi = net.create_motor_interneuron("MI")
        x.send_to(s)
        s.send_excitation(si)
        s.send_excitation(mi)
        si.set_excitatory_weights(0.6)
        mi.set_excitatory_weights(0.6)
        x.is_on = True
        net.is_learning_enabled = True
        return net, si, mi

    def test_positive_dopamine_strengthens_motor_only(self):
        net, si, mi = self.setup_paths()
        net.force_dopaminergic_signal(1.0)
        net.force_hippocampal_signal(0.0)
        net.update()
        a = logistic(0.6)
        assert mi.excitatory_weights[0] == pytest.approx(0.6 + 0.5 * a * 1.0 * 0.4)
        assert si.excitatory_weights[0] == pytest.approx(0.6 - 0.1 * a * 0.6 * 1.0)

    def test_positive_hippocampal_strengthens_sensory_only(self):
        net, si, mi = self.setup_paths()
        net.force_dopaminergic_signal(0.0)
        net.force_hippocampal_signal(1.0)
        net.update()
        assert si.excitatory_weights[0] > 0.6
        assert mi.excitatory_weights[0] < 0.6

    def test_learning_disabled_keeps_weights(self):
        net, si, mi = self.setup_paths()
        net.is_learning_enabled = False
        net.force_dopaminergic_signal(1.0)
        result = net.update()
        assert not result.learned
        assert mi.excitatory_weights == [0.6]
        assert si.excitatory_weights == [0.6]
