"""
SelNet BGL2015 - the two-path choice network of Burgos & García-Leal (2015).

Two cues (X, Y) each drive their own sensory → motor path; a reinforcer
(Sr) drives the dopaminergic unit directly.  During training Y is always
followed by Sr while X is followed by Sr on half of its trials.  In the
choice phase both cues are presented together and the better reinforced
path (Y → r2) should dominate.

Topology::

    X ─► S'1 ─► S"1 ─┬─► h1
                     └─► M"1 ─┬─► M'1 ─► r1
                              └─► d
    Y ─► S'2 ─► S"2 ─┬─► h2
                     └─► M"2 ─┬─► M'2 ─► r2
                              └─► d
    Sr ─► S* ══► d        (respondent)

Usage::

    from selnet_bgl2015 import Organism, TrialsLooper

    organism = Organism(seed=42)
    summary = TrialsLooper(organism, seed=42).run_trials()
    print(summary.m_prime_2_activation > summary.m_prime_1_activation)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import List, Optional

import numpy as np

from selnet_config import SelNetConfig
from selnet_foundation import NodeInfo, SimpleBinaryEffector, SimpleBinarySensor
from selnet_network import Network, RandomizedContinuousPropagationUpdater

logger = logging.getLogger("selnet.bgl2015")

BASE_CONNECTION_WEIGHT = 0.01
SENSORY_CONNECTION_WEIGHT = 0.2


# ---------------------------------------------------------------------------
# Network construction
# ---------------------------------------------------------------------------

def create_bgl2015_network(
    identifier: str = "BGL2015",
    config: Optional[SelNetConfig] = None,
    updater_seed: Optional[int] = None,
) -> Network:
    """Build, wire and weight the reference network.

    All learnable connections start at ``BASE_CONNECTION_WEIGHT`` except
    the first sensory association layer and the hippocampus, which start at
    ``SENSORY_CONNECTION_WEIGHT``.  The returned network uses the
    randomized continuous-propagation updater, so its structure is locked.
    """
    net = Network(identifier, config)

    x = net.append_sensor(SimpleBinarySensor("X"))
    y = net.append_sensor(SimpleBinarySensor("Y"))
    sr = net.append_sensor(SimpleBinarySensor("Sr"))

    s_prime_1 = net.create_sensory_input_neuron("S_Prime_1")
    s_prime_2 = net.create_sensory_input_neuron("S_Prime_2")
    s_star = net.create_respondent_sensory_input_neuron("S_Star")

    s_prime_prime_1 = net.create_sensory_interneuron("S_Prime_Prime_1")
    s_prime_prime_2 = net.create_sensory_interneuron("S_Prime_Prime_2")
    m_prime_prime_1 = net.create_motor_interneuron("M_Prime_Prime_1")
    m_prime_prime_2 = net.create_motor_interneuron("M_Prime_Prime_2")
    m_prime_1 = net.create_motor_output_neuron("M_Prime_1")
    m_prime_2 = net.create_motor_output_neuron("M_Prime_2")

    h1 = net.create_hippocampal_unit("h1")
    h2 = net.create_hippocampal_unit("h2")
    d = net.create_dopaminergic_unit("d")

    r1 = net.append_effector(SimpleBinaryEffector("r1"))
    r2 = net.append_effector(SimpleBinaryEffector("r2"))

    net.set_info_for_node(NodeInfo(
        x.identifier, "X",
        "Discrete exteroceptive cue associated with one trial type.",
        "Cue presented on a random 50% of trials. Followed by Sr on 50% of "
        "the trials in which it is presented.",
    ))
    net.set_info_for_node(NodeInfo(
        y.identifier, "Y",
        "Discrete exteroceptive cue associated with one trial type.",
        "Cue presented on a random 50% of trials. Followed by Sr on every "
        "trial in which it is presented.",
    ))
    net.set_info_for_node(NodeInfo(
        sr.identifier, "Sr",
        "Reinforcing stimulus: a biologically significant reward (e.g. food).",
        "Feeds directly into the dopaminergic unit via its sensory input neuron.",
    ))

    x.send_to(s_prime_1)
    y.send_to(s_prime_2)
    sr.send_to(s_star)

    s_star.send_respondent_excitation(d)

    for s_prime, s_prime_prime, h, m_prime_prime, m_prime, r in (
        (s_prime_1, s_prime_prime_1, h1, m_prime_prime_1, m_prime_1, r1),
        (s_prime_2, s_prime_prime_2, h2, m_prime_prime_2, m_prime_2, r2),
    ):
        s_prime.send_excitation(s_prime_prime)
        s_prime_prime.send_excitation(h)
        s_prime_prime.send_excitation(m_prime_prime)
        m_prime_prime.send_excitation(d)
        m_prime_prime.send_excitation(m_prime)
        r.receive_from(m_prime)

    net.set_connection_weights(BASE_CONNECTION_WEIGHT)
    net.sensory_association_region[0][0].set_connection_weights(SENSORY_CONNECTION_WEIGHT)
    net.hippocampus.set_connection_weights(SENSORY_CONNECTION_WEIGHT)

    net.updater = RandomizedContinuousPropagationUpdater(seed=updater_seed)
    logger.info("Built %s with %d named nodes", identifier, len(net.registered_identifiers()))
    return net


class Organism:
    """The reference network plus named handles for its cues and outputs.

    Args:
        identifier: Network name.
        seed: Seeds both the reactivation-threshold generator and the
            update-order generator.  ``None`` draws fresh entropy.
        config: Optional settings; ``seed`` overrides ``config.seed``.
    """

    def __init__(
        self,
        identifier: str = "BGL2015",
        seed: Optional[int] = None,
        config: Optional[SelNetConfig] = None,
    ):
        if config is None:
            config = SelNetConfig()
        if seed is not None:
            config = replace(config, seed=seed)
        updater_seed = None if config.seed is None else config.seed + 1
        self.brain = create_bgl2015_network(identifier, config, updater_seed)

        self.x_sensor = self.brain.find_sensor("X")
        self.y_sensor = self.brain.find_sensor("Y")
        self.sr_sensor = self.brain.find_sensor("Sr")
        self.r1_effector = self.brain.find_effector("r1")
        self.r2_effector = self.brain.find_effector("r2")

        self.s_prime_prime_1 = self.brain.find_sensory_interneuron("S_Prime_Prime_1")
        self.s_prime_prime_2 = self.brain.find_sensory_interneuron("S_Prime_Prime_2")
        self.m_prime_prime_1 = self.brain.find_motor_interneuron("M_Prime_Prime_1")
        self.m_prime_prime_2 = self.brain.find_motor_interneuron("M_Prime_Prime_2")
        self.m_prime_1 = self.brain.find_motor_output_neuron("M_Prime_1")
        self.m_prime_2 = self.brain.find_motor_output_neuron("M_Prime_2")
        self.d = self.brain.find_dopaminergic_unit("d")
        self.h1 = self.brain.find_hippocampal_unit("h1")
        self.h2 = self.brain.find_hippocampal_unit("h2")

    @property
    def is_learning_enabled(self) -> bool:
        return self.brain.is_learning_enabled

    @is_learning_enabled.setter
    def is_learning_enabled(self, value: bool) -> None:
        self.brain.is_learning_enabled = value

    @property
    def x(self) -> bool:
        return self.x_sensor.is_on

    @x.setter
    def x(self, value: bool) -> None:
        self.x_sensor.is_on = value

    @property
    def y(self) -> bool:
        return self.y_sensor.is_on

    @y.setter
    def y(self, value: bool) -> None:
        self.y_sensor.is_on = value

    @property
    def sr(self) -> bool:
        return self.sr_sensor.is_on

    @sr.setter
    def sr(self, value: bool) -> None:
        self.sr_sensor.is_on = value

    @property
    def r1(self) -> bool:
        return self.r1_effector.is_on

    @property
    def r2(self) -> bool:
        return self.r2_effector.is_on


# ---------------------------------------------------------------------------
# Session data
# ---------------------------------------------------------------------------

@dataclass
class TrialSchedule:
    """Shape of a training + choice session.

    Attributes:
        x_trials: Number of X training trials.
        y_trials: Number of Y training trials.
        choice_trials: Number of X+Y choice trials after training.
        non_sr_steps: Steps per trial before the reinforcer step.
        sr_steps: Reinforcer steps at the end of each trial.
        x_presentation_probability: Chance that the next training trial is
            an X trial while both kinds remain.
        x_reinforcement_probability: Chance that an X trial ends with Sr.
        y_reinforcement_probability: Chance that a Y trial ends with Sr.
    """

    x_trials: int = 200
    y_trials: int = 200
    choice_trials: int = 20
    non_sr_steps: int = 4
    sr_steps: int = 1
    x_presentation_probability: float = 0.5
    x_reinforcement_probability: float = 0.5
    y_reinforcement_probability: float = 1.0

    @property
    def training_trials(self) -> int:
        return self.x_trials + self.y_trials

    @property
    def first_sr_step(self) -> int:
        return self.non_sr_steps + 1

    @property
    def steps_per_trial(self) -> int:
        return self.non_sr_steps + self.sr_steps


@dataclass
class StepData:
    """One recorded step; step 0 is the inter-trial interval."""

    trial_number: int
    trial_step_number: int
    is_choice_trial: bool
    is_sr_step: bool
    is_learning: bool
    is_x_on: bool
    is_y_on: bool
    is_sr_on: bool
    s1_m1_weight: float
    s2_m2_weight: float
    m1_activation: float
    m2_activation: float


@dataclass
class SessionSummary:
    """Averages over the Sr steps of the choice trials."""

    m_prime_prime_1_weight: float = 0.0
    m_prime_prime_2_weight: float = 0.0
    m_prime_1_activation: float = 0.0
    m_prime_2_activation: float = 0.0
    r1_count: int = 0
    r2_count: int = 0
    choice_steps: int = 0


# ---------------------------------------------------------------------------
# Trial runner
# ---------------------------------------------------------------------------

class TrialsLooper:
    """Run a randomized X/Y training session followed by choice trials.

    Every trial except the first is preceded by one inter-trial interval
    with learning off and all cues off.
    """

    RESPONSE_THRESHOLD = 0.5

    def __init__(
        self,
        organism: Organism,
        schedule: Optional[TrialSchedule] = None,
        seed: Optional[int] = None,
    ):
        self.organism = organism
        self.schedule = schedule if schedule is not None else TrialSchedule()
        self.rng = np.random.default_rng(seed)
        self.step_data: List[StepData] = []
        self.choice_data: List[StepData] = []
        self.summary = SessionSummary()
        self._trial_number = 0
        self._trial_step_number = 0

    def _coin(self, probability: float) -> bool:
        return bool(self.rng.random() < probability)

    def run_trials(self) -> SessionSummary:
        self.step_data = []
        self.choice_data = []
        self._trial_number = 0
        self._run_training_trials()
        self._run_choice_trials()
        return self._summarize()

    def _run_training_trials(self) -> None:
        schedule = self.schedule
        x_count = 0
        y_count = 0
        logger.info("Begin %d training trials", schedule.training_trials)
        while x_count < schedule.x_trials or y_count < schedule.y_trials:
            self._trial_number += 1
            if self._trial_number > 1:
                self._run_inter_trial_interval()

            if x_count < schedule.x_trials and (
                self._coin(schedule.x_presentation_probability) or y_count == schedule.y_trials
            ):
                x_count += 1
                reinforce = self._coin(schedule.x_reinforcement_probability)
                self._run_trial(x=True, y=False, sr=reinforce, learning=True)
            else:
                y_count += 1
                reinforce = self._coin(schedule.y_reinforcement_probability)
                self._run_trial(x=False, y=True, sr=reinforce, learning=True)
        logger.info("End training trials")

    def _run_choice_trials(self) -> None:
        logger.info("Begin %d choice trials", self.schedule.choice_trials)
        for _ in range(self.schedule.choice_trials):
            self._trial_number += 1
            self._run_inter_trial_interval()
            self._run_trial(x=True, y=True, sr=False, learning=False)
        logger.info("End choice trials")

    def _run_trial(self, x: bool, y: bool, sr: bool, learning: bool) -> None:
        organism = self.organism
        organism.is_learning_enabled = learning
        organism.x = x
        organism.y = y
        organism.sr = False

        for step in range(1, self.schedule.steps_per_trial + 1):
            if step == self.schedule.first_sr_step:
                organism.sr = sr
            self._trial_step_number = step
            organism.brain.update()
            self._record_step()

    def _run_inter_trial_interval(self) -> None:
        organism = self.organism
        organism.is_learning_enabled = False
        organism.x = False
        organism.y = False
        organism.sr = False
        self._trial_step_number = 0
        organism.brain.inter_trial_interval()
        self._record_step()

    def _record_step(self) -> None:
        organism = self.organism
        data = StepData(
            trial_number=self._trial_number,
            trial_step_number=self._trial_step_number,
            is_choice_trial=self._trial_number > self.schedule.training_trials,
            is_sr_step=self._trial_step_number >= self.schedule.first_sr_step,
            is_learning=organism.is_learning_enabled,
            is_x_on=organism.x,
            is_y_on=organism.y,
            is_sr_on=organism.sr,
            s1_m1_weight=organism.m_prime_prime_1.excitatory_weights[0],
            s2_m2_weight=organism.m_prime_prime_2.excitatory_weights[0],
            m1_activation=organism.m_prime_1.activation_level,
            m2_activation=organism.m_prime_2.activation_level,
        )
        self.step_data.append(data)
        logger.debug(
            "%d, step: %d, X: %s, Y: %s, Sr: %s, learning: %s, "
            "S\"1-M\"1 w: %.6f, S\"2-M\"2 w: %.6f, M'1 a: %.6f, M'2 a: %.6f",
            data.trial_number, data.trial_step_number, data.is_x_on, data.is_y_on,
            data.is_sr_on, data.is_learning, data.s1_m1_weight, data.s2_m2_weight,
            data.m1_activation, data.m2_activation,
        )

    def _summarize(self) -> SessionSummary:
        self.choice_data = [s for s in self.step_data if s.is_choice_trial and s.is_sr_step]
        steps = self.choice_data
        if not steps:
            self.summary = SessionSummary()
            return self.summary

        m1 = np.array([s.m1_activation for s in steps])
        m2 = np.array([s.m2_activation for s in steps])
        self.summary = SessionSummary(
            m_prime_prime_1_weight=float(np.mean([s.s1_m1_weight for s in steps])),
            m_prime_prime_2_weight=float(np.mean([s.s2_m2_weight for s in steps])),
            m_prime_1_activation=float(m1.mean()),
            m_prime_2_activation=float(m2.mean()),
            r1_count=int((m1 >= self.RESPONSE_THRESHOLD).sum()),
            r2_count=int((m2 >= self.RESPONSE_THRESHOLD).sum()),
            choice_steps=len(steps),
        )
        s = self.summary
        logger.info("Average weight: s\"1-m\"1: %.6f, s\"2-m\"2: %.6f",
                    s.m_prime_prime_1_weight, s.m_prime_prime_2_weight)
        logger.info("Average activation: m'1: %.6f, m'2: %.6f",
                    s.m_prime_1_activation, s.m_prime_2_activation)
        logger.info("Response counts: R1: %d, R2: %d", s.r1_count, s.r2_count)
        return self.summary
