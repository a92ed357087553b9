"""
Surfacing Policy
================

Label-specific rules that turn derived signals into a decision.

The policy is a pure function of (signals, score). All history handling
lives in the engine; the policy never touches state.

Rules (first matching rule wins):
    fire, score >= fire_conf:
        persistent AND (score >= fire_auto_conf OR inside AOI) → auto-dispatch
        persistent                                              → surface
        otherwise                                               → record
    person/people, score >= person_conf, inside AOI:
        persistent (3 ticks) OR cluster hit → surface
        otherwise                           → record
    chemical, score >= chemical_conf:
        inside AOI OR near asset → surface
        otherwise                → record
    near asset:
        fire >= asset_fire_conf, person/people >= asset_person_conf → surface
    default → record

A single-frame fire near an asset still yields to the asset escalation,
so raising a fire score never lowers the decision. Every other rule that
matches is final, including ``record`` for a person inside an AOI.
"""

from typing import Optional, Tuple

from surfacing_engine.engine.thresholds import SurfacingThresholds
from surfacing_engine.models.decision import Decision, DecisionSignals
from surfacing_engine.models.reason_codes import ReasonCode


FIRE_LABELS = frozenset({"fire"})
PERSON_LABELS = frozenset({"person", "people"})
CHEMICAL_LABELS = frozenset({"chemical"})

PolicyOutcome = Tuple[Decision, ReasonCode]


class SurfacingPolicy:
    """
    Deterministic label policy.

    Evaluates the derived signals of one event against thresholds. The
    same signals and score always produce the same outcome.
    """

    def __init__(self, thresholds: SurfacingThresholds) -> None:
        """
        Initialize surfacing policy.

        Args:
            thresholds: Configured threshold values
        """
        self.thresholds = thresholds

    def evaluate(self, signals: DecisionSignals, score: float) -> PolicyOutcome:
        """
        Classify one event.

        Args:
            signals: Derived signals for the event
            score: Detector confidence

        Returns:
            Tuple of (decision, reason_code)
        """
        label = signals.label

        if label in self.thresholds.ignored_labels:
            return Decision.IGNORE, ReasonCode.EXCLUDED_LABEL

        outcome = self._label_rule(signals, score)
        if outcome is not None and outcome[1] != ReasonCode.FIRE_SINGLE_FRAME:
            return outcome

        if self._is_asset_escalation(signals, score):
            return Decision.SURFACE, ReasonCode.NEAR_CRITICAL_ASSET

        return outcome or (Decision.RECORD, ReasonCode.BELOW_THRESHOLD)

    def _label_rule(self, sv: DecisionSignals, score: float) -> Optional[PolicyOutcome]:
        """Apply the first matching label rule, or None to fall through."""
        if sv.label in FIRE_LABELS and score >= self.thresholds.fire_conf:
            return self._fire(sv, score)

        # Outside an AOI person detections fall through to the asset rule
        if sv.label in PERSON_LABELS and score >= self.thresholds.person_conf and sv.inside_aoi:
            return self._person_in_aoi(sv)

        if sv.label in CHEMICAL_LABELS and score >= self.thresholds.chemical_conf:
            return self._chemical(sv)

        return None

    def _fire(self, sv: DecisionSignals, score: float) -> PolicyOutcome:
        th = self.thresholds

        if sv.persistence_count < th.fire_persist_ticks:
            return Decision.RECORD, ReasonCode.FIRE_SINGLE_FRAME

        if score >= th.fire_auto_conf:
            return Decision.AUTO_DISPATCH, ReasonCode.FIRE_PERSISTENT_HIGH_CONFIDENCE
        if sv.inside_aoi:
            return Decision.AUTO_DISPATCH, ReasonCode.FIRE_PERSISTENT_IN_AOI
        return Decision.SURFACE, ReasonCode.FIRE_PERSISTENT

    def _person_in_aoi(self, sv: DecisionSignals) -> PolicyOutcome:
        if sv.persistence_count >= self.thresholds.person_persist_ticks_aoi:
            return Decision.SURFACE, ReasonCode.PERSON_PERSISTENT_IN_AOI
        if sv.cluster_hit:
            return Decision.SURFACE, ReasonCode.PERSON_CLUSTER_IN_AOI
        return Decision.RECORD, ReasonCode.PERSON_IN_AOI

    def _chemical(self, sv: DecisionSignals) -> PolicyOutcome:
        if sv.inside_aoi:
            return Decision.SURFACE, ReasonCode.CHEMICAL_IN_AOI
        if sv.near_asset:
            return Decision.SURFACE, ReasonCode.CHEMICAL_NEAR_ASSET
        return Decision.RECORD, ReasonCode.CHEMICAL_DETECTED

    def _is_asset_escalation(self, sv: DecisionSignals, score: float) -> bool:
        """Check whether asset proximity alone warrants surfacing."""
        if not sv.near_asset:
            return False
        if sv.label in FIRE_LABELS:
            return score >= self.thresholds.asset_fire_conf
        if sv.label in PERSON_LABELS:
            return score >= self.thresholds.asset_person_conf
        return False
