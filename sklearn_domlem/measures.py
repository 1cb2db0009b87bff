"""
Implementation of VC-DomLEM sequential covering:
Evaluators computed from the coverage of rule conditions.

Every measure here can be used for all evaluator roles: while adding,
removing or replacing a condition, on rule conditions as they stand, and on
the coverage of a finished rule. The hypothetical evaluations are computed
from the coverage bookkeeping of `RuleConditions`, without copying it.
"""

from abc import abstractmethod

import numpy as np

from sklearn_domlem.common import \
    Condition, ConditionAdditionEvaluator, ConditionRemovalEvaluator, \
    MeasureType, MonotonicConditionAdditionEvaluator, MonotonicityType, \
    RuleConditions, RuleConditionsEvaluator, RuleCoverageInformation, \
    RuleEvaluator


class _CoverageMeasure(ConditionAdditionEvaluator,
                       ConditionRemovalEvaluator,
                       RuleConditionsEvaluator,
                       RuleEvaluator):
    """A measure which is a function of the covered objects and the fixed
    index sets of the rule conditions.
    """

    @abstractmethod
    def calculate(self, covered: np.ndarray, positive: np.ndarray,
                  neutral: np.ndarray, approximation: np.ndarray) -> float:
        """Compute the measure, all parameters being bool masks over the
        objects of the learning table.
        """
        raise NotImplementedError

    def _calculate_for(self, rule_conditions: RuleConditions,
                       covered: np.ndarray) -> float:
        return self.calculate(covered,
                              rule_conditions.positive_mask,
                              rule_conditions.neutral_mask,
                              rule_conditions.approximation_mask)

    def evaluate(self, rule_conditions: RuleConditions) -> float:
        return self._calculate_for(rule_conditions,
                                   rule_conditions.covered_mask)

    def evaluate_with_condition(self, rule_conditions: RuleConditions,
                                condition: Condition) -> float:
        if condition is None:
            return self.worst_value
        return self._calculate_for(
            rule_conditions, rule_conditions.covered_with_condition(condition))

    def evaluate_without_condition(self, rule_conditions: RuleConditions,
                                   index: int) -> float:
        return self._calculate_for(
            rule_conditions, rule_conditions.covered_without_condition(index))

    def evaluate_when_replacing_condition(self,
                                          rule_conditions: RuleConditions,
                                          index: int,
                                          condition: Condition) -> float:
        return self._calculate_for(
            rule_conditions,
            rule_conditions.covered_when_replacing_condition(index,
                                                             condition))

    def evaluate_rule(self, coverage: RuleCoverageInformation) -> float:
        # for a finished rule, the objects supporting its decisions are both
        # the positive objects and the approximation
        return self.calculate(coverage.covered_mask, coverage.positive_mask,
                              coverage.neutral_mask, coverage.positive_mask)


def _n_negative(positive: np.ndarray, neutral: np.ndarray) -> int:
    return len(positive) - np.count_nonzero(positive | neutral)


class EpsilonConsistencyMeasure(_CoverageMeasure,
                                MonotonicConditionAdditionEvaluator):
    """Rule consistency measure epsilon: the share of all negative objects
    that is covered. Negative objects are those neither positive nor neutral.
    0 is best, 1 worst.
    """

    measure_type = MeasureType.COST
    monotonicity_type = \
        MonotonicityType.DETERIORATES_WITH_NUMBER_OF_COVERED_OBJECTS

    def calculate(self, covered, positive, neutral, approximation):
        n_negative = _n_negative(positive, neutral)
        if not n_negative:
            return 0.0
        return np.count_nonzero(covered & ~positive & ~neutral) / n_negative


class SupportMeasure(_CoverageMeasure, MonotonicConditionAdditionEvaluator):
    """Number of covered positive objects."""

    measure_type = MeasureType.GAIN
    monotonicity_type = \
        MonotonicityType.IMPROVES_WITH_NUMBER_OF_COVERED_OBJECTS

    def calculate(self, covered, positive, neutral, approximation):
        return float(np.count_nonzero(covered & positive))


class CoverageOutsideApproximatedSetMeasure(
        _CoverageMeasure, MonotonicConditionAdditionEvaluator):
    """Number of covered objects neither positive nor neutral."""

    measure_type = MeasureType.COST
    monotonicity_type = \
        MonotonicityType.DETERIORATES_WITH_NUMBER_OF_COVERED_OBJECTS

    def calculate(self, covered, positive, neutral, approximation):
        return float(np.count_nonzero(covered & ~positive & ~neutral))


class CoverageOutsideApproximationMeasure(
        _CoverageMeasure, MonotonicConditionAdditionEvaluator):
    """Number of covered objects neither in the approximation nor neutral."""

    measure_type = MeasureType.COST
    monotonicity_type = \
        MonotonicityType.DETERIORATES_WITH_NUMBER_OF_COVERED_OBJECTS

    def calculate(self, covered, positive, neutral, approximation):
        return float(np.count_nonzero(covered & ~approximation & ~neutral))


class RelativeCoverageOutsideApproximationMeasure(
        _CoverageMeasure, MonotonicConditionAdditionEvaluator):
    """Number of covered objects neither in the approximation nor neutral,
    relative to the number of negative objects (0 if there are none).
    """

    measure_type = MeasureType.COST
    monotonicity_type = \
        MonotonicityType.DETERIORATES_WITH_NUMBER_OF_COVERED_OBJECTS

    def calculate(self, covered, positive, neutral, approximation):
        n_negative = _n_negative(positive, neutral)
        if not n_negative:
            return 0.0
        return (np.count_nonzero(covered & ~approximation & ~neutral)
                / n_negative)


class CoverageInApproximationMeasure(_CoverageMeasure,
                                     MonotonicConditionAdditionEvaluator):
    """Number of covered objects of the approximation."""

    measure_type = MeasureType.GAIN
    monotonicity_type = \
        MonotonicityType.IMPROVES_WITH_NUMBER_OF_COVERED_OBJECTS

    def calculate(self, covered, positive, neutral, approximation):
        return float(np.count_nonzero(covered & approximation))


class ConfidenceMeasure(_CoverageMeasure):
    """Share of positive objects among the covered non-neutral ones, 0 if
    nothing is covered. Not monotonic.
    """

    measure_type = MeasureType.GAIN

    def calculate(self, covered, positive, neutral, approximation):
        n_covered = np.count_nonzero(covered & ~neutral)
        if not n_covered:
            return 0.0
        return np.count_nonzero(covered & positive) / n_covered
