"""
Implementation of VC-DomLEM sequential covering:
Concrete condition generators, stopping condition checkers, pruners,
generalizers and minimality checkers.
"""

import copy
from typing import List, Sequence, Tuple

import numpy as np

from sklearn_domlem.common import \
    Condition, ConditionAdditionEvaluator, ConditionGenerator, \
    ConditionRemovalEvaluator, MeasureType, \
    MonotonicConditionAdditionEvaluator, MonotonicityType, Relation, \
    RuleConditions, RuleConditionsEvaluator, RuleConditionsGeneralizer, \
    RuleConditionsPruner, RuleConditionsSetPruner, \
    RuleConditionsWithApproximatedSet, RuleMinimalityChecker, \
    StoppingConditionChecker, StoppingConditionCheckerWithThreshold, \
    make_condition, relation_for
from sklearn_domlem.data import DECISION_ATTRIBUTE
from sklearn_domlem.util import as_mask, check_components


class ElementaryConditionNotFoundError(RuntimeError):
    """No elementary condition can be added to the rule conditions.

    Attributes
    -----
    rule_conditions : RuleConditions or None
        The conditions which could not be extended.
    """

    def __init__(self, message: str, rule_conditions: RuleConditions = None):
        super().__init__(message)
        self.rule_conditions = rule_conditions


# condition generators


class _EvaluatedCondition:
    """A candidate condition and its evaluations, computed lazily and in
    order of the evaluators, since most comparisons are decided by the first.
    """

    __slots__ = ('condition', '_rule_conditions', '_evaluators',
                 '_evaluations')

    def __init__(self, condition: Condition, rule_conditions: RuleConditions,
                 evaluators: Sequence[ConditionAdditionEvaluator]):
        self.condition = condition
        self._rule_conditions = rule_conditions
        self._evaluators = evaluators
        self._evaluations: List[float] = []

    def evaluation(self, i: int) -> float:
        while len(self._evaluations) <= i:
            evaluator = self._evaluators[len(self._evaluations)]
            self._evaluations.append(evaluator.evaluate_with_condition(
                self._rule_conditions, self.condition))
        return self._evaluations[i]

    def compare_to(self, other: '_EvaluatedCondition', n_evaluators: int
                   ) -> Tuple[int, int]:
        """Lexicographic comparison on the first `n_evaluators`.

        :return: `(result, i)` where `result` is 1 if `self` is better, -1 if
            worse, 0 if equal, and `i` the index of the deciding evaluator
            (`n_evaluators` if equal).
        """
        for i in range(n_evaluators):
            result = self._evaluators[i].compare_values(self.evaluation(i),
                                                        other.evaluation(i))
            if result:
                return result, i
        return 0, n_evaluators


class AbstractConditionGenerator(ConditionGenerator):
    """Common base of the generators, comparing candidate conditions
    lexicographically by `condition_addition_evaluators`.

    Candidate conditions use the evaluations of the considered objects as
    limiting values. Candidates which every covered object satisfies would
    not change the rule conditions and are never generated.

    Fields
    -----
    skip_used_attributes : bool, default False
        If True, do not generate conditions for attributes already used in
        the rule conditions.
    """

    skip_used_attributes = False

    def __init__(self,
                 condition_addition_evaluators:
                 Sequence[ConditionAdditionEvaluator]):
        self.condition_addition_evaluators = check_components(
            condition_addition_evaluators, 'condition_addition_evaluators',
            ConditionAdditionEvaluator)

    def get_best_condition(self, considered_objects,
                           rule_conditions: RuleConditions) -> Condition:
        """:param considered_objects: Indices of the objects to build
            conditions from. Only those covered by `rule_conditions` are used.
        """
        if rule_conditions is None:
            raise ValueError("rule_conditions must not be None")
        table = rule_conditions.table
        considered = (as_mask(considered_objects, table.n_objects,
                              'considered_objects')
                      & rule_conditions.covered_mask)

        best = self._evaluated(None, rule_conditions)
        if considered.any():
            for attribute in range(table.n_attributes):
                if self.skip_used_attributes and \
                        rule_conditions.has_condition_for_attribute(attribute):
                    continue
                best = self._best_for_attribute(attribute, considered,
                                                rule_conditions, best)
        if best.condition is None:
            raise ElementaryConditionNotFoundError(
                "no elementary condition found to extend {} considering "
                "objects {}".format(rule_conditions,
                                    np.flatnonzero(considered)),
                rule_conditions)
        return best.condition

    def _evaluated(self, condition, rule_conditions) -> _EvaluatedCondition:
        return _EvaluatedCondition(condition, rule_conditions,
                                   self.condition_addition_evaluators)

    @staticmethod
    def _candidate_values(attribute: int, relation: Relation,
                          considered: np.ndarray,
                          rule_conditions: RuleConditions) -> np.ndarray:
        """:return: The distinct limiting values for non-redundant conditions,
            ordered from most to least restrictive (unordered for `=`).
        """
        values = rule_conditions.table.column(attribute)
        covered_values = values[rule_conditions.covered_mask]
        candidates = np.unique(values[considered])  # ascending
        if relation is Relation.AT_LEAST:
            return candidates[candidates > covered_values.min()][::-1]
        if relation is Relation.AT_MOST:
            return candidates[candidates < covered_values.max()]
        if np.all(covered_values == covered_values[0]):
            return candidates[:0]
        return candidates

    def _test_all(self, attribute, values, rule_conditions, best
                  ) -> _EvaluatedCondition:
        """Evaluate every candidate, :return: the best one or `best`."""
        n_evaluators = len(self.condition_addition_evaluators)
        semantics = rule_conditions.rule_semantics
        table = rule_conditions.table
        for value in values:
            candidate = self._evaluated(
                make_condition(table, attribute, value, semantics),
                rule_conditions)
            if candidate.compare_to(best, n_evaluators)[0] > 0:
                best = candidate
        return best

    def _best_for_attribute(self, attribute: int, considered: np.ndarray,
                            rule_conditions: RuleConditions,
                            best: _EvaluatedCondition) -> _EvaluatedCondition:
        """:return: The best of `best` and the candidates for `attribute`."""
        relation = relation_for(
            rule_conditions.rule_semantics,
            rule_conditions.table.preference_type(attribute))
        values = self._candidate_values(attribute, relation, considered,
                                        rule_conditions)
        return self._test_all(attribute, values, rule_conditions, best)

    def __repr__(self):
        return '{}({!r})'.format(type(self).__name__,
                                 list(self.condition_addition_evaluators))


class StandardConditionGenerator(AbstractConditionGenerator):
    """Evaluates every candidate condition."""


class M1ConditionGenerator(StandardConditionGenerator):
    """`StandardConditionGenerator` skipping attributes already used.

    Assumes that adding a second condition on an attribute cannot improve
    the rule conditions.
    """

    skip_used_attributes = True


class M4OptimizedConditionGenerator(AbstractConditionGenerator):
    """Generator exploiting monotonic evaluators to skip candidate limiting
    values on ordered attributes.

    All evaluators have to be `MonotonicConditionAdditionEvaluator`s. The
    leading evaluators sharing the monotonicity type of the first one form
    the *first group*, the monotonicity type may switch at most once.

    Per attribute, the most extreme candidate is tested first: the most
    restrictive one if the first group deteriorates with the number of covered
    objects, the least restrictive one otherwise. Since every other candidate
    is at most as good on the first group, the attribute is skipped if the
    extreme candidate is worse there than the best condition so far. If all
    evaluators share one monotonicity type, no other candidate needs testing.
    Otherwise less extreme candidates are tested in order, until one is worse
    on the first group.

    The monotonicity of the evaluators w.r.t. the number of covered objects
    is assumed, not verified.
    """

    def __init__(self, condition_addition_evaluators):
        super().__init__(condition_addition_evaluators)
        types = []
        for i, evaluator in enumerate(self.condition_addition_evaluators):
            if not isinstance(evaluator, MonotonicConditionAdditionEvaluator) \
                    or evaluator.monotonicity_type is None:
                raise TypeError("condition_addition_evaluators[{}] = {!r} is "
                                "not monotonic".format(i, evaluator))
            types.append(evaluator.monotonicity_type)
        switches = sum(a is not b for a, b in zip(types, types[1:]))
        if switches > 1:
            raise ValueError("monotonicity type of condition addition "
                             "evaluators may change at most once, but got {}"
                             .format([t.name for t in types]))
        self.first_monotonicity_type = types[0]
        self.first_group_size = types.index(types[-1]) if switches \
            else len(types)

    def _best_for_attribute(self, attribute, considered, rule_conditions,
                            best):
        relation = relation_for(
            rule_conditions.rule_semantics,
            rule_conditions.table.preference_type(attribute))
        values = self._candidate_values(attribute, relation, considered,
                                        rule_conditions)
        if not relation.is_ordered():
            return self._test_all(attribute, values, rule_conditions, best)
        if not len(values):
            return best
        if self.first_monotonicity_type is \
                MonotonicityType.IMPROVES_WITH_NUMBER_OF_COVERED_OBJECTS:
            values = values[::-1]  # least restrictive first

        n_evaluators = len(self.condition_addition_evaluators)
        n_first = self.first_group_size
        table = rule_conditions.table
        semantics = rule_conditions.rule_semantics

        def evaluated(value):
            return self._evaluated(
                make_condition(table, attribute, value, semantics),
                rule_conditions)

        extreme = evaluated(values[0])
        result, _ = extreme.compare_to(best, n_first)
        if result < 0:
            return best
        if result > 0 or extreme.compare_to(best, n_evaluators)[0] > 0:
            best = extreme
        if n_first == n_evaluators:
            return best
        for value in values[1:]:
            candidate = evaluated(value)
            result, deciding = candidate.compare_to(best, n_evaluators)
            if result > 0:
                best = candidate
            elif result < 0 and deciding < n_first:
                break
        return best


class M1M4OptimizedConditionGenerator(M4OptimizedConditionGenerator):
    """`M4OptimizedConditionGenerator` skipping attributes already used."""

    skip_used_attributes = True


# stopping condition checkers


class EvaluationAndCoverageStoppingConditionChecker(
        StoppingConditionCheckerWithThreshold):
    """Satisfied iff the evaluation of the rule conditions satisfies
    `threshold` and all covered objects are allowed to be covered.
    """

    def __init__(self, evaluator: RuleConditionsEvaluator, threshold: float):
        if not isinstance(evaluator, RuleConditionsEvaluator):
            raise TypeError("evaluator must be a RuleConditionsEvaluator, but "
                            "got {!r}".format(evaluator))
        threshold = float(threshold)
        if np.isnan(threshold):
            raise ValueError("threshold must not be NaN")
        self.evaluator = evaluator
        self._threshold = threshold

    @property
    def threshold(self) -> float:
        return self._threshold

    def copy_with_threshold(self, threshold):
        return type(self)(self.evaluator, threshold)

    @staticmethod
    def _only_allowed(rule_conditions: RuleConditions, covered) -> bool:
        return not np.any(covered & ~rule_conditions.allowed_mask)

    def is_satisfied(self, rule_conditions):
        return (self._only_allowed(rule_conditions,
                                   rule_conditions.covered_mask)
                and self.evaluator.evaluation_satisfies_threshold(
                    rule_conditions, self._threshold))

    def is_satisfied_without_condition(self, rule_conditions, index):
        return (self._only_allowed(
                    rule_conditions,
                    rule_conditions.covered_without_condition(index))
                and self.evaluator
                .evaluation_satisfies_threshold_without_condition(
                    rule_conditions, self._threshold, index))

    def is_satisfied_when_replacing_condition(self, rule_conditions, index,
                                              condition):
        return (self._only_allowed(
                    rule_conditions,
                    rule_conditions.covered_when_replacing_condition(
                        index, condition))
                and self.evaluator
                .evaluation_satisfies_threshold_when_replacing_condition(
                    rule_conditions, self._threshold, index, condition))

    def __repr__(self):
        return '{}({!r}, {!r})'.format(type(self).__name__, self.evaluator,
                                       self._threshold)


class CompositeStoppingConditionChecker(StoppingConditionChecker):
    """Satisfied iff all `checkers` are satisfied."""

    def __init__(self, checkers: Sequence[StoppingConditionChecker]):
        self.checkers = check_components(checkers, 'checkers',
                                         StoppingConditionChecker)

    def is_satisfied(self, rule_conditions):
        return all(c.is_satisfied(rule_conditions) for c in self.checkers)

    def is_satisfied_without_condition(self, rule_conditions, index):
        return all(c.is_satisfied_without_condition(rule_conditions, index)
                   for c in self.checkers)

    def is_satisfied_when_replacing_condition(self, rule_conditions, index,
                                              condition):
        return all(c.is_satisfied_when_replacing_condition(
                       rule_conditions, index, condition)
                   for c in self.checkers)

    def __repr__(self):
        return '{}({!r})'.format(type(self).__name__, list(self.checkers))


# local pruners


class _CheckingRuleConditionsPruner(RuleConditionsPruner):
    """A pruner removing conditions only while `stopping_condition_checker`
    stays satisfied.
    """

    def __init__(self, stopping_condition_checker: StoppingConditionChecker):
        if not isinstance(stopping_condition_checker,
                          StoppingConditionChecker):
            raise TypeError("stopping_condition_checker must be a "
                            "StoppingConditionChecker, but got {!r}"
                            .format(stopping_condition_checker))
        self.stopping_condition_checker = stopping_condition_checker

    def copy_with_stopping_condition_checker(self, checker):
        pruner = copy.copy(self)
        pruner.stopping_condition_checker = checker
        return pruner

    def __repr__(self):
        return '{}({!r})'.format(type(self).__name__,
                                 self.stopping_condition_checker)


class FIFORuleConditionsPruner(_CheckingRuleConditionsPruner):
    """Tries removing conditions in the order they were added."""

    def prune(self, rule_conditions):
        is_satisfied_without_condition = \
            self.stopping_condition_checker.is_satisfied_without_condition
        index = 0
        while index < len(rule_conditions):
            if is_satisfied_without_condition(rule_conditions, index):
                rule_conditions.remove_condition(index)
            else:
                index += 1
        return rule_conditions


class AttributeOrderRuleConditionsPruner(_CheckingRuleConditionsPruner):
    """Tries removing conditions in the order of their attributes in the
    information table, conditions on the same attribute in the order they
    were added.
    """

    def prune(self, rule_conditions):
        is_satisfied_without_condition = \
            self.stopping_condition_checker.is_satisfied_without_condition
        for attribute in sorted(rule_conditions.attributes_used):
            for condition in [c for c in rule_conditions
                              if c.attribute_index == attribute]:
                index = rule_conditions.index_of(condition)
                if is_satisfied_without_condition(rule_conditions, index):
                    rule_conditions.remove_condition(index)
        return rule_conditions


class EvaluationsAndOrderRuleConditionsPruner(_CheckingRuleConditionsPruner):
    """Repeatedly removes the removable condition whose removal evaluates
    best (lexicographically by `condition_removal_evaluators`), the earliest
    one on ties.
    """

    def __init__(self, stopping_condition_checker,
                 condition_removal_evaluators:
                 Sequence[ConditionRemovalEvaluator]):
        super().__init__(stopping_condition_checker)
        self.condition_removal_evaluators = check_components(
            condition_removal_evaluators, 'condition_removal_evaluators',
            ConditionRemovalEvaluator)

    def _removal_key(self, rule_conditions, index):
        # sorts ascending from best to worst
        return tuple(-e.evaluate_without_condition(rule_conditions, index)
                     if e.measure_type is MeasureType.GAIN
                     else e.evaluate_without_condition(rule_conditions, index)
                     for e in self.condition_removal_evaluators) + (index,)

    def prune(self, rule_conditions):
        checker = self.stopping_condition_checker
        while len(rule_conditions):
            removable = [i for i in range(len(rule_conditions))
                         if checker.is_satisfied_without_condition(
                             rule_conditions, i)]
            if not removable:
                break
            rule_conditions.remove_condition(min(
                removable,
                key=lambda i: self._removal_key(rule_conditions, i)))
        return rule_conditions


class DummyRuleConditionsPruner(RuleConditionsPruner):
    """Does not prune."""

    def prune(self, rule_conditions):
        return rule_conditions

    def __repr__(self):
        return '{}()'.format(type(self).__name__)


# generalizers


class OptimizingRuleConditionsGeneralizer(RuleConditionsGeneralizer):
    """Relaxes each `>=`/`<=` condition to the least restrictive evaluation of
    an approximation object for which `stopping_condition_checker` still
    holds.

    Limiting values are tried from the current one outwards, stopping at the
    first one breaking the checker.
    """

    def __init__(self, stopping_condition_checker: StoppingConditionChecker):
        if not isinstance(stopping_condition_checker,
                          StoppingConditionChecker):
            raise TypeError("stopping_condition_checker must be a "
                            "StoppingConditionChecker, but got {!r}"
                            .format(stopping_condition_checker))
        self.stopping_condition_checker = stopping_condition_checker

    def copy_with_stopping_condition_checker(self, checker):
        return type(self)(checker)

    def generalize(self, rule_conditions):
        is_satisfied_when_replacing_condition = \
            self.stopping_condition_checker \
            .is_satisfied_when_replacing_condition
        approximation = rule_conditions.approximation_mask
        n_generalized = 0
        for index in range(len(rule_conditions)):
            condition = rule_conditions.condition(index)
            if not condition.relation.is_ordered() \
                    or condition.attribute_index == DECISION_ATTRIBUTE:
                continue
            values = rule_conditions.table.column(
                condition.attribute_index)[approximation]
            limit = condition.limiting_value
            if condition.relation is Relation.AT_LEAST:
                candidates = np.unique(values[values < limit])[::-1]
            else:
                candidates = np.unique(values[values > limit])

            generalized = condition
            for value in candidates:
                candidate = condition._replace(limiting_value=float(value))
                if not is_satisfied_when_replacing_condition(
                        rule_conditions, index, candidate):
                    break
                generalized = candidate
            if generalized != condition:
                rule_conditions.generalize_condition(index, generalized)
                n_generalized += 1
        return n_generalized

    def __repr__(self):
        return '{}({!r})'.format(type(self).__name__,
                                 self.stopping_condition_checker)


class DummyRuleConditionsGeneralizer(RuleConditionsGeneralizer):
    """Does not generalize."""

    def generalize(self, rule_conditions):
        return 0

    def __repr__(self):
        return '{}()'.format(type(self).__name__)


# set pruners


class EvaluationsAndOrderRuleConditionsSetPruner(RuleConditionsSetPruner):
    """Removes rule conditions not needed to cover `must_stay_covered`.

    Candidates for removal are tried from the worst evaluated one
    (lexicographically by `rule_conditions_evaluators`), ties broken by
    preferring more conditions, then later position in the list.
    """

    def __init__(self,
                 rule_conditions_evaluators: Sequence[RuleConditionsEvaluator]):
        self.rule_conditions_evaluators = check_components(
            rule_conditions_evaluators, 'rule_conditions_evaluators',
            RuleConditionsEvaluator)

    def _badness(self, rule_conditions: RuleConditions) -> tuple:
        return tuple(e.evaluate(rule_conditions)
                     if e.measure_type is MeasureType.COST
                     else -e.evaluate(rule_conditions)
                     for e in self.rule_conditions_evaluators)

    def prune(self, rule_conditions_list, must_stay_covered):
        rule_conditions_list = list(rule_conditions_list)
        if not rule_conditions_list:
            return []
        n_objects = rule_conditions_list[0].table.n_objects
        must_stay_covered = as_mask(must_stay_covered, n_objects,
                                    'must_stay_covered')
        coverage_counts = np.sum([rc.covered_mask
                                  for rc in rule_conditions_list],
                                 axis=0, dtype=int)
        # only what is covered in the first place needs to stay covered
        must_stay_covered &= coverage_counts > 0

        removal_order = sorted(
            range(len(rule_conditions_list)),
            key=lambda i: (self._badness(rule_conditions_list[i]),
                           len(rule_conditions_list[i]),
                           i),
            reverse=True)
        kept = np.ones(len(rule_conditions_list), dtype=bool)
        for i in removal_order:
            reduced = coverage_counts - rule_conditions_list[i].covered_mask
            if not np.any(must_stay_covered & (reduced == 0)):
                coverage_counts = reduced
                kept[i] = False
        return [rc for rc, keep in zip(rule_conditions_list, kept) if keep]

    def __repr__(self):
        return '{}({!r})'.format(type(self).__name__,
                                 list(self.rule_conditions_evaluators))


class DummyRuleConditionsSetPruner(RuleConditionsSetPruner):
    """Returns the rule conditions unchanged."""

    def prune(self, rule_conditions_list, must_stay_covered):
        return list(rule_conditions_list)

    def __repr__(self):
        return '{}()'.format(type(self).__name__)


# minimality checkers


class SingleEvaluationRuleMinimalityChecker(RuleMinimalityChecker):
    """Rejects a candidate if an accepted rule describes an approximated set
    included in the candidate's, has conditions at least as general, and is
    not evaluated worse by `evaluator`.
    """

    def __init__(self, evaluator: RuleConditionsEvaluator):
        if not isinstance(evaluator, RuleConditionsEvaluator):
            raise TypeError("evaluator must be a RuleConditionsEvaluator, but "
                            "got {!r}".format(evaluator))
        self.evaluator = evaluator

    def check(self, accepted: Sequence[RuleConditionsWithApproximatedSet],
              candidate: RuleConditionsWithApproximatedSet) -> bool:
        for other in accepted:
            if (candidate.approximated_set.includes(other.approximated_set)
                    and candidate.rule_conditions.is_at_most_as_general_as(
                        other.rule_conditions)
                    and self.evaluator.confront(
                        other.rule_conditions,
                        candidate.rule_conditions) >= 0):
                return False
        return True

    def __repr__(self):
        return '{}({!r})'.format(type(self).__name__, self.evaluator)


class DummyRuleMinimalityChecker(RuleMinimalityChecker):
    """Accepts every rule."""

    def check(self, accepted, candidate):
        return True

    def __repr__(self):
        return '{}()'.format(type(self).__name__)
