"""
Implementation of VC-DomLEM sequential covering: the covering driver.
"""

import logging
import warnings
from typing import Callable, Iterable, List, Sequence

import numpy as np

from sklearn.base import BaseEstimator
from sklearn.utils.validation import check_is_fitted

from sklearn_domlem.approximations import ApproximatedSet, union_decisions
from sklearn_domlem.common import \
    Condition, Rule, RuleConditions, RuleConditionsWithApproximatedSet, \
    RuleInducerComponents
from sklearn_domlem.concrete import ElementaryConditionNotFoundError
from sklearn_domlem.predefined import CertainRuleInducerComponents

logger = logging.getLogger(__name__)

DecisionsProvider = Callable[[ApproximatedSet], Iterable[Condition]]


# noinspection PyAttributeOutsideInit
class VCDomLEM(BaseEstimator):
    """Sequential covering of approximated sets by decision rules, deferring
    to :var:`components` for the concrete strategies.

    For each approximated set, rule conditions are grown from an empty
    conjunction (started for the first not yet covered object of the
    approximation) until the stopping condition is satisfied, then pruned and
    generalized, until all objects of the approximation are covered. The
    rule conditions found for one approximated set are reduced by the set
    pruner, and each is accepted only if the minimality checker accepts it
    w.r.t. the rules accepted before (for all approximated sets).

    Parameters
    -----
    components : RuleInducerComponents or None
        The strategies to use. None (the default) means
        `predefined.CertainRuleInducerComponents()`, i.e. certain rules with
        consistency threshold 0.

    Attributes
    -----
    components_ : RuleInducerComponents
        The strategies actually used.

    rule_conditions_ : list of RuleConditionsWithApproximatedSet
        The accepted (read-only) rule conditions with the approximated set
        each was induced for, in order of acceptance.

    rules_ : list of Rule
        The induced rules, corresponding to `rule_conditions_`.

    table_ : InformationTable
        The learning table of the approximated sets.
    """

    def __init__(self, components: RuleInducerComponents = None):
        super().__init__()
        self.components = components

    def fit(self, approximated_sets: Sequence[ApproximatedSet],
            decisions_provider: DecisionsProvider = union_decisions,
            consistency_thresholds: Sequence[float] = None):
        """Induce rules for all `approximated_sets`.

        :param approximated_sets: The approximated sets to describe, all of the
            same information table. Processed in the given order, which
            matters for minimality checking: more specific sets should come
            first (see `approximations.Unions`).
        :param decisions_provider: Maps an approximated set to the decisions
            of the rules describing it.
        :param consistency_thresholds: If given, one threshold per approximated
            set, replacing the one of the stopping condition checker (see
            `RuleInducerComponents.copy_with_threshold`).
        :return: self
        """
        self.components_ = (self.components if self.components is not None
                            else CertainRuleInducerComponents())
        if not isinstance(self.components_, RuleInducerComponents):
            raise TypeError("components must be a RuleInducerComponents, but "
                            "got {!r}".format(self.components_))
        approximated_sets = list(approximated_sets)
        if not approximated_sets:
            raise ValueError("no approximated sets given")
        self.table_ = approximated_sets[0].table
        if any(s.table is not self.table_ for s in approximated_sets):
            raise ValueError("approximated sets of different information "
                             "tables given")
        if consistency_thresholds is None:
            set_components = [self.components_] * len(approximated_sets)
        else:
            consistency_thresholds = list(consistency_thresholds)
            if len(consistency_thresholds) != len(approximated_sets):
                raise ValueError("got {} consistency thresholds for {} "
                                 "approximated sets"
                                 .format(len(consistency_thresholds),
                                         len(approximated_sets)))
            set_components = [self.components_.copy_with_threshold(t)
                              for t in consistency_thresholds]

        # resolve methods once for performance
        check_minimality = self.components_.rule_minimality_checker.check
        cover_approximated_set = self.cover_approximated_set

        # main loop
        accepted: List[RuleConditionsWithApproximatedSet] = []
        for approximated_set, components in zip(approximated_sets,
                                                set_components):
            n_accepted = len(accepted)
            for rule_conditions in cover_approximated_set(approximated_set,
                                                          components):
                candidate = RuleConditionsWithApproximatedSet(
                    rule_conditions, approximated_set)
                if check_minimality(accepted, candidate):
                    rule_conditions.freeze()
                    accepted.append(candidate)
                else:
                    logger.debug("discarded non-minimal %s for %s",
                                 rule_conditions, approximated_set)
            logger.info("accepted %d rules for %s",
                        len(accepted) - n_accepted, approximated_set)

        self.rule_conditions_ = accepted
        self.rules_ = [Rule.from_rule_conditions(rc, approximated_set,
                                                 decisions_provider)
                       for rc, approximated_set in accepted]
        return self

    def generate_rules(self, approximated_sets: Sequence[ApproximatedSet],
                       decisions_provider: DecisionsProvider = union_decisions,
                       consistency_thresholds: Sequence[float] = None
                       ) -> List[Rule]:
        """:return: `fit(...).rules_`"""
        return self.fit(approximated_sets, decisions_provider,
                        consistency_thresholds).rules_

    def cover_approximated_set(self, approximated_set: ApproximatedSet,
                               components: RuleInducerComponents
                               ) -> List[RuleConditions]:
        """Outer loop of sequential covering, for one approximated set.

        :return: rule conditions jointly covering the approximation of
            `approximated_set` (for `components.rule_type`), after set
            pruning.
        """
        rule_type = components.rule_type
        table = approximated_set.table
        approximation = approximated_set.approximation(rule_type)
        allowed = approximated_set.allowed_objects(
            components.allowed_negative_objects, rule_type)
        if not approximation.any():
            warnings.warn("{} approximation of {} is empty, no rules induced"
                          .format(rule_type.value, approximated_set))
            return []

        # resolve methods once for performance
        find_rule_conditions = self.find_rule_conditions
        prune_set = components.rule_conditions_set_pruner.prune

        not_covered = approximation.copy()
        rule_conditions_list: List[RuleConditions] = []
        while not_covered.any():
            seed = int(np.flatnonzero(not_covered)[0])
            rule_conditions = RuleConditions(
                table,
                positive_objects=approximated_set.objects_mask,
                approximation_objects=approximation,
                allowed_objects=allowed,
                neutral_objects=approximated_set.neutral_objects,
                rule_type=rule_type,
                rule_semantics=approximated_set.rule_semantics,
                seed=seed)
            try:
                find_rule_conditions(rule_conditions, not_covered, components)
            except ElementaryConditionNotFoundError as e:
                logger.error("cannot separate objects for %s, seed %d",
                             approximated_set, seed)
                raise ElementaryConditionNotFoundError(
                    "inducing rule for {} from seed object {} failed: {}"
                    .format(approximated_set, seed, e),
                    e.rule_conditions) from e
            newly_covered = rule_conditions.covered_mask & not_covered
            if not newly_covered.any():
                raise ElementaryConditionNotFoundError(
                    "{} for {} covers no uncovered object"
                    .format(rule_conditions, approximated_set),
                    rule_conditions)
            not_covered &= ~newly_covered
            rule_conditions_list.append(rule_conditions)

        pruned = prune_set(rule_conditions_list, approximation)
        logger.debug("set pruning for %s kept %d of %d rule conditions",
                     approximated_set, len(pruned), len(rule_conditions_list))
        return pruned

    def find_rule_conditions(self, rule_conditions: RuleConditions,
                             not_covered: np.ndarray,
                             components: RuleInducerComponents
                             ) -> RuleConditions:
        """Inner loop of sequential covering: grow `rule_conditions` until the
        stopping condition is satisfied, then prune and generalize it.

        :param not_covered: Mask of the approximation objects not covered by
            previously found rule conditions. Conditions are built from those
            of them still covered.
        :return: `rule_conditions`, modified in place.
        """

        # resolve methods once for performance
        get_best_condition = components.condition_generator.get_best_condition
        is_satisfied = components.stopping_condition_checker.is_satisfied
        add_condition = rule_conditions.add_condition

        while not is_satisfied(rule_conditions):
            add_condition(get_best_condition(
                not_covered & rule_conditions.covered_mask, rule_conditions))
        logger.debug("grown %s", rule_conditions)

        components.rule_conditions_pruner.prune(rule_conditions)
        n_generalized = components.rule_conditions_generalizer.generalize(
            rule_conditions)
        logger.debug("pruned and generalized (%d conditions) to %s",
                     n_generalized, rule_conditions)
        return rule_conditions

    def export_text(self) -> str:
        """:return: the induced rules, one per line."""
        check_is_fitted(self, 'rules_')
        return '\n'.join(rule.to_string(self.table_) for rule in self.rules_)
