"""
Implementation of VC-DomLEM sequential covering:
Known configurations of the covering driver.
"""

from sklearn_domlem.common import \
    AllowedNegativeObjectsType, RuleInducerComponents, RuleType
from sklearn_domlem.concrete import \
    AttributeOrderRuleConditionsPruner, \
    EvaluationAndCoverageStoppingConditionChecker, \
    EvaluationsAndOrderRuleConditionsSetPruner, \
    M4OptimizedConditionGenerator, OptimizingRuleConditionsGeneralizer, \
    SingleEvaluationRuleMinimalityChecker
from sklearn_domlem.measures import \
    CoverageInApproximationMeasure, EpsilonConsistencyMeasure, \
    RelativeCoverageOutsideApproximationMeasure, SupportMeasure


class CertainRuleInducerComponents(RuleInducerComponents):
    """Certain rules induced from lower approximations, VC-DomLEM style.

    Defaults:
      - generator: `M4OptimizedConditionGenerator` on epsilon consistency,
        then support
      - stopping condition: epsilon consistency at most
        `consistency_threshold`, only objects of the positive region covered
      - pruner: `AttributeOrderRuleConditionsPruner`
      - generalizer: `OptimizingRuleConditionsGeneralizer`
      - set pruner: `EvaluationsAndOrderRuleConditionsSetPruner` on support,
        then epsilon consistency
      - minimality: `SingleEvaluationRuleMinimalityChecker` on epsilon
        consistency

    Any field of `RuleInducerComponents` may be overridden by keyword. A
    given `stopping_condition_checker` is also used by the default pruner and
    generalizer.
    """

    def __init__(self, consistency_threshold: float = 0.0, **overrides):
        epsilon = EpsilonConsistencyMeasure()
        support = SupportMeasure()
        checker = overrides.pop('stopping_condition_checker', None) or \
            EvaluationAndCoverageStoppingConditionChecker(
                epsilon, consistency_threshold)
        components = dict(
            condition_generator=M4OptimizedConditionGenerator(
                [epsilon, support]),
            stopping_condition_checker=checker,
            rule_conditions_pruner=AttributeOrderRuleConditionsPruner(checker),
            rule_conditions_generalizer=OptimizingRuleConditionsGeneralizer(
                checker),
            rule_conditions_set_pruner=
            EvaluationsAndOrderRuleConditionsSetPruner([support, epsilon]),
            rule_minimality_checker=SingleEvaluationRuleMinimalityChecker(
                epsilon),
            rule_type=RuleType.CERTAIN,
            allowed_negative_objects=AllowedNegativeObjectsType
            .POSITIVE_REGION,
        )
        components.update(overrides)
        super().__init__(**components)


class PossibleRuleInducerComponents(RuleInducerComponents):
    """Possible rules induced from upper approximations.

    Defaults:
      - generator: `M4OptimizedConditionGenerator` on relative coverage
        outside the approximation, then coverage in the approximation
      - stopping condition: no object outside the upper approximation covered
      - pruner: `AttributeOrderRuleConditionsPruner`
      - generalizer: `OptimizingRuleConditionsGeneralizer`
      - set pruner: `EvaluationsAndOrderRuleConditionsSetPruner` on coverage
        in the approximation
      - minimality: `SingleEvaluationRuleMinimalityChecker` on relative
        coverage outside the approximation

    Overrides work like in `CertainRuleInducerComponents`.
    """

    def __init__(self, **overrides):
        outside = RelativeCoverageOutsideApproximationMeasure()
        inside = CoverageInApproximationMeasure()
        checker = overrides.pop('stopping_condition_checker', None) or \
            EvaluationAndCoverageStoppingConditionChecker(outside, 0.0)
        components = dict(
            condition_generator=M4OptimizedConditionGenerator(
                [outside, inside]),
            stopping_condition_checker=checker,
            rule_conditions_pruner=AttributeOrderRuleConditionsPruner(checker),
            rule_conditions_generalizer=OptimizingRuleConditionsGeneralizer(
                checker),
            rule_conditions_set_pruner=
            EvaluationsAndOrderRuleConditionsSetPruner([inside]),
            rule_minimality_checker=SingleEvaluationRuleMinimalityChecker(
                outside),
            rule_type=RuleType.POSSIBLE,
            allowed_negative_objects=AllowedNegativeObjectsType.APPROXIMATION,
        )
        components.update(overrides)
        super().__init__(**components)
