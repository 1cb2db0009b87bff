"""Tests for `sklearn_domlem.common`."""
import numpy as np
import pytest
from numpy.testing import assert_array_equal

from sklearn_domlem.approximations import union_decisions
from sklearn_domlem.common import \
    BasicRuleCoverageInformation, Condition, Relation, Rule, \
    RuleConditions, RuleCoverageInformation, RuleInducerComponents, \
    RuleSemantics, RuleType, StoppingConditionChecker, TernaryLogicValue, \
    conditions_at_most_as_general, make_condition, relation_for
from sklearn_domlem.concrete import DummyRuleConditionsPruner, \
    EvaluationAndCoverageStoppingConditionChecker, \
    FIFORuleConditionsPruner, OptimizingRuleConditionsGeneralizer
from sklearn_domlem.data import DECISION_ATTRIBUTE, InformationTable, \
    PreferenceType
from sklearn_domlem.measures import EpsilonConsistencyMeasure
from sklearn_domlem.predefined import CertainRuleInducerComponents

from .conftest import assert_coverage_consistent

AT_LEAST = Relation.AT_LEAST
AT_MOST = Relation.AT_MOST
EQUAL = Relation.EQUAL


def test_condition():
    condition = Condition(0, AT_LEAST, 5.0)
    assert condition.satisfied_by(5)
    assert condition.satisfied_by(7)
    assert not condition.satisfied_by(4.9)
    assert Condition(0, AT_MOST, 5.0).satisfied_by(3)
    assert not Condition(0, EQUAL, 5.0).satisfied_by(3)
    assert str(condition) == '(a1 >= 5)'
    assert str(Condition(DECISION_ATTRIBUTE, AT_MOST, 2)) == '(decision <= 2)'


def test_condition_match(two_classes_data):
    table = two_classes_data.table
    assert_array_equal(Condition(0, AT_LEAST, 5.0).match(table),
                       [True, False, True, False, True, False])
    assert_array_equal(Condition(DECISION_ATTRIBUTE, AT_MOST, 1).match(table),
                       [False, True, False, True, False, True])
    assert Condition(1, AT_MOST, 2.5).to_string(table) == '(attr2 <= 2.5)'


@pytest.mark.parametrize('specific, general, expected', [
    (Condition(0, AT_LEAST, 5), Condition(0, AT_LEAST, 3),
     TernaryLogicValue.TRUE),
    (Condition(0, AT_LEAST, 3), Condition(0, AT_LEAST, 3),
     TernaryLogicValue.TRUE),
    (Condition(0, AT_LEAST, 3), Condition(0, AT_LEAST, 5),
     TernaryLogicValue.FALSE),
    (Condition(0, AT_MOST, 3), Condition(0, AT_MOST, 5),
     TernaryLogicValue.TRUE),
    (Condition(0, AT_MOST, 5), Condition(0, AT_MOST, 3),
     TernaryLogicValue.FALSE),
    (Condition(0, EQUAL, 1), Condition(0, EQUAL, 1), TernaryLogicValue.TRUE),
    (Condition(0, EQUAL, 1), Condition(0, EQUAL, 2), TernaryLogicValue.FALSE),
    (Condition(0, AT_LEAST, 5), Condition(1, AT_LEAST, 3),
     TernaryLogicValue.UNCOMPARABLE),
    (Condition(0, AT_LEAST, 5), Condition(0, AT_MOST, 7),
     TernaryLogicValue.UNCOMPARABLE),
])
def test_condition_generality(specific, general, expected):
    assert specific.is_at_most_as_general_as(general) is expected


def test_conditions_at_most_as_general():
    specific = [Condition(0, AT_LEAST, 5), Condition(1, AT_MOST, 2)]
    assert conditions_at_most_as_general(specific, [Condition(0, AT_LEAST, 4)])
    assert conditions_at_most_as_general(specific, specific)
    assert conditions_at_most_as_general(specific, [])
    assert not conditions_at_most_as_general(specific,
                                             [Condition(2, AT_LEAST, 0)])
    assert not conditions_at_most_as_general([], specific)


@pytest.mark.parametrize('semantics, preference, expected', [
    (RuleSemantics.AT_LEAST, PreferenceType.GAIN, AT_LEAST),
    (RuleSemantics.AT_LEAST, PreferenceType.COST, AT_MOST),
    (RuleSemantics.AT_MOST, PreferenceType.GAIN, AT_MOST),
    (RuleSemantics.AT_MOST, PreferenceType.COST, AT_LEAST),
    (RuleSemantics.AT_LEAST, PreferenceType.NONE, EQUAL),
    (RuleSemantics.EQUAL, PreferenceType.GAIN, EQUAL),
])
def test_relation_for(semantics, preference, expected):
    assert relation_for(semantics, preference) is expected


def test_make_condition():
    table = InformationTable([[1, 2]], [1], preference_types=['gain', 'cost'])
    assert make_condition(table, 1, 2, RuleSemantics.AT_LEAST) == \
        Condition(1, AT_MOST, 2.0)
    assert make_condition(table, 0, 1, RuleSemantics.AT_MOST) == \
        Condition(0, AT_MOST, 1.0)


def test_rule_conditions_coverage(two_classes_data):
    """A single condition `attr1 >= 5` covers exactly the decision 2 objects.
    """
    union = two_classes_data.upward(2)
    rc = two_classes_data.rule_conditions(union, seed=0)
    assert len(rc) == 0
    assert str(rc) == '(true)'
    assert_array_equal(rc.covered_objects, np.arange(6))

    index = rc.add_condition(Condition(0, AT_LEAST, 5))
    assert index == 0
    assert_array_equal(rc.covered_objects, [0, 2, 4])
    assert rc.covers(0)
    assert not rc.covers(1)
    assert str(rc) == '(attr1 >= 5)'
    assert_coverage_consistent(rc)
    assert_array_equal(rc.positive_objects, [0, 2, 4])
    assert_array_equal(rc.approximation_objects, [0, 2, 4])
    assert_array_equal(rc.allowed_objects, [0, 2, 4])
    assert_array_equal(rc.neutral_objects, [])
    assert_array_equal(rc.negative_mask,
                       [False, True, False, True, False, True])


def test_rule_conditions_mutation(two_classes_data):
    union = two_classes_data.upward(2)
    c1 = Condition(0, AT_LEAST, 4)
    c2 = Condition(1, AT_LEAST, 2)
    c3 = Condition(0, AT_LEAST, 6)
    rc = two_classes_data.rule_conditions(union, c1, c2, c3)
    assert rc.conditions == (c1, c2, c3)
    assert_array_equal(rc.covered_objects, [2, 4])
    assert_coverage_consistent(rc)
    assert rc.index_of(c2) == 1
    assert rc.index_of(Condition(1, AT_LEAST, 3)) == -1
    assert c3 in rc
    assert rc.condition_indices_for_attribute(0) == [0, 2]
    assert rc.attributes_used == {0, 1}
    assert rc.has_condition_for_attribute(1)

    # hypothetical coverage does not modify
    assert_array_equal(np.flatnonzero(rc.covered_without_condition(2)),
                       [2, 4, 5])
    assert_array_equal(np.flatnonzero(rc.covered_with_condition(
        Condition(1, AT_LEAST, 3))), [4])
    assert_array_equal(np.flatnonzero(rc.covered_when_replacing_condition(
        1, Condition(1, AT_LEAST, 3))), [4])
    assert_array_equal(rc.covered_objects, [2, 4])

    assert rc.remove_condition(2) == c3
    assert rc.conditions == (c1, c2)
    assert_array_equal(rc.covered_objects, [2, 4, 5])
    assert_coverage_consistent(rc)

    rc.remove_condition(0)
    assert_array_equal(rc.covered_objects, [1, 2, 3, 4, 5])
    assert_coverage_consistent(rc)
    rc.remove_condition(0)
    assert_array_equal(rc.covered_objects, np.arange(6))


def test_rule_conditions_generalize(two_classes_data):
    union = two_classes_data.upward(2)
    rc = two_classes_data.rule_conditions(union, Condition(0, AT_LEAST, 6),
                                          Condition(1, AT_LEAST, 2))
    assert_array_equal(rc.covered_objects, [2, 4])
    rc.generalize_condition(0, Condition(0, AT_LEAST, 5))
    assert rc.conditions[0] == Condition(0, AT_LEAST, 5)
    assert_array_equal(rc.covered_objects, [2, 4])
    assert_coverage_consistent(rc)
    rc.generalize_condition(1, Condition(1, AT_LEAST, 1))
    assert_array_equal(rc.covered_objects, [0, 2, 4])
    assert_coverage_consistent(rc)

    # more specific
    with pytest.raises(ValueError, match='cannot generalize'):
        rc.generalize_condition(0, Condition(0, AT_LEAST, 6))
    # other attribute
    with pytest.raises(ValueError, match='cannot generalize'):
        rc.generalize_condition(0, Condition(1, AT_LEAST, 0))
    # would cover object 5, which is not in the positive region
    with pytest.raises(ValueError, match='must not be covered'):
        rc.generalize_condition(0, Condition(0, AT_LEAST, 4))
    assert rc.conditions[0] == Condition(0, AT_LEAST, 5)
    assert_coverage_consistent(rc)


def test_rule_conditions_index_errors(two_classes_data):
    rc = two_classes_data.rule_conditions(two_classes_data.upward(2),
                                          Condition(0, AT_LEAST, 5))
    for index in (1, -1):
        with pytest.raises(IndexError):
            rc.condition(index)
        with pytest.raises(IndexError):
            rc.remove_condition(index)
        with pytest.raises(IndexError):
            rc.covered_without_condition(index)
        with pytest.raises(IndexError):
            rc.generalize_condition(index, Condition(0, AT_LEAST, 1))
    assert len(rc) == 1


def test_rule_conditions_invalid_objects(two_classes_data):
    table = two_classes_data.table
    with pytest.raises(ValueError):
        RuleConditions(table, [0, 6], [0], [0])
    with pytest.raises(ValueError):
        RuleConditions(table, [0], [0], [0], seed=6)


def test_rule_conditions_frozen(two_classes_data):
    rc = two_classes_data.rule_conditions(two_classes_data.upward(2),
                                          Condition(0, AT_LEAST, 5))
    assert rc.freeze() is rc
    assert rc.frozen
    with pytest.raises(ValueError, match='read-only'):
        rc.add_condition(Condition(1, AT_LEAST, 1))
    with pytest.raises(ValueError, match='read-only'):
        rc.remove_condition(0)
    with pytest.raises(ValueError, match='read-only'):
        rc.generalize_condition(0, Condition(0, AT_LEAST, 4))
    # hypothetical queries still work
    assert_array_equal(np.flatnonzero(rc.covered_without_condition(0)),
                       np.arange(6))
    with pytest.raises(ValueError):
        rc.covered_mask[0] = False

    copy = rc.copy()
    assert not copy.frozen
    copy.add_condition(Condition(1, AT_LEAST, 2))
    assert len(rc) == 1
    assert_array_equal(rc.covered_objects, [0, 2, 4])
    assert_array_equal(copy.covered_objects, [2, 4])


def test_rule_conditions_generality(two_classes_data):
    union = two_classes_data.upward(2)
    general = two_classes_data.rule_conditions(union,
                                               Condition(0, AT_LEAST, 4))
    specific = two_classes_data.rule_conditions(union,
                                                Condition(0, AT_LEAST, 5),
                                                Condition(1, AT_LEAST, 2))
    assert specific.is_at_most_as_general_as(general)
    assert not general.is_at_most_as_general_as(specific)
    assert specific.is_at_most_as_general_as(specific)


def test_rule(two_classes_data):
    table = two_classes_data.table
    union = two_classes_data.upward(2)
    rc = two_classes_data.rule_conditions(union, Condition(0, AT_LEAST, 4))
    rule = Rule.from_rule_conditions(rc, union, union_decisions)
    assert rc.frozen
    assert rule.rule_type is RuleType.CERTAIN
    assert rule.rule_semantics is RuleSemantics.AT_LEAST
    assert rule.inherent_decision == 2
    assert rule.to_string(table) == '(attr1 >= 4) => (decision >= 2)'
    assert str(rule) == '(a1 >= 4) => (decision >= 2)'
    assert_array_equal(np.flatnonzero(rule.match(table)), [0, 2, 4, 5])
    assert_array_equal(np.flatnonzero(rule.supported_by(table)), [0, 2, 4])

    coverage = BasicRuleCoverageInformation.from_rule(rule, table)
    assert_array_equal(coverage.covered_objects, [0, 2, 4, 5])
    assert_array_equal(coverage.decisions_of_covered_objects, [2, 2, 2, 1])
    assert_array_equal(coverage.not_supporting_objects, [5])
    assert coverage.n_objects == 6


def test_rule_disjunctive_decisions(three_classes_data):
    table = three_classes_data.table
    rule = Rule(RuleType.APPROXIMATE, RuleSemantics.EQUAL, 2, (),
                (Condition(DECISION_ATTRIBUTE, EQUAL, 1),
                 Condition(DECISION_ATTRIBUTE, EQUAL, 3)))
    assert rule.to_string() == \
        '(true) => (decision = 1) OR (decision = 3)'
    assert_array_equal(rule.match(table), [True] * 5)
    assert_array_equal(np.flatnonzero(rule.supported_by(table)),
                       [0, 1, 3, 4])


def test_rule_coverage_information(two_classes_data):
    union = two_classes_data.upward(2)
    rc = two_classes_data.rule_conditions(union, Condition(0, AT_LEAST, 4))
    coverage = RuleCoverageInformation.from_rule_conditions(rc)
    assert_array_equal(coverage.covered_objects, [0, 2, 4, 5])
    assert_array_equal(coverage.positive_objects, [0, 2, 4])
    assert_array_equal(coverage.neutral_objects, [])

    rule = Rule.from_rule_conditions(rc, union, union_decisions)
    coverage = RuleCoverageInformation.from_rule(
        rule, two_classes_data.table, neutral_objects=[1])
    assert_array_equal(coverage.neutral_objects, [1])
    assert_array_equal(coverage.not_supporting_objects, [5])


def test_rule_inducer_components():
    components = CertainRuleInducerComponents(consistency_threshold=0.1)
    assert components.stopping_condition_checker.threshold == 0.1
    assert components.rule_type is RuleType.CERTAIN
    assert set(components.as_dict()) == {name for name, _
                                         in RuleInducerComponents._FIELDS}
    assert 'CertainRuleInducerComponents(' in repr(components)

    changed = components.copy_with(rule_conditions_pruner=
                                   DummyRuleConditionsPruner())
    assert isinstance(changed.rule_conditions_pruner,
                      DummyRuleConditionsPruner)
    assert changed.condition_generator is components.condition_generator
    with pytest.raises(ValueError, match='unknown components'):
        components.copy_with(pruner=DummyRuleConditionsPruner())
    with pytest.raises(TypeError, match='rule_conditions_pruner'):
        components.copy_with(rule_conditions_pruner=None)
    with pytest.raises(TypeError, match='rule_type'):
        components.copy_with(rule_type='certain')


def test_rule_inducer_components_threshold():
    checker = EvaluationAndCoverageStoppingConditionChecker(
        EpsilonConsistencyMeasure(), 0.0)
    components = CertainRuleInducerComponents(
        stopping_condition_checker=checker,
        rule_conditions_pruner=FIFORuleConditionsPruner(checker))
    assert components.rule_conditions_generalizer \
        .stopping_condition_checker is checker

    changed = components.copy_with_threshold(0.25)
    new_checker = changed.stopping_condition_checker
    assert new_checker.threshold == 0.25
    assert checker.threshold == 0.0
    assert isinstance(changed.rule_conditions_pruner,
                      FIFORuleConditionsPruner)
    assert changed.rule_conditions_pruner \
        .stopping_condition_checker is new_checker
    assert isinstance(changed.rule_conditions_generalizer,
                      OptimizingRuleConditionsGeneralizer)
    assert changed.rule_conditions_generalizer \
        .stopping_condition_checker is new_checker
    assert components.rule_conditions_pruner \
        .stopping_condition_checker is checker


def test_rule_inducer_components_without_threshold():
    class OnlyAllowedObjects(StoppingConditionChecker):
        def is_satisfied(self, rule_conditions):
            return not np.any(rule_conditions.covered_mask
                              & ~rule_conditions.allowed_mask)

    components = CertainRuleInducerComponents(
        stopping_condition_checker=OnlyAllowedObjects())
    with pytest.raises(TypeError, match='has no threshold'):
        components.copy_with_threshold(0.5)
