"""pytest fixtures for the test cases in this directory."""
from typing import List, Type

import numpy as np
import pytest
from numpy.testing import assert_array_equal

from sklearn_domlem.common import Rule, RuleConditions
from sklearn_domlem.concrete import \
    AbstractConditionGenerator, M1ConditionGenerator, \
    M1M4OptimizedConditionGenerator, M4OptimizedConditionGenerator, \
    StandardConditionGenerator

from .datasets import Dataset, \
    generalizable, inconsistent, interchangeable, mixed_preferences, \
    prunable, random_consistent, three_classes, two_classes, \
    variable_consistency


def assert_coverage_consistent(rule_conditions: RuleConditions):
    """Check that the coverage kept by `rule_conditions` equals the objects
    satisfying all of its conditions.
    """
    expected = np.ones(rule_conditions.table.n_objects, dtype=bool)
    for condition in rule_conditions:
        expected &= condition.match(rule_conditions.table)
    assert_array_equal(rule_conditions.covered_mask, expected,
                       "covered objects differ from matching objects")


# pytest plugin, to print rules on test failure
@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(item, call):
    default = yield
    report = default.get_result()
    if report.failed and report.user_properties:
        for name, prop in report.user_properties:
            if name == 'rules':
                report.longrepr.addsection(name, str(prop))
                break
    return default


@pytest.fixture
def record_rules(record_property):
    def _record(rules: List[Rule]):
        record_property("rules", '\n'.join(map(str, rules)))
    return _record


@pytest.fixture(params=[StandardConditionGenerator,
                        M1ConditionGenerator,
                        M4OptimizedConditionGenerator,
                        M1M4OptimizedConditionGenerator])
def condition_generator_class(request) -> Type[AbstractConditionGenerator]:
    """Fixture running for each of the condition generators from
    `sklearn_domlem.concrete`.

    :return: A generator class.
    """
    return request.param


@pytest.fixture
def two_classes_data() -> Dataset:
    return two_classes()


@pytest.fixture
def three_classes_data() -> Dataset:
    return three_classes()


@pytest.fixture
def inconsistent_data() -> Dataset:
    return inconsistent()


@pytest.fixture
def variable_consistency_data() -> Dataset:
    return variable_consistency()


@pytest.fixture
def generalizable_data() -> Dataset:
    return generalizable()


@pytest.fixture
def prunable_data() -> Dataset:
    return prunable()


@pytest.fixture
def interchangeable_data() -> Dataset:
    return interchangeable()


@pytest.fixture(params=[two_classes,
                        three_classes,
                        mixed_preferences,
                        random_consistent,
                        lambda: random_consistent(n_objects=60,
                                                  n_attributes=4,
                                                  random_state=7),
                        ])
def consistent_data(request) -> Dataset:
    """Fixture running for several consistent learning tables, whose unions
    all have lower approximation equal to the union itself.
    """
    return request.param()
