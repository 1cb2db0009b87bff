"""
Implementation of VC-DomLEM sequential covering:
Common `Condition`, `RuleConditions` and `Rule`, and the interfaces of the
strategies plugged into the covering driver.
"""

import math
from abc import ABC, abstractmethod
from enum import Enum
from typing import Iterable, List, NamedTuple, Sequence, Tuple

import numpy as np

from sklearn_domlem.data import DECISION_ATTRIBUTE, InformationTable, \
    PreferenceType
from sklearn_domlem.util import as_mask, read_only


class Relation(Enum):
    """Relation between an evaluation and the limiting value of a
    `Condition`. Values are the symbols used when printing.
    """
    AT_LEAST = '>='
    AT_MOST = '<='
    EQUAL = '='

    def apply(self, values, limiting_value):
        """:return: bool (array), whether `values` satisfy the relation."""
        if self is Relation.AT_LEAST:
            return np.greater_equal(values, limiting_value)
        if self is Relation.AT_MOST:
            return np.less_equal(values, limiting_value)
        return np.equal(values, limiting_value)

    def is_ordered(self) -> bool:
        return self is not Relation.EQUAL


class TernaryLogicValue(Enum):
    TRUE = 1
    FALSE = 0
    UNCOMPARABLE = None


class RuleType(Enum):
    CERTAIN = 'certain'
    POSSIBLE = 'possible'
    APPROXIMATE = 'approximate'


class RuleSemantics(Enum):
    AT_LEAST = 'at least'
    AT_MOST = 'at most'
    EQUAL = 'equal'


class AllowedNegativeObjectsType(Enum):
    """Which objects outside the approximated set a rule may still cover."""
    POSITIVE_REGION = 'positive region'
    POSITIVE_AND_BOUNDARY_REGIONS = 'positive and boundary regions'
    ANY_REGION = 'any region'
    APPROXIMATION = 'approximation'


class Condition(NamedTuple):
    """An elementary condition `attribute relation limiting_value`.

    `attribute_index` may be `data.DECISION_ATTRIBUTE`, then the condition
    tests the decision of an object (used for rule decisions).
    """
    attribute_index: int
    relation: Relation
    limiting_value: float

    def satisfied_by(self, value) -> bool:
        return bool(self.relation.apply(value, self.limiting_value))

    def match(self, table: InformationTable) -> np.ndarray:
        """:return: A bool array of length `table.n_objects`, telling for each
            object whether it satisfies the condition.
        """
        return self.relation.apply(table.column(self.attribute_index),
                                   self.limiting_value)

    def is_at_most_as_general_as(self, other: 'Condition'
                                 ) -> TernaryLogicValue:
        """Tell whether every value satisfying `self` satisfies `other`.

        Conditions are only comparable if they test the same attribute with
        the same relation.
        """
        if (self.attribute_index != other.attribute_index
                or self.relation is not other.relation):
            return TernaryLogicValue.UNCOMPARABLE
        return (TernaryLogicValue.TRUE
                if other.satisfied_by(self.limiting_value)
                else TernaryLogicValue.FALSE)

    def to_string(self, table: InformationTable = None) -> str:
        name = (table.attribute_name(self.attribute_index)
                if table is not None
                else 'decision' if self.attribute_index == DECISION_ATTRIBUTE
                else 'a{}'.format(self.attribute_index + 1))
        return '({} {} {:g})'.format(name, self.relation.value,
                                     self.limiting_value)

    def __str__(self):
        return self.to_string()


def relation_for(rule_semantics: RuleSemantics,
                 preference_type: PreferenceType) -> Relation:
    """:return: The relation of conditions built for a rule with
        `rule_semantics` on an attribute with `preference_type`.

    "at least" on a gain attribute means `>=`, on a cost attribute `<=`;
    "at most" the other way round. Nominal attributes and "equal" rules
    always use `=`.
    """
    if (rule_semantics is RuleSemantics.EQUAL
            or preference_type is PreferenceType.NONE):
        return Relation.EQUAL
    at_least = rule_semantics is RuleSemantics.AT_LEAST
    gain = preference_type is PreferenceType.GAIN
    return Relation.AT_LEAST if at_least == gain else Relation.AT_MOST


def make_condition(table: InformationTable,
                   attribute_index: int,
                   limiting_value,
                   rule_semantics: RuleSemantics) -> Condition:
    """Build the elementary condition for `attribute_index` fitting
    `rule_semantics`, see `relation_for`.
    """
    return Condition(attribute_index,
                     relation_for(rule_semantics,
                                  table.preference_type(attribute_index)),
                     float(limiting_value))


class RuleConditions:
    """A conjunction of elementary conditions being grown into a rule, and
    the coverage of the learning table it implies.

    The covered objects are always exactly those satisfying every condition.
    For each object the number of conditions it does *not* satisfy is kept
    as well, so that the coverage after hypothetically removing or replacing
    one condition can be computed without re-matching all conditions.

    All index sets are given as object indices (or bool masks) into `table`
    and are fixed at construction.

    Parameters
    -----
    table : InformationTable
        The learning data.

    positive_objects :
        Objects supporting the decision of the rule, i.e. members of the
        approximated set.

    approximation_objects :
        Objects of the approximation the rule is induced for. Elementary
        conditions are built from their evaluations.

    allowed_objects :
        Objects the rule is allowed to cover, see
        `AllowedNegativeObjectsType`.

    neutral_objects :
        Objects neither counted as positive nor as negative.

    rule_type : RuleType

    rule_semantics : RuleSemantics

    seed : int or None
        Index of the positive object this conjunction was started for.
    """

    def __init__(self,
                 table: InformationTable,
                 positive_objects,
                 approximation_objects,
                 allowed_objects,
                 neutral_objects=(),
                 rule_type: RuleType = RuleType.CERTAIN,
                 rule_semantics: RuleSemantics = RuleSemantics.AT_LEAST,
                 seed: int = None):
        n_objects = table.n_objects
        if seed is not None and not 0 <= seed < n_objects:
            raise ValueError("seed object {} out of range [0, {})"
                             .format(seed, n_objects))
        self.table = table
        self._positive = as_mask(positive_objects, n_objects,
                                 'positive_objects')
        self._approximation = as_mask(approximation_objects, n_objects,
                                      'approximation_objects')
        self._allowed = as_mask(allowed_objects, n_objects,
                                'allowed_objects')
        self._neutral = as_mask(neutral_objects, n_objects,
                                'neutral_objects')
        self.rule_type = rule_type
        self.rule_semantics = rule_semantics
        self.seed = seed
        self._conditions: List[Condition] = []
        self._condition_masks: List[np.ndarray] = []
        self._not_covering_counts = np.zeros(n_objects, dtype=int)
        self._covered = np.ones(n_objects, dtype=bool)
        self._frozen = False

    def copy(self) -> 'RuleConditions':
        """:return: A mutable copy with the same conditions, sharing only the
            immutable index sets and table.
        """
        copy = object.__new__(type(self))
        copy.__dict__.update(self.__dict__)
        copy._conditions = list(self._conditions)
        copy._condition_masks = list(self._condition_masks)
        copy._not_covering_counts = self._not_covering_counts.copy()
        copy._covered = self._covered.copy()
        copy._frozen = False
        return copy

    # conditions

    @property
    def conditions(self) -> Tuple[Condition, ...]:
        return tuple(self._conditions)

    def condition(self, index: int) -> Condition:
        self._check_index(index)
        return self._conditions[index]

    def index_of(self, condition: Condition) -> int:
        """:return: the index of `condition`, -1 if not contained."""
        try:
            return self._conditions.index(condition)
        except ValueError:
            return -1

    def __len__(self):
        return len(self._conditions)

    def __iter__(self):
        return iter(self.conditions)

    def __contains__(self, condition):
        return condition in self._conditions

    def has_condition_for_attribute(self, attribute_index: int) -> bool:
        return any(c.attribute_index == attribute_index
                   for c in self._conditions)

    def condition_indices_for_attribute(self, attribute_index: int
                                        ) -> List[int]:
        return [i for i, c in enumerate(self._conditions)
                if c.attribute_index == attribute_index]

    @property
    def attributes_used(self) -> frozenset:
        return frozenset(c.attribute_index for c in self._conditions)

    # mutation

    def add_condition(self, condition: Condition) -> int:
        """Append `condition` to the conjunction.

        :return: the index of the new condition.
        """
        self._check_mutable()
        mask = condition.match(self.table)
        self._conditions.append(condition)
        self._condition_masks.append(mask)
        self._not_covering_counts += ~mask
        self._covered &= mask
        return len(self._conditions) - 1

    def remove_condition(self, index: int) -> Condition:
        """Remove the condition at `index`.

        :return: the removed condition.
        """
        self._check_mutable()
        self._check_index(index)
        mask = self._condition_masks.pop(index)
        self._not_covering_counts -= ~mask
        self._covered = self._not_covering_counts == 0
        return self._conditions.pop(index)

    def generalize_condition(self, index: int, condition: Condition):
        """Replace the condition at `index` by a more general `condition`.

        :raise ValueError: if `condition` is not at least as general as the
            replaced one, or if it would make the conjunction cover an object
            which is not allowed to be covered.
        """
        self._check_mutable()
        self._check_index(index)
        old = self._conditions[index]
        if old.is_at_most_as_general_as(condition) is not \
                TernaryLogicValue.TRUE:
            raise ValueError("cannot generalize {} by {} in {}"
                             .format(old, condition, self))
        covered = self.covered_when_replacing_condition(index, condition)
        not_allowed = np.flatnonzero(covered & ~self._covered & ~self._allowed)
        if len(not_allowed):
            raise ValueError("generalizing {} to {} in {} covers objects {} "
                             "which must not be covered"
                             .format(old, condition, self, not_allowed))
        self._replace_condition(index, condition)

    def _replace_condition(self, index: int, condition: Condition):
        """Replace without any checks, only for hypothetical copies and
        `generalize_condition`.
        """
        new_mask = condition.match(self.table)
        self._not_covering_counts -= ~self._condition_masks[index]
        self._not_covering_counts += ~new_mask
        self._conditions[index] = condition
        self._condition_masks[index] = new_mask
        self._covered = self._not_covering_counts == 0

    def freeze(self) -> 'RuleConditions':
        """Make `self` read-only, e.g. after it has been accepted for a rule.

        :return: self
        """
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    # coverage

    @property
    def covered_mask(self) -> np.ndarray:
        return read_only(self._covered)

    @property
    def covered_objects(self) -> np.ndarray:
        return np.flatnonzero(self._covered)

    def covers(self, object_index: int) -> bool:
        return bool(self._covered[object_index])

    def condition_mask(self, index: int) -> np.ndarray:
        """:return: which objects satisfy the condition at `index`."""
        self._check_index(index)
        return read_only(self._condition_masks[index])

    def covered_with_condition(self, condition: Condition) -> np.ndarray:
        """:return: the covered-objects mask if `condition` was appended."""
        return self._covered & condition.match(self.table)

    def covered_without_condition(self, index: int) -> np.ndarray:
        """:return: the covered-objects mask if the condition at `index` was
            removed.
        """
        self._check_index(index)
        return (self._not_covering_counts
                - ~self._condition_masks[index]) == 0

    def covered_when_replacing_condition(self, index: int,
                                         condition: Condition) -> np.ndarray:
        """:return: the covered-objects mask if the condition at `index` was
            replaced by `condition`.
        """
        self._check_index(index)
        return (self._not_covering_counts
                - ~self._condition_masks[index]
                + ~condition.match(self.table)) == 0

    # fixed index sets

    @property
    def positive_mask(self) -> np.ndarray:
        return read_only(self._positive)

    @property
    def positive_objects(self) -> np.ndarray:
        return np.flatnonzero(self._positive)

    @property
    def approximation_mask(self) -> np.ndarray:
        return read_only(self._approximation)

    @property
    def approximation_objects(self) -> np.ndarray:
        return np.flatnonzero(self._approximation)

    @property
    def allowed_mask(self) -> np.ndarray:
        return read_only(self._allowed)

    @property
    def allowed_objects(self) -> np.ndarray:
        return np.flatnonzero(self._allowed)

    @property
    def neutral_mask(self) -> np.ndarray:
        return read_only(self._neutral)

    @property
    def neutral_objects(self) -> np.ndarray:
        return np.flatnonzero(self._neutral)

    @property
    def negative_mask(self) -> np.ndarray:
        """Objects neither positive nor neutral."""
        return ~(self._positive | self._neutral)

    # comparison

    def is_at_most_as_general_as(self, other: 'RuleConditions') -> bool:
        """:return: True iff every condition of `other` is implied by some
            condition of `self`, i.e. `self` covers a subset of what `other`
            covers, on any data.
        """
        return conditions_at_most_as_general(self._conditions,
                                             other.conditions)

    def to_string(self) -> str:
        if not self._conditions:
            return '(true)'
        return ' & '.join(c.to_string(self.table) for c in self._conditions)

    def __str__(self):
        return self.to_string()

    def __repr__(self):
        return '<RuleConditions {} covering {} objects>'.format(
            self.to_string(), np.count_nonzero(self._covered))

    def _check_index(self, index: int):
        if not 0 <= index < len(self._conditions):
            raise IndexError("condition index {} out of range for {} "
                             "conditions of {}"
                             .format(index, len(self._conditions), self))

    def _check_mutable(self):
        if self._frozen:
            raise ValueError("{!r} is read-only".format(self))


def conditions_at_most_as_general(specific: Sequence[Condition],
                                  general: Sequence[Condition]) -> bool:
    """:return: True iff for each condition in `general` there is a condition
        in `specific` that is at most as general.
    """
    return all(any(s.is_at_most_as_general_as(g) is TernaryLogicValue.TRUE
                   for s in specific)
               for g in general)


class RuleConditionsWithApproximatedSet(NamedTuple):
    """Rule conditions paired with the approximated set they were grown for.
    """
    rule_conditions: RuleConditions
    approximated_set: 'ApproximatedSet'


class Rule(NamedTuple):
    """A decision rule: if all `conditions` hold, then one of `decisions`.

    Attributes
    -----
    rule_type : RuleType
    rule_semantics : RuleSemantics
    inherent_decision :
        The limiting decision of the approximated set the rule describes.
    conditions : tuple of Condition, AND-connected
    decisions : tuple of Condition, OR-connected, each on
        `data.DECISION_ATTRIBUTE`.
    """
    rule_type: RuleType
    rule_semantics: RuleSemantics
    inherent_decision: float
    conditions: Tuple[Condition, ...]
    decisions: Tuple[Condition, ...]

    @classmethod
    def from_rule_conditions(cls,
                             rule_conditions: RuleConditions,
                             approximated_set: 'ApproximatedSet',
                             decisions_provider) -> 'Rule':
        """Build a rule from accepted `rule_conditions`, which become
        read-only.

        :param decisions_provider: Callable mapping `approximated_set` to
            the decision conditions of the rule.
        """
        rule_conditions.freeze()
        return cls(rule_conditions.rule_type,
                   rule_conditions.rule_semantics,
                   approximated_set.limiting_decision,
                   rule_conditions.conditions,
                   tuple(decisions_provider(approximated_set)))

    def match(self, table: InformationTable) -> np.ndarray:
        """:return: which objects of `table` satisfy all conditions."""
        covered = np.ones(table.n_objects, dtype=bool)
        for condition in self.conditions:
            covered &= condition.match(table)
        return covered

    def supported_by(self, table: InformationTable) -> np.ndarray:
        """:return: which objects of `table` satisfy any decision."""
        supporting = np.zeros(table.n_objects, dtype=bool)
        for decision in self.decisions:
            supporting |= decision.match(table)
        return supporting

    def to_string(self, table: InformationTable = None) -> str:
        body = ' & '.join(c.to_string(table) for c in self.conditions) \
            or '(true)'
        head = ' OR '.join(d.to_string(table) for d in self.decisions)
        return '{} => {}'.format(body, head)

    def __str__(self):
        return self.to_string()


class BasicRuleCoverageInformation:
    """Coverage of a rule on an information table.

    Attributes
    -----
    covered_objects : np.ndarray of object indices
    decisions_of_covered_objects : np.ndarray
    not_supporting_objects : np.ndarray of object indices
        Covered objects whose decision does not satisfy the rule decisions.
    n_objects : int
    """

    def __init__(self, covered_mask: np.ndarray, positive_mask: np.ndarray,
                 decisions: np.ndarray):
        self.covered_mask = read_only(np.asarray(covered_mask, dtype=bool))
        self.positive_mask = read_only(np.asarray(positive_mask, dtype=bool))
        self.covered_objects = np.flatnonzero(self.covered_mask)
        self.decisions_of_covered_objects = np.asarray(decisions)[
            self.covered_objects]
        self.not_supporting_objects = np.flatnonzero(self.covered_mask
                                                     & ~self.positive_mask)
        self.n_objects = len(self.covered_mask)

    @classmethod
    def from_rule(cls, rule: Rule, table: InformationTable):
        return cls(rule.match(table), rule.supported_by(table),
                   table.decisions)


class RuleCoverageInformation(BasicRuleCoverageInformation):
    """`BasicRuleCoverageInformation` plus the positive and neutral objects,
    as needed by `RuleEvaluator`s.
    """

    def __init__(self, covered_mask, positive_mask, decisions,
                 neutral_mask=None):
        super().__init__(covered_mask, positive_mask, decisions)
        self.neutral_mask = read_only(
            np.zeros_like(self.covered_mask) if neutral_mask is None
            else np.asarray(neutral_mask, dtype=bool))
        self.positive_objects = np.flatnonzero(self.positive_mask)
        self.neutral_objects = np.flatnonzero(self.neutral_mask)

    @classmethod
    def from_rule(cls, rule: Rule, table: InformationTable,
                  neutral_objects=()):
        return cls(rule.match(table), rule.supported_by(table),
                   table.decisions,
                   as_mask(neutral_objects, table.n_objects,
                           'neutral_objects'))

    @classmethod
    def from_rule_conditions(cls, rule_conditions: RuleConditions):
        return cls(rule_conditions.covered_mask,
                   rule_conditions.positive_mask,
                   rule_conditions.table.decisions,
                   rule_conditions.neutral_mask)


# evaluator interfaces


class MeasureType(Enum):
    """Whether higher (GAIN) or lower (COST) values are better."""
    GAIN = 'gain'
    COST = 'cost'


class MonotonicityType(Enum):
    IMPROVES_WITH_NUMBER_OF_COVERED_OBJECTS = 'improves'
    DETERIORATES_WITH_NUMBER_OF_COVERED_OBJECTS = 'deteriorates'


class Measure(ABC):
    """Base of all evaluators. Its `measure_type` governs every comparison
    and threshold test.

    Fields
    -----
    measure_type : MeasureType
        Must be set by subclasses.
    """

    measure_type: MeasureType = None

    @property
    def worst_value(self) -> float:
        """Sentinel that loses against any real evaluation."""
        return -math.inf if self.measure_type is MeasureType.GAIN \
            else math.inf

    def compare_values(self, a: float, b: float) -> int:
        """:return: 1 if `a` is better than `b`, -1 if worse, 0 if equal."""
        if a == b:
            return 0
        better = a > b if self.measure_type is MeasureType.GAIN else a < b
        return 1 if better else -1

    def satisfies_threshold(self, value: float, threshold: float) -> bool:
        """:return: True iff `value` is at least as good as `threshold`."""
        return self.compare_values(value, threshold) >= 0

    def __repr__(self):
        return '{}()'.format(type(self).__name__)


class ConditionAdditionEvaluator(Measure):
    @abstractmethod
    def evaluate_with_condition(self, rule_conditions: RuleConditions,
                                condition: Condition) -> float:
        """Evaluate `rule_conditions` as if `condition` was appended, without
        modifying it. A `condition` of None evaluates to `worst_value`.
        """
        raise NotImplementedError


class MonotonicConditionAdditionEvaluator(ConditionAdditionEvaluator):
    """A `ConditionAdditionEvaluator` whose evaluation changes consistently
    with the number of covered objects.

    Fields
    -----
    monotonicity_type : MonotonicityType
        Must be set by subclasses.
    """

    monotonicity_type: MonotonicityType = None


class ConditionRemovalEvaluator(Measure):
    @abstractmethod
    def evaluate_without_condition(self, rule_conditions: RuleConditions,
                                   index: int) -> float:
        """Evaluate `rule_conditions` as if the condition at `index` was
        removed, without modifying it.
        """
        raise NotImplementedError


class RuleConditionsEvaluator(Measure):
    """Evaluates rule conditions as they stand.

    The hypothetical `evaluate_without_condition` and
    `evaluate_when_replacing_condition` work on a copy by default; subclasses
    may compute them directly from the coverage.
    """

    @abstractmethod
    def evaluate(self, rule_conditions: RuleConditions) -> float:
        raise NotImplementedError

    def evaluate_without_condition(self, rule_conditions: RuleConditions,
                                   index: int) -> float:
        copy = rule_conditions.copy()
        copy.remove_condition(index)
        return self.evaluate(copy)

    def evaluate_when_replacing_condition(self,
                                          rule_conditions: RuleConditions,
                                          index: int,
                                          condition: Condition) -> float:
        copy = rule_conditions.copy()
        copy._check_index(index)
        copy._replace_condition(index, condition)
        return self.evaluate(copy)

    def confront(self, a: RuleConditions, b: RuleConditions) -> int:
        """:return: 1 if `a` evaluates better than `b`, -1 if worse, 0 if
            equal.
        """
        return self.compare_values(self.evaluate(a), self.evaluate(b))

    def evaluation_satisfies_threshold(self, rule_conditions: RuleConditions,
                                       threshold: float) -> bool:
        return self.satisfies_threshold(self.evaluate(rule_conditions),
                                        threshold)

    def evaluation_satisfies_threshold_without_condition(
            self, rule_conditions: RuleConditions, threshold: float,
            index: int) -> bool:
        return self.satisfies_threshold(
            self.evaluate_without_condition(rule_conditions, index),
            threshold)

    def evaluation_satisfies_threshold_when_replacing_condition(
            self, rule_conditions: RuleConditions, threshold: float,
            index: int, condition: Condition) -> bool:
        return self.satisfies_threshold(
            self.evaluate_when_replacing_condition(rule_conditions, index,
                                                   condition),
            threshold)


class RuleEvaluator(Measure):
    @abstractmethod
    def evaluate_rule(self, coverage: RuleCoverageInformation) -> float:
        """Evaluate a finished rule by its coverage."""
        raise NotImplementedError


# strategy interfaces


class ConditionGenerator(ABC):
    @abstractmethod
    def get_best_condition(self, considered_objects: Iterable[int],
                           rule_conditions: RuleConditions) -> Condition:
        """:return: the best elementary condition to append to
            `rule_conditions`, built from evaluations of
            `considered_objects`.
        :raise ElementaryConditionNotFoundError: if there is none.
        """
        raise NotImplementedError


class StoppingConditionChecker(ABC):
    """Decides whether rule conditions need no further conditions.

    The hypothetical checks work on a copy by default.
    """

    @abstractmethod
    def is_satisfied(self, rule_conditions: RuleConditions) -> bool:
        raise NotImplementedError

    def is_satisfied_without_condition(self, rule_conditions: RuleConditions,
                                       index: int) -> bool:
        copy = rule_conditions.copy()
        copy.remove_condition(index)
        return self.is_satisfied(copy)

    def is_satisfied_when_replacing_condition(
            self, rule_conditions: RuleConditions, index: int,
            condition: Condition) -> bool:
        copy = rule_conditions.copy()
        copy._check_index(index)
        copy._replace_condition(index, condition)
        return self.is_satisfied(copy)


class StoppingConditionCheckerWithThreshold(StoppingConditionChecker):
    @property
    @abstractmethod
    def threshold(self) -> float:
        raise NotImplementedError

    @abstractmethod
    def copy_with_threshold(self, threshold: float
                            ) -> 'StoppingConditionCheckerWithThreshold':
        """:return: An equally configured checker using `threshold`."""
        raise NotImplementedError


class RuleConditionsPruner(ABC):
    @abstractmethod
    def prune(self, rule_conditions: RuleConditions) -> RuleConditions:
        """Remove conditions from `rule_conditions` in place.

        :return: `rule_conditions`
        """
        raise NotImplementedError

    def copy_with_stopping_condition_checker(
            self, checker: StoppingConditionChecker
    ) -> 'RuleConditionsPruner':
        """:return: An equal pruner preserving `checker` instead.
            Pruners without a checker return themselves.
        """
        return self


class RuleConditionsGeneralizer(ABC):
    @abstractmethod
    def generalize(self, rule_conditions: RuleConditions) -> int:
        """Widen conditions of `rule_conditions` in place.

        :return: The number of generalized conditions.
        """
        raise NotImplementedError

    def copy_with_stopping_condition_checker(
            self, checker: StoppingConditionChecker
    ) -> 'RuleConditionsGeneralizer':
        """See `RuleConditionsPruner.copy_with_stopping_condition_checker`."""
        return self


class RuleConditionsSetPruner(ABC):
    @abstractmethod
    def prune(self, rule_conditions_list: Sequence[RuleConditions],
              must_stay_covered) -> List[RuleConditions]:
        """:return: a sub-list of `rule_conditions_list` (in its order) still
            covering all objects in `must_stay_covered`.
        """
        raise NotImplementedError


class RuleMinimalityChecker(ABC):
    @abstractmethod
    def check(self,
              accepted: Sequence[RuleConditionsWithApproximatedSet],
              candidate: RuleConditionsWithApproximatedSet) -> bool:
        """:return: True iff `candidate` is minimal w.r.t. `accepted` and may
            be accepted as well.
        """
        raise NotImplementedError


class RuleInducerComponents:
    """The strategies configuring one run of the covering driver.

    Every component is required; see `predefined` for bundles with defaults.

    Fields
    -----
    condition_generator : ConditionGenerator
    stopping_condition_checker : StoppingConditionChecker
    rule_conditions_pruner : RuleConditionsPruner
    rule_conditions_generalizer : RuleConditionsGeneralizer
    rule_conditions_set_pruner : RuleConditionsSetPruner
    rule_minimality_checker : RuleMinimalityChecker
    rule_type : RuleType
        CERTAIN rules are induced from lower, others from upper
        approximations.
    allowed_negative_objects : AllowedNegativeObjectsType
    """

    _FIELDS = (
        ('condition_generator', ConditionGenerator),
        ('stopping_condition_checker', StoppingConditionChecker),
        ('rule_conditions_pruner', RuleConditionsPruner),
        ('rule_conditions_generalizer', RuleConditionsGeneralizer),
        ('rule_conditions_set_pruner', RuleConditionsSetPruner),
        ('rule_minimality_checker', RuleMinimalityChecker),
        ('rule_type', RuleType),
        ('allowed_negative_objects', AllowedNegativeObjectsType),
    )

    def __init__(self,
                 condition_generator: ConditionGenerator,
                 stopping_condition_checker: StoppingConditionChecker,
                 rule_conditions_pruner: RuleConditionsPruner,
                 rule_conditions_generalizer: RuleConditionsGeneralizer,
                 rule_conditions_set_pruner: RuleConditionsSetPruner,
                 rule_minimality_checker: RuleMinimalityChecker,
                 rule_type: RuleType = RuleType.CERTAIN,
                 allowed_negative_objects: AllowedNegativeObjectsType =
                 AllowedNegativeObjectsType.POSITIVE_REGION):
        self.condition_generator = condition_generator
        self.stopping_condition_checker = stopping_condition_checker
        self.rule_conditions_pruner = rule_conditions_pruner
        self.rule_conditions_generalizer = rule_conditions_generalizer
        self.rule_conditions_set_pruner = rule_conditions_set_pruner
        self.rule_minimality_checker = rule_minimality_checker
        self.rule_type = rule_type
        self.allowed_negative_objects = allowed_negative_objects
        for name, field_type in self._FIELDS:
            value = getattr(self, name)
            if not isinstance(value, field_type):
                raise TypeError("{} must be a {}, but got {!r}"
                                .format(name, field_type.__name__, value))

    def as_dict(self) -> dict:
        return {name: getattr(self, name) for name, _ in self._FIELDS}

    def copy_with(self, **changes) -> 'RuleInducerComponents':
        """:return: A `RuleInducerComponents` with the given fields replaced.
        """
        unknown = set(changes) - set(self.as_dict())
        if unknown:
            raise ValueError("unknown components: {}".format(sorted(unknown)))
        fields = self.as_dict()
        fields.update(changes)
        return RuleInducerComponents(**fields)

    def copy_with_threshold(self, threshold: float
                            ) -> 'RuleInducerComponents':
        """:return: A copy whose stopping condition checker uses `threshold`,
            with pruner and generalizer preserving that checker.
        """
        checker = self.stopping_condition_checker
        if not isinstance(checker, StoppingConditionCheckerWithThreshold):
            raise TypeError("stopping condition checker {!r} has no threshold"
                            .format(checker))
        checker = checker.copy_with_threshold(threshold)
        return self.copy_with(
            stopping_condition_checker=checker,
            rule_conditions_pruner=self.rule_conditions_pruner
                .copy_with_stopping_condition_checker(checker),
            rule_conditions_generalizer=self.rule_conditions_generalizer
                .copy_with_stopping_condition_checker(checker))

    def __repr__(self):
        return '{}({})'.format(
            type(self).__name__,
            ', '.join('{}={!r}'.format(k, v)
                      for k, v in self.as_dict().items()))
