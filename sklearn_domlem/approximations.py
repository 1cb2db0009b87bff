"""
Approximated sets rules are induced for: unions of ordered decision classes
together with their (given) rough approximations.

Computing the approximations is not done here, they are passed in. If they
are omitted the data are assumed to be consistent, i.e. both approximations
equal the union itself.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Callable, Iterator, List, Tuple

import numpy as np

from sklearn_domlem.common import AllowedNegativeObjectsType, Condition, \
    Relation, RuleSemantics, RuleType
from sklearn_domlem.data import DECISION_ATTRIBUTE, InformationTable
from sklearn_domlem.util import as_mask, read_only


class UnionType(Enum):
    AT_LEAST = 'at least'
    AT_MOST = 'at most'


class ApproximatedSet(ABC):
    """A set of objects of `table` with its lower and upper approximation.

    Parameters
    -----
    table : InformationTable

    objects :
        Object indices (or mask) of the set itself, the positive objects.

    lower_approximation, upper_approximation : optional
        Default to `objects`.

    positive_region : optional
        Objects a certain rule may cover. Defaults to the lower approximation.

    neutral_objects : optional
        Objects counting neither as positive nor negative.
    """

    def __init__(self, table: InformationTable, objects,
                 lower_approximation=None,
                 upper_approximation=None,
                 positive_region=None,
                 neutral_objects=()):
        n_objects = table.n_objects
        self.table = table
        self._objects = as_mask(objects, n_objects, 'objects')
        self._lower = (self._objects.copy() if lower_approximation is None
                       else as_mask(lower_approximation, n_objects,
                                    'lower_approximation'))
        self._upper = (self._objects.copy() if upper_approximation is None
                       else as_mask(upper_approximation, n_objects,
                                    'upper_approximation'))
        if np.any(self._lower & ~self._objects):
            raise ValueError("lower approximation {} not included in {}"
                             .format(np.flatnonzero(self._lower),
                                     np.flatnonzero(self._objects)))
        if np.any(self._objects & ~self._upper):
            raise ValueError("upper approximation {} does not include {}"
                             .format(np.flatnonzero(self._upper),
                                     np.flatnonzero(self._objects)))
        self._positive_region = (
            self._lower.copy() if positive_region is None
            else as_mask(positive_region, n_objects, 'positive_region'))
        self._neutral = as_mask(neutral_objects, n_objects, 'neutral_objects')

    @property
    @abstractmethod
    def limiting_decision(self):
        """The decision value delimiting the set."""
        raise NotImplementedError

    @property
    @abstractmethod
    def rule_semantics(self) -> RuleSemantics:
        """Semantics of rules describing this set."""
        raise NotImplementedError

    @abstractmethod
    def includes(self, other: 'ApproximatedSet') -> bool:
        """:return: True iff `other` is a subset of `self` by definition, i.e.
            a decision of `other` is at least as specific as one of `self`.
        """
        raise NotImplementedError

    @property
    def objects(self) -> np.ndarray:
        return np.flatnonzero(self._objects)

    @property
    def objects_mask(self) -> np.ndarray:
        return read_only(self._objects)

    @property
    def lower_approximation(self) -> np.ndarray:
        return np.flatnonzero(self._lower)

    @property
    def upper_approximation(self) -> np.ndarray:
        return np.flatnonzero(self._upper)

    @property
    def boundary(self) -> np.ndarray:
        return np.flatnonzero(self._upper & ~self._lower)

    @property
    def positive_region(self) -> np.ndarray:
        return np.flatnonzero(self._positive_region)

    @property
    def neutral_objects(self) -> np.ndarray:
        return np.flatnonzero(self._neutral)

    def approximation(self, rule_type: RuleType) -> np.ndarray:
        """:return: mask of the approximation rules of `rule_type` are induced
            from: the lower one for certain rules, the upper one otherwise.
        """
        return read_only(self._lower if rule_type is RuleType.CERTAIN
                         else self._upper)

    def allowed_objects(self, policy: AllowedNegativeObjectsType,
                        rule_type: RuleType) -> np.ndarray:
        """:return: mask of the objects a rule of `rule_type` may cover."""
        if policy is AllowedNegativeObjectsType.POSITIVE_REGION:
            return read_only(self._positive_region)
        if policy is AllowedNegativeObjectsType.POSITIVE_AND_BOUNDARY_REGIONS:
            return self._positive_region | (self._upper & ~self._lower)
        if policy is AllowedNegativeObjectsType.ANY_REGION:
            return np.ones(self.table.n_objects, dtype=bool)
        if policy is AllowedNegativeObjectsType.APPROXIMATION:
            return self.approximation(rule_type)
        raise ValueError("unknown allowed negative objects policy {!r}"
                         .format(policy))


class Union(ApproximatedSet):
    """Upward (`AT_LEAST`) or downward (`AT_MOST`) union of decision classes,
    i.e. all objects with a decision at least (at most) `limiting_decision`.
    """

    def __init__(self, table: InformationTable,
                 union_type: UnionType,
                 limiting_decision,
                 lower_approximation=None,
                 upper_approximation=None,
                 positive_region=None,
                 neutral_objects=()):
        self.union_type = union_type
        self._limiting_decision = limiting_decision
        if union_type is UnionType.AT_LEAST:
            objects = table.decisions >= limiting_decision
        else:
            objects = table.decisions <= limiting_decision
        super().__init__(table, objects,
                         lower_approximation=lower_approximation,
                         upper_approximation=upper_approximation,
                         positive_region=positive_region,
                         neutral_objects=neutral_objects)

    @property
    def limiting_decision(self):
        return self._limiting_decision

    @property
    def rule_semantics(self) -> RuleSemantics:
        return (RuleSemantics.AT_LEAST if self.union_type is UnionType.AT_LEAST
                else RuleSemantics.AT_MOST)

    def includes(self, other: ApproximatedSet) -> bool:
        if not isinstance(other, Union) or other.union_type is not \
                self.union_type:
            return False
        if self.union_type is UnionType.AT_LEAST:
            return other.limiting_decision >= self.limiting_decision
        return other.limiting_decision <= self.limiting_decision

    def __str__(self):
        return 'Cl{}{}'.format('>=' if self.union_type is UnionType.AT_LEAST
                               else '<=', self.limiting_decision)

    def __repr__(self):
        return '<Union {} of {} objects>'.format(self, len(self.objects))


ApproximationProvider = Callable[[InformationTable, UnionType, object],
                                 Tuple[np.ndarray, ...]]


class Unions:
    """All non-trivial upward and downward unions of the decision classes of
    `table`.

    Parameters
    -----
    table : InformationTable

    approximation_provider : callable, optional
        `(table, union_type, limiting_decision) -> (lower, upper)` giving the
        approximations of each union, optionally followed by its positive
        region and neutral objects, i.e.
        `(lower, upper[, positive_region[, neutral_objects]])`. Variable
        consistency lower approximations need the positive region, since it
        defaults to the lower approximation. If None, the data are assumed
        to be consistent.

    Attributes
    -----
    decision_values : np.ndarray
        Distinct decisions, ascending. The rank of a decision is its index.

    upward_unions : list of Union
        `upward_unions[i]` is "at least `decision_values[i + 1]`".

    downward_unions : list of Union
        `downward_unions[i]` is "at most `decision_values[i]`".
    """

    def __init__(self, table: InformationTable,
                 approximation_provider: ApproximationProvider = None):
        self.table = table
        self.decision_values = np.unique(table.decisions)

        def make(union_type, limit):
            if approximation_provider is None:
                return Union(table, union_type, limit)
            approximations = tuple(
                approximation_provider(table, union_type, limit))
            if not 2 <= len(approximations) <= 4:
                raise ValueError("approximation provider must return (lower, "
                                 "upper[, positive_region[, "
                                 "neutral_objects]]), but got {} values for "
                                 "{} {}".format(len(approximations),
                                                union_type.value, limit))
            return Union(table, union_type, limit, *approximations)

        self.upward_unions: List[Union] = [
            make(UnionType.AT_LEAST, d) for d in self.decision_values[1:]]
        self.downward_unions: List[Union] = [
            make(UnionType.AT_MOST, d) for d in self.decision_values[:-1]]

    def upward(self, rank: int) -> Union:
        """:return: the union "at least the decision of `rank`", for ranks
            `1 .. n_decisions - 1`.
        """
        if not 1 <= rank < len(self.decision_values):
            raise IndexError("no upward union for rank {} of {} decisions"
                             .format(rank, len(self.decision_values)))
        return self.upward_unions[rank - 1]

    def downward(self, rank: int) -> Union:
        """:return: the union "at most the decision of `rank`", for ranks
            `0 .. n_decisions - 2`.
        """
        if not 0 <= rank < len(self.decision_values) - 1:
            raise IndexError("no downward union for rank {} of {} decisions"
                             .format(rank, len(self.decision_values)))
        return self.downward_unions[rank]

    def __iter__(self) -> Iterator[Union]:
        """Upward then downward unions, each starting with the most specific
        one.
        """
        yield from reversed(self.upward_unions)
        yield from self.downward_unions

    def __len__(self):
        return len(self.upward_unions) + len(self.downward_unions)


def union_decisions(approximated_set: ApproximatedSet
                    ) -> Tuple[Condition, ...]:
    """Decisions provider for rules describing a `Union`."""
    if not isinstance(approximated_set, Union):
        raise TypeError("cannot derive rule decisions for {!r}"
                        .format(approximated_set))
    relation = (Relation.AT_LEAST
                if approximated_set.union_type is UnionType.AT_LEAST
                else Relation.AT_MOST)
    return (Condition(DECISION_ATTRIBUTE, relation,
                      approximated_set.limiting_decision),)
