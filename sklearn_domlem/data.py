"""
Tabular learning data: objects described by evaluations on ordered
(gain/cost) or nominal attributes, plus an ordinal decision per object.
"""

from enum import Enum
from typing import List, Sequence

import numpy as np
from sklearn.utils import check_array, check_consistent_length, column_or_1d

from sklearn_domlem.util import build_preference_codes, read_only

DECISION_ATTRIBUTE = -1
"""Pseudo attribute index addressing the decision of an object."""


class PreferenceType(Enum):
    """Preference direction of an attribute's evaluations."""
    GAIN = 0
    COST = 1
    NONE = 2


class ComparisonResult(Enum):
    LESS = -1
    EQUAL = 0
    GREATER = 1
    INCOMPARABLE = None


class InformationTable:
    """A learning table.

    Parameters
    -----
    X : array-like of shape (n_objects, n_attributes)
        Evaluations of the objects. Converted to float, must be finite.

    decisions : array-like of shape (n_objects,)
        Ordinal decision of each object, higher is better.

    preference_types : None or str or sequence of str/PreferenceType
        See `util.build_preference_codes`. None means every attribute is a
        gain-type criterion.

    attribute_names : sequence of str, optional

    decision_name : str

    Attributes
    -----
    preference_types : tuple of PreferenceType, one per attribute
    """

    def __init__(self, X, decisions,
                 preference_types=None,
                 attribute_names: Sequence[str] = None,
                 decision_name: str = 'decision'):
        X = check_array(X, dtype=np.float64, ensure_min_samples=0)
        decisions = column_or_1d(decisions)
        check_consistent_length(X, decisions)
        codes = build_preference_codes(preference_types, X.shape[1])
        if codes is None:
            raise ValueError("preference_types must be None, one of 'gain', "
                             "'cost', 'none', or a sequence of those with one"
                             " entry per attribute, but got {!r}"
                             .format(preference_types))
        if attribute_names is not None \
                and len(attribute_names) != X.shape[1]:
            raise ValueError("got {} attribute names for {} attributes"
                             .format(len(attribute_names), X.shape[1]))
        self._X = X
        self._decisions = decisions
        self.preference_types = tuple(PreferenceType(int(c)) for c in codes)
        self._attribute_names: List[str] = (
            list(attribute_names) if attribute_names is not None
            else ['a{}'.format(i + 1) for i in range(X.shape[1])])
        self.decision_name = decision_name

    @property
    def n_objects(self) -> int:
        return self._X.shape[0]

    @property
    def n_attributes(self) -> int:
        return self._X.shape[1]

    @property
    def X(self) -> np.ndarray:
        """Read-only evaluations, shape (n_objects, n_attributes)."""
        return read_only(self._X)

    @property
    def decisions(self) -> np.ndarray:
        """Read-only decisions, shape (n_objects,)."""
        return read_only(self._decisions)

    def column(self, attribute_index: int) -> np.ndarray:
        """:return: the evaluations of all objects on one attribute, or their
            decisions for `DECISION_ATTRIBUTE`.
        """
        if attribute_index == DECISION_ATTRIBUTE:
            return self.decisions
        self._check_attribute(attribute_index)
        return read_only(self._X[:, attribute_index])

    def value(self, object_index: int, attribute_index: int):
        return self.column(attribute_index)[object_index]

    def preference_type(self, attribute_index: int) -> PreferenceType:
        if attribute_index == DECISION_ATTRIBUTE:
            return PreferenceType.GAIN
        self._check_attribute(attribute_index)
        return self.preference_types[attribute_index]

    def attribute_name(self, attribute_index: int) -> str:
        if attribute_index == DECISION_ATTRIBUTE:
            return self.decision_name
        self._check_attribute(attribute_index)
        return self._attribute_names[attribute_index]

    def compare(self, attribute_index: int, a, b) -> ComparisonResult:
        """Three-way comparison of two evaluations of the same attribute.

        Nominal attributes only know equality, unequal values are
        INCOMPARABLE. So are NaN values.
        """
        if np.isnan(a) or np.isnan(b):
            return ComparisonResult.INCOMPARABLE
        if a == b:
            return ComparisonResult.EQUAL
        if self.preference_type(attribute_index) is PreferenceType.NONE:
            return ComparisonResult.INCOMPARABLE
        return ComparisonResult.LESS if a < b else ComparisonResult.GREATER

    def _check_attribute(self, attribute_index: int):
        if not 0 <= attribute_index < self.n_attributes:
            raise IndexError("attribute index {} out of range [0, {})"
                             .format(attribute_index, self.n_attributes))

    def __repr__(self):
        return '<InformationTable {} objects x {} attributes>'.format(
            self.n_objects, self.n_attributes)
