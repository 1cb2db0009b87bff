"""
Miscellaneous things not depending on anything else from sklearn_domlem.
"""

from typing import Iterable, Sequence, Union

import numpy as np


PREFERENCE_NAMES = ('gain', 'cost', 'none')


def build_preference_codes(which_features, n_features: int
                           ) -> np.ndarray or None:
    """:return: An int array of length `n_features` with one code per feature,
        indexing `PREFERENCE_NAMES` (0 = gain, 1 = cost, 2 = none).
        Returns None if `which_features` cannot be recognized.

    `which_features` may be None (all gain), one of the names in
    `PREFERENCE_NAMES` (all features alike), or a sequence of such names with
    one entry per feature.
    """
    codes = np.zeros(n_features, dtype=int)  # default "all gain"
    if which_features is None:
        return codes
    if isinstance(which_features, str):
        if which_features not in PREFERENCE_NAMES:
            return None
        codes[:] = PREFERENCE_NAMES.index(which_features)
        return codes
    which_features = list(which_features)
    if len(which_features) != n_features:
        return None
    for i, name in enumerate(which_features):
        name = getattr(name, 'name', name)  # also accept enum members
        if not isinstance(name, str) or name.lower() not in PREFERENCE_NAMES:
            return None
        codes[i] = PREFERENCE_NAMES.index(name.lower())
    return codes


def as_mask(indices: Union[Iterable[int], np.ndarray, None],
            n_objects: int,
            name: str = 'indices') -> np.ndarray:
    """Convert object indices (or a bool mask) to a bool mask of length
    `n_objects`.

    :raise ValueError: if an index is negative or `>= n_objects`, or a mask
        has the wrong length.
    """
    if indices is None:
        return np.zeros(n_objects, dtype=bool)
    indices = np.asarray(list(indices) if not isinstance(indices, np.ndarray)
                         else indices)
    if indices.dtype == bool:
        if indices.shape != (n_objects,):
            raise ValueError("{} given as mask of shape {}, expected ({},)"
                             .format(name, indices.shape, n_objects))
        return indices.copy()
    mask = np.zeros(n_objects, dtype=bool)
    if not indices.size:
        return mask
    if not np.issubdtype(indices.dtype, np.integer):
        raise ValueError("{} must be integer object indices, got {!r}"
                         .format(name, indices))
    if indices.min() < 0 or indices.max() >= n_objects:
        raise ValueError("{} out of range [0, {}): {!s}"
                         .format(name, n_objects, indices))
    mask[indices] = True
    return mask


def read_only(array: np.ndarray) -> np.ndarray:
    """:return: A view on `array` which cannot be written to."""
    view = array.view()
    view.flags.writeable = False
    return view


def check_components(components: Sequence, name: str, component_type: type):
    """Validate a non-empty sequence of strategy objects.

    :return: `components` as tuple.
    :raise ValueError: if `components` is None or empty.
    :raise TypeError: if any element is None or not a `component_type`.
    """
    if components is None:
        raise ValueError("{} must not be None".format(name))
    components = tuple(components)
    if not components:
        raise ValueError("{} must not be empty".format(name))
    for i, component in enumerate(components):
        if component is None:
            raise TypeError("{}[{}] is None".format(name, i))
        if not isinstance(component, component_type):
            raise TypeError("{}[{}] must be a {}, but got {!r}"
                            .format(name, i, component_type.__name__,
                                    component))
    return components
