"""
Implementation of VC-DomLEM sequential covering:
Helpers in addition to the algorithms in `concrete.py`.
"""

import json
from typing import Callable, Dict, IO, List, MutableSequence, NamedTuple, \
    Type, Union

import numpy as np

from sklearn_domlem.abstract import VCDomLEM
from sklearn_domlem.approximations import ApproximatedSet
from sklearn_domlem.common import RuleConditions


class InductionTrace:
    """Trace of a `VCDomLEM.fit` run.

    Attributes
    -----
    - `steps`: MutableSequence[InductionTrace.Step]
      One item per rule conditions found by `find_rule_conditions`, in the
      order they were found. Only those with `accepted` True made it into
      the rules, the others were removed by the set pruner or rejected as
      non-minimal.
    """

    _JSON_DUMP_DESCRIPTION = "sklearn_domlem.extra.trace_induction dump"
    _JSON_DUMP_VERSION = 1

    class Step(NamedTuple):
        """Rule conditions found for one seed.

        `approximated_set` is its string representation, `n_covered` and
        `n_positive_covered` count the covered objects resp. the covered
        positive ones.
        """
        approximated_set: str
        seed: int
        conditions: List[str]
        n_covered: int
        n_positive_covered: int
        accepted: bool

    steps: MutableSequence['InductionTrace.Step']

    def __init__(self):
        self.steps = []

    def append_step(self, rule_conditions: RuleConditions,
                    approximated_set: ApproximatedSet):
        covered = rule_conditions.covered_mask
        self.steps.append(InductionTrace.Step(
            str(approximated_set),
            rule_conditions.seed,
            [c.to_string(rule_conditions.table) for c in rule_conditions],
            int(np.count_nonzero(covered)),
            int(np.count_nonzero(covered & rule_conditions.positive_mask)),
            False))

    def __eq__(self, other):
        if type(other) is type(self):
            return self.steps == other.steps
        return NotImplemented

    @property
    def n_accepted(self) -> int:
        return sum(step.accepted for step in self.steps)

    def to_json(self) -> str:
        """:return: A string containing a JSON representation of the trace."""
        return json.dumps({
            "description": InductionTrace._JSON_DUMP_DESCRIPTION,
            "version": InductionTrace._JSON_DUMP_VERSION,
            "steps": [step._asdict() for step in self.steps],
        }, allow_nan=False)

    @staticmethod
    def from_json(dump: Union[str, IO]) -> 'InductionTrace':
        """
        :param dump: A file-like object or string containing JSON.
        :return: The trace dumped previously with `to_json`.
        """
        loader = json.loads if isinstance(dump, str) else json.load
        dec: Dict = loader(dump)

        if dec.get("description") != InductionTrace._JSON_DUMP_DESCRIPTION:
            raise ValueError("No/invalid induction trace json: %s" % repr(dec))
        if dec["version"] != InductionTrace._JSON_DUMP_VERSION:
            raise ValueError("Unsupported induction trace version: %s"
                             % dec["version"])
        trace = InductionTrace()
        trace.steps = [InductionTrace.Step(**step) for step in dec['steps']]
        return trace


LogTraceCallback = Callable[[InductionTrace], None]


def trace_induction(inducer_class: Type[VCDomLEM],
                    log_trace_callback: LogTraceCallback) -> Type[VCDomLEM]:
    """Decorator for `VCDomLEM` that adds tracing of the rule conditions
    found while inducing rules.

    After each successful `fit`, the collected trace is submitted to the
    `log_trace_callback` function.

    Usage
    =====

    >>> traces = []
    >>> TracedVCDomLEM = trace_induction(VCDomLEM, traces.append)
    >>> TracedVCDomLEM().fit(unions)  # doctest: +SKIP
    """

    # noinspection PyAttributeOutsideInit
    class TracedInducer(inducer_class):
        def fit(self, approximated_sets, *args, **kwargs):
            self._trace = InductionTrace()
            self._traced_rule_conditions: List[RuleConditions] = []
            super().fit(approximated_sets, *args, **kwargs)

            accepted = {id(rc) for rc, _ in self.rule_conditions_}
            self._trace.steps = [
                step._replace(accepted=id(rc) in accepted)
                for step, rc in zip(self._trace.steps,
                                    self._traced_rule_conditions)]
            log_trace_callback(self._trace)
            return self

        def cover_approximated_set(self, approximated_set, components):
            self._traced_set = approximated_set
            return super().cover_approximated_set(approximated_set,
                                                  components)

        def find_rule_conditions(self, rule_conditions, not_covered,
                                 components):
            rule_conditions = super().find_rule_conditions(
                rule_conditions, not_covered, components)
            self._trace.append_step(rule_conditions, self._traced_set)
            self._traced_rule_conditions.append(rule_conditions)
            return rule_conditions

    return TracedInducer
