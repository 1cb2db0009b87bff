"""Implementation of the VC-DomLEM sequential covering algorithm, inducing
decision rules for unions of ordered decision classes in the
dominance-based rough set approach.

Limitations / Assumptions
=====

- approximations (and positive regions) are given, not computed
- no missing values, no NaN or infinite evaluations
- attributes are numeric: gain or cost type criteria compared with `>=` and
  `<=`, or nominal ones compared with `=`
- decisions are numeric and ordinal, higher is better
- M4 optimized condition generators assume their evaluators really are
  monotonic w.r.t. the number of covered objects, this is not verified
- single threaded; rule conditions and the driver are not shared between
  concurrent runs
- no serialization of rules
"""

__all__ = ['abstract', 'approximations', 'common', 'concrete', 'data',
           'extra', 'measures', 'predefined', 'tests', 'util']
