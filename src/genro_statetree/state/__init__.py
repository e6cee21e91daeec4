# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""StateTree package - Immutable hierarchical state container.

The package is organized into:
- core: The StateTree node with path access, structural operations,
  traversal and equality
- loading: Factories building StateTree instances from scratch or from
  the plain {'values', 'substate'} form

Example:
    >>> from genro_statetree import empty
    >>> state = empty().updating_value('config.name', 'MyApp')
    >>> state['config.name']
    'MyApp'
"""

from .core import SUBSTATE_KEY, VALUES_KEY, StateTree
from .loading import builder, empty, from_plain_object, from_state

__all__ = [
    "StateTree",
    "VALUES_KEY",
    "SUBSTATE_KEY",
    "builder",
    "empty",
    "from_plain_object",
    "from_state",
]
