"""
Composite input groups for form state.

This package groups form fields ("inputs") into nested structures and exposes
always-current aggregate views and batch operations over them.

Key Features:
- InputGroup over mappings, lists and nested subgroups, or a function
  returning such a structure
- Aggregate confirmed, live and normalized values
- Batch reset/confirm following the tree's current shape
- Weak reverse index answering "which groups contain this input"
- Explicit cache discipline: access generations, change token, transactions

Quick Start:
    >>> from formgroup import Input, InputGroup
    >>>
    >>> street = Input("", name="street")
    >>> city = Input("Berlin", name="city")
    >>> name = Input("", name="name")
    >>>
    >>> address = InputGroup({'street': street, 'city': city})
    >>> form = InputGroup({'name': name, 'address': address})
    >>>
    >>> form.value
    {'name': '', 'address': {'street': '', 'city': 'Berlin'}}
    >>> form.reset({'address': {'city': 'Paris'}})
    >>> city.value
    'Paris'

Modules:
    - input_field: Input leaf (live/confirmed/normalized values)
    - input_group: InputGroup composite and its options
    - shape: Shape resolver and structural recursion algorithms
    - membership: Weak input -> groups reverse index
    - reactive: Access generations, change token, transactions, computed views
    - token_cache: Token-invalidated cache backing computed views
    - config: Process-wide default membership index
"""

from formgroup.exceptions import FormGroupError, InvalidNodeError, InputValidationError
from formgroup.node_kind import NodeKind, node_kind
from formgroup.shape import (
    UNSET,
    ValueMode,
    resolve,
    get_value_from_shape,
    reset_shape,
    confirm_shape,
    flatten_inputs,
    flatten_structure,
    unwrap_groups,
)
from formgroup.membership import MembershipIndex
from formgroup.config import (
    get_default_membership_index,
    set_default_membership_index,
    reset_default_membership_index,
)
from formgroup.reactive import ReactiveContext, computed
from formgroup.token_cache import TokenCache, CacheKey
from formgroup.input_field import Input
from formgroup.input_group import InputGroup, InputGroupOptions

__all__ = [
    # Exceptions
    'FormGroupError',
    'InvalidNodeError',
    'InputValidationError',
    # Node kinds
    'NodeKind',
    'node_kind',
    # Shape
    'UNSET',
    'ValueMode',
    'resolve',
    'get_value_from_shape',
    'reset_shape',
    'confirm_shape',
    'flatten_inputs',
    'flatten_structure',
    'unwrap_groups',
    # Membership
    'MembershipIndex',
    'get_default_membership_index',
    'set_default_membership_index',
    'reset_default_membership_index',
    # Reactive host
    'ReactiveContext',
    'computed',
    'TokenCache',
    'CacheKey',
    # Inputs and groups
    'Input',
    'InputGroup',
    'InputGroupOptions',
]

__version__ = '1.0.0'
__description__ = 'Composite input groups with aggregate views and a weak membership index'
