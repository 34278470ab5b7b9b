"""Argument validation for tool calls.

Raw tool arguments arrive as untyped JSON-like values. They are checked
against the tool's declared ParameterSpec list before anything is sent to
the remote API; no implicit coercion is performed.
"""

import copy
from collections.abc import Mapping
from typing import Any

from .exceptions import (
    InvalidValueError,
    MissingParameterError,
    TypeMismatchError,
    UnknownParameterError,
)
from .schema import ParameterKind, ParameterSpec, ToolDescriptor, ValidatedArgs


def kind_of(value: Any) -> str:
    """
    Name the JSON kind of a runtime value.

    Examples:
        >>> kind_of(True)
        'boolean'
        >>> kind_of(3)
        'integer'
        >>> kind_of(3.0)
        'number'
        >>> kind_of({"a": 1})
        'object'
    """
    # bool is a subclass of int; check it first
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, float):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, Mapping):
        return "object"
    if isinstance(value, (list, tuple)):
        return "array"
    if value is None:
        return "null"
    return type(value).__name__


def matches_kind(value: Any, kind: ParameterKind) -> bool:
    """Check a value against a declared kind."""
    return kind_of(value) == kind.value


def _check_constraints(spec: ParameterSpec, value: Any) -> None:
    if spec.min_length is not None and len(value) < spec.min_length:
        raise InvalidValueError(
            spec.name, f"must be at least {spec.min_length} character(s) long"
        )
    if spec.items is not None:
        for i, item in enumerate(value):
            if not matches_kind(item, spec.items):
                raise TypeMismatchError(f"{spec.name}[{i}]", spec.items.value, kind_of(item))


def validate_arguments(descriptor: ToolDescriptor, arguments: Any) -> ValidatedArgs:
    """
    Validate raw tool arguments against a descriptor.

    Rules, applied per parameter in declared order:
    1. Present: the value's kind must match the declared kind, strings must
       meet min_length and array elements must match the declared items kind
    2. Absent and required: rejected
    3. Absent and optional: the declared default (or None) is substituted
    A JSON null counts as absent. Finally, any undeclared key is rejected.

    Args:
        descriptor: Tool descriptor holding the parameter declarations
        arguments: Raw argument mapping (None is treated as empty)

    Returns:
        Dict of validated arguments in declared parameter order

    Raises:
        TypeMismatchError: A value or array element has the wrong kind (or
            arguments is not a mapping)
        InvalidValueError: A string is shorter than its min_length
        MissingParameterError: A required parameter is absent
        UnknownParameterError: An argument key is not declared
    """
    if arguments is None:
        arguments = {}
    if not isinstance(arguments, Mapping):
        raise TypeMismatchError("arguments", ParameterKind.OBJECT.value, kind_of(arguments))

    validated: ValidatedArgs = {}
    for spec in descriptor.parameters:
        value = arguments.get(spec.name)

        if value is not None:
            if not matches_kind(value, spec.kind):
                raise TypeMismatchError(spec.name, spec.kind.value, kind_of(value))
            _check_constraints(spec, value)
            validated[spec.name] = value
        elif spec.required:
            raise MissingParameterError(spec.name)
        else:
            validated[spec.name] = copy.deepcopy(spec.default)

    declared = set(validated)
    for key in arguments:
        if key not in declared:
            raise UnknownParameterError(str(key), descriptor.parameter_names)

    return validated


__all__ = ["kind_of", "matches_kind", "validate_arguments"]
