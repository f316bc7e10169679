"""JSON and YAML serialization for pattern AST trees.

This module provides functions to serialize AST trees to JSON and YAML formats,
and to deserialize them back to AST nodes.

Example:
    from genpass.ast import getASTfromPattern, ast_to_json, ast_from_json

    ast = getASTfromPattern("A a<7> #<2>")
    json_str = ast_to_json(ast)
    ast_restored = ast_from_json(json_str)
"""

from __future__ import annotations

import dataclasses
import json
from typing import Any

from .builder import Position
from .nodes import (
    PatternNode,
    LiteralNode,
    AnyNode,
    AlphaNode,
    NumericNode,
    SymbolNode,
    BasicSymbolNode,
    SampleSetNode,
    RangeNode,
    AsciiRangeNode,
    GroupNode,
    RootNode,
)


# Registry mapping class names to classes for deserialization
_NODE_REGISTRY: dict[str, type[PatternNode]] = {
    cls.__name__: cls
    for cls in [
        LiteralNode,
        AnyNode,
        AlphaNode,
        NumericNode,
        SymbolNode,
        BasicSymbolNode,
        SampleSetNode,
        RangeNode,
        AsciiRangeNode,
        GroupNode,
        RootNode,
    ]
}


def _serialized_fields(node_class: type[PatternNode]) -> list[str]:
    # Derived fields (init=False) are recomputed by the constructor.
    return [
        f.name for f in dataclasses.fields(node_class)
        if f.init and f.name != "position"
    ]


def _serialize_position(position: Position) -> dict[str, Any]:
    return {
        "origin": position.origin,
        "index": position.index,
    }


def _serialize_value(value: Any, include_position: bool) -> Any:
    """Serialize a field value recursively."""
    if value is None:
        return None
    elif isinstance(value, PatternNode):
        return _serialize_node(value, include_position)
    elif isinstance(value, list):
        return [_serialize_value(item, include_position) for item in value]
    elif isinstance(value, (str, int, bool)):
        return value
    else:
        raise TypeError(f"Unsupported type for serialization: {type(value)}")


def _serialize_node(node: PatternNode, include_position: bool) -> dict[str, Any]:
    result: dict[str, Any] = {
        "_type": node.__class__.__name__,
    }

    if include_position and node.position is not None:
        result["_position"] = _serialize_position(node.position)

    for name in _serialized_fields(type(node)):
        result[name] = _serialize_value(getattr(node, name), include_position)

    return result


def ast_to_dict(
    ast: PatternNode | None,
    include_position: bool = True,
) -> dict[str, Any] | None:
    """Convert an AST to a Python dictionary (JSON-serializable).

    Args:
        ast: An AST node or None.
        include_position: If True, include source position information (default: True).

    Returns:
        A dictionary representation of the AST, or None.
    """
    if ast is None:
        return None
    return _serialize_node(ast, include_position)


def ast_to_json(
    ast: PatternNode | None,
    include_position: bool = True,
    indent: int | None = 2,
) -> str:
    """Serialize an AST to a JSON string.

    Args:
        ast: An AST node or None.
        include_position: If True, include source position information (default: True).
        indent: Indentation level for pretty-printing. Use None for compact output.
    """
    data = ast_to_dict(ast, include_position=include_position)
    return json.dumps(data, indent=indent)


def _deserialize_position(data: dict[str, Any]) -> Position:
    return Position(origin=data["origin"], index=data["index"])


def _deserialize_value(value: Any) -> Any:
    """Deserialize a field value recursively."""
    if value is None:
        return None
    elif isinstance(value, dict) and "_type" in value:
        return _deserialize_node(value)
    elif isinstance(value, list):
        return [_deserialize_value(item) for item in value]
    elif isinstance(value, (str, int, bool)):
        return value
    else:
        raise TypeError(f"Unsupported type for deserialization: {type(value)}")


def _deserialize_node(data: dict[str, Any]) -> PatternNode:
    if "_type" not in data:
        raise ValueError("Missing '_type' field in node data")

    type_name = data["_type"]
    if type_name not in _NODE_REGISTRY:
        raise ValueError(f"Unknown node type: {type_name}")

    node_class = _NODE_REGISTRY[type_name]
    field_names = set(_serialized_fields(node_class))

    kwargs: dict[str, Any] = {}
    if "_position" in data:
        kwargs["position"] = _deserialize_position(data["_position"])
    for key, value in data.items():
        if key.startswith("_"):
            continue  # Skip _type, _position
        if key in field_names:
            kwargs[key] = _deserialize_value(value)

    return node_class(**kwargs)


def ast_from_dict(data: dict[str, Any] | None) -> PatternNode | None:
    """Reconstruct an AST from a Python dictionary.

    Raises:
        ValueError: If the data contains an unknown node type or is malformed.
    """
    if data is None:
        return None
    return _deserialize_node(data)


def ast_from_json(json_str: str) -> PatternNode | None:
    """Deserialize an AST from a JSON string.

    Raises:
        ValueError: If the JSON contains an unknown node type or is malformed.
        json.JSONDecodeError: If the string is not valid JSON.
    """
    data = json.loads(json_str)
    return ast_from_dict(data)


def ast_to_yaml(
    ast: PatternNode | None,
    include_position: bool = True,
) -> str:
    """Serialize an AST to a YAML string.

    Requires PyYAML to be installed: pip install genpass[yaml]

    Raises:
        ImportError: If PyYAML is not installed.
    """
    try:
        import yaml
    except ImportError:
        raise ImportError(
            "PyYAML is required for YAML serialization. "
            "Install it with: pip install genpass[yaml]"
        )

    data = ast_to_dict(ast, include_position=include_position)
    return yaml.dump(data, default_flow_style=False, sort_keys=False, allow_unicode=True)


def ast_from_yaml(yaml_str: str) -> PatternNode | None:
    """Deserialize an AST from a YAML string.

    Requires PyYAML to be installed: pip install genpass[yaml]

    Raises:
        ImportError: If PyYAML is not installed.
        ValueError: If the YAML contains an unknown node type or is malformed.
    """
    try:
        import yaml
    except ImportError:
        raise ImportError(
            "PyYAML is required for YAML deserialization. "
            "Install it with: pip install genpass[yaml]"
        )

    data = yaml.safe_load(yaml_str)
    return ast_from_dict(data)
