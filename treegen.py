#!/usr/bin/env python3
"""treegen.py

A grammar-driven random derivation tree generator.

Key features:
- Declare leaf generators, node definitions and a root, then validate once.
- Slots are fixed leaves, fixed nodes, or uniform random choices.
- Depth-bounded derivation that always halts, even on cyclic grammars.
- Explicit, seedable random source for reproducible trees.
- JSON-based grammar configuration and a small CLI.

Run:
  python treegen.py generate config.json tree.json --depth 4 --seed 123
  python treegen.py validate config.json
  python treegen.py example out.json
  python treegen.py --help
"""

from __future__ import annotations

import argparse
import enum
import json
import logging
import os
import random
import sys
from collections.abc import Callable, Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Literal, Union, cast

logger = logging.getLogger(__name__)

NodeKind = Literal["node", "leaf"]


# -------------------------
# Errors / Validation
# -------------------------


class GrammarError(ValueError):
    pass


class DuplicateDefinition(GrammarError):
    pass


class RootAlreadySet(GrammarError):
    pass


class RootNotSet(GrammarError):
    pass


class EmptyChoice(GrammarError):
    pass


class UnresolvedReference(GrammarError):
    def __init__(self, name: str, kind: NodeKind, where: str) -> None:
        super().__init__(f"{kind} '{name}' referenced by {where} is not defined")
        self.name = name
        self.kind = kind


class ConfigError(GrammarError):
    pass


def _require(cond: bool, msg: str) -> None:
    if not cond:
        raise ConfigError(msg)


def _as_float(x: Any, path: str) -> float:
    _require(
        isinstance(x, (int, float)) and not isinstance(x, bool),
        f"{path} must be a number",
    )
    return float(x)


def _as_int(x: Any, path: str) -> int:
    _require(
        isinstance(x, int) and not isinstance(x, bool), f"{path} must be an integer"
    )
    return int(x)


def _as_str(x: Any, path: str) -> str:
    _require(isinstance(x, str), f"{path} must be a string")
    return cast(str, x)


def _as_list(x: Any, path: str) -> list[Any]:
    _require(isinstance(x, list), f"{path} must be an array")
    return cast(list[Any], x)


def _as_dict(x: Any, path: str) -> dict[str, Any]:
    _require(isinstance(x, dict), f"{path} must be an object")
    return cast(dict[str, Any], x)


# -------------------------
# Slot model
# -------------------------


class _SlotOps:
    def __or__(self, other: SlotSpec) -> Choice:
        return Choice((cast(SlotSpec, self), other))


@dataclass(frozen=True)
class LeafSlot(_SlotOps):
    """Filled by invoking the leaf generator ``name``."""

    name: str


@dataclass(frozen=True)
class NodeSlot(_SlotOps):
    """Filled by deriving the node definition ``name``."""

    name: str


@dataclass(frozen=True)
class Choice(_SlotOps):
    """One alternative is drawn uniformly each time the slot is resolved.

    ``a | b | c`` builds a single three-way choice rather than nesting,
    so every alternative keeps an equal share.
    """

    alternatives: tuple[SlotSpec, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "alternatives", tuple(self.alternatives))
        if not self.alternatives:
            raise EmptyChoice("a choice needs at least one alternative")

    def __or__(self, other: SlotSpec) -> Choice:
        return Choice(self.alternatives + (other,))


SlotSpec = Union[LeafSlot, NodeSlot, Choice]


def leaf(name: str) -> LeafSlot:
    return LeafSlot(name)


def node(name: str) -> NodeSlot:
    return NodeSlot(name)


def iter_references(slot: SlotSpec) -> Iterator[tuple[NodeKind, str]]:
    """Yield every (kind, name) a slot can resolve to, in declaration order."""
    if isinstance(slot, LeafSlot):
        yield ("leaf", slot.name)
    elif isinstance(slot, NodeSlot):
        yield ("node", slot.name)
    elif isinstance(slot, Choice):
        for alt in slot.alternatives:
            yield from iter_references(alt)
    else:
        raise TypeError(f"not a slot specification: {slot!r}")


# -------------------------
# Grammar model
# -------------------------

Producer = Callable[[random.Random], Any]


@dataclass(frozen=True)
class LeafGenerator:
    name: str
    produce: Producer

    def __call__(self, rng: random.Random) -> Any:
        return self.produce(rng)


@dataclass(frozen=True)
class NodeDefinition:
    name: str
    slots: tuple[SlotSpec, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "slots", tuple(self.slots))

    def references(self) -> Iterator[tuple[NodeKind, str]]:
        for slot in self.slots:
            yield from iter_references(slot)


def _check_references(
    root: str | None,
    node_defs: Mapping[str, NodeDefinition],
    leaf_gens: Mapping[str, LeafGenerator],
) -> None:
    if root is None:
        raise RootNotSet("no root has been set")
    if root not in node_defs and root not in leaf_gens:
        raise UnresolvedReference(root, "node", "the root")
    for definition in node_defs.values():
        for kind, name in definition.references():
            table: Mapping[str, Any] = node_defs if kind == "node" else leaf_gens
            if name not in table:
                raise UnresolvedReference(name, kind, f"node '{definition.name}'")


def _grounded_nodes(node_defs: Mapping[str, NodeDefinition]) -> set[str]:
    """Nodes from which some derivation reaches a leaf or a slot-less node."""
    grounded: set[str] = set()

    def slot_grounded(slot: SlotSpec) -> bool:
        if isinstance(slot, LeafSlot):
            return True
        if isinstance(slot, NodeSlot):
            return slot.name in grounded
        return any(slot_grounded(alt) for alt in slot.alternatives)

    changed = True
    while changed:
        changed = False
        for name, definition in node_defs.items():
            if name in grounded:
                continue
            if not definition.slots or any(
                slot_grounded(s) for s in definition.slots
            ):
                grounded.add(name)
                changed = True
    return grounded


@dataclass(frozen=True)
class Grammar:
    """A validated, immutable grammar. Build one with ``GrammarBuilder``.

    Construction checks every reference and copies the tables into
    read-only mappings, so any ``Grammar`` value is a validated one.
    """

    root: str
    node_defs: Mapping[str, NodeDefinition]
    leaf_gens: Mapping[str, LeafGenerator]

    def __post_init__(self) -> None:
        _check_references(self.root, self.node_defs, self.leaf_gens)
        object.__setattr__(self, "node_defs", MappingProxyType(dict(self.node_defs)))
        object.__setattr__(self, "leaf_gens", MappingProxyType(dict(self.leaf_gens)))
        for name in self.ungrounded_nodes():
            logger.warning(
                "node %r can never reach a leaf; it only ends by forced termination",
                name,
            )

    def validate(self) -> Grammar:
        _check_references(self.root, self.node_defs, self.leaf_gens)
        return self

    def root_kind(self) -> NodeKind:
        return "node" if self.root in self.node_defs else "leaf"

    def ungrounded_nodes(self) -> list[str]:
        grounded = _grounded_nodes(self.node_defs)
        return [name for name in self.node_defs if name not in grounded]


class GrammarBuilder:
    """Collects registrations; ``validate()`` turns them into a ``Grammar``."""

    def __init__(self) -> None:
        self._root: str | None = None
        self._node_defs: dict[str, NodeDefinition] = {}
        self._leaf_gens: dict[str, LeafGenerator] = {}

    def register_node(
        self, name: str, slots: Iterable[SlotSpec] = ()
    ) -> GrammarBuilder:
        if name in self._node_defs:
            raise DuplicateDefinition(f"a node named '{name}' already exists")
        definition = NodeDefinition(name, tuple(slots))
        self._node_defs[name] = definition
        logger.debug(
            "registered node %r with %d slots", name, len(definition.slots)
        )
        return self

    # Same as register_node; signals that the node is not meant to have
    # node children. Not enforced.
    terminal = register_node

    def register_leaf(self, name: str, producer: Producer) -> GrammarBuilder:
        if name in self._leaf_gens:
            raise DuplicateDefinition(f"a leaf named '{name}' already exists")
        self._leaf_gens[name] = LeafGenerator(name, producer)
        logger.debug("registered leaf %r", name)
        return self

    def set_root(self, name: str) -> GrammarBuilder:
        if self._root is not None:
            raise RootAlreadySet(f"root already set: {self._root}")
        self._root = name
        return self

    def validate(self) -> Grammar:
        return Grammar(
            root=cast(str, self._root),
            node_defs=self._node_defs,
            leaf_gens=self._leaf_gens,
        )


# -------------------------
# Derivation trees
# -------------------------


@dataclass(frozen=True)
class DerivationTree:
    """One position of a derived tree.

    ``value`` is set only on leaf-generator positions. A tree with no
    children is a leaf of the output even when ``kind`` names a node
    definition: nodes cut off at the depth bound keep their kind but get
    no children.
    """

    kind: str
    value: Any = None
    children: tuple[DerivationTree, ...] = field(default=())

    @property
    def is_leaf(self) -> bool:
        return not self.children

    def walk(self) -> Iterator[tuple[int, DerivationTree]]:
        """Pre-order traversal yielding (depth, subtree)."""
        stack: list[tuple[int, DerivationTree]] = [(0, self)]
        while stack:
            depth, tree = stack.pop()
            yield depth, tree
            for child in reversed(tree.children):
                stack.append((depth + 1, child))

    def size(self) -> int:
        return sum(1 for _ in self.walk())

    def height(self) -> int:
        return max(depth for depth, _ in self.walk())

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"kind": self.kind, "value": self.value, "children": []}
        stack: list[tuple[DerivationTree, dict[str, Any]]] = [(self, out)]
        while stack:
            tree, d = stack.pop()
            for child in tree.children:
                cd: dict[str, Any] = {
                    "kind": child.kind,
                    "value": child.value,
                    "children": [],
                }
                d["children"].append(cd)
                stack.append((child, cd))
        return out


def format_tree(tree: DerivationTree, indent: str = "  ") -> str:
    lines: list[str] = []
    for depth, sub in tree.walk():
        label = sub.kind if sub.value is None else f"{sub.kind} = {sub.value!r}"
        lines.append(f"{indent * depth}{label}")
    return "\n".join(lines)


# -------------------------
# Derivation engine
# -------------------------


class Mode(enum.Enum):
    EXPAND = "expand"
    TERMINATE = "terminate"


@dataclass(frozen=True)
class Unresolved:
    kind: NodeKind
    name: str


@dataclass(frozen=True)
class Materialized:
    tree: DerivationTree


Ref = Union[Unresolved, Materialized]


def _produce_leaf(grammar: Grammar, name: str, rng: random.Random) -> DerivationTree:
    return DerivationTree(name, grammar.leaf_gens[name](rng), ())


def resolve_slot(grammar: Grammar, slot: SlotSpec, rng: random.Random) -> Ref:
    """Resolve one slot occurrence.

    Leaf slots are filled immediately. Node slots stay unresolved until the
    derivation decides whether to expand or terminate them. A choice draws
    exactly once, following nested choices until it reaches a concrete slot.
    """
    while isinstance(slot, Choice):
        slot = rng.choice(slot.alternatives)
    if isinstance(slot, LeafSlot):
        return Materialized(_produce_leaf(grammar, slot.name, rng))
    if isinstance(slot, NodeSlot):
        return Unresolved("node", slot.name)
    raise TypeError(f"not a slot specification: {slot!r}")


@dataclass
class _Frame:
    name: str
    depth: int
    child_mode: Mode
    candidates: list[Ref]
    children: list[DerivationTree]


def _open(
    grammar: Grammar,
    ref: Ref,
    depth: int,
    max_depth: int,
    rng: random.Random,
    mode: Mode,
) -> DerivationTree | _Frame:
    if isinstance(ref, Materialized):
        return ref.tree
    if ref.kind == "leaf":
        # Leaves get a fresh value whether expanded or terminated.
        return _produce_leaf(grammar, ref.name, rng)
    if mode is Mode.TERMINATE:
        return DerivationTree(ref.name, None, ())

    definition = grammar.node_defs[ref.name]
    # All slots are resolved before any child is derived so that the order
    # of random draws is fixed for a given seed.
    candidates = [resolve_slot(grammar, s, rng) for s in definition.slots]
    child_mode = Mode.EXPAND if depth < max_depth else Mode.TERMINATE
    return _Frame(ref.name, depth, child_mode, candidates, [])


def _derive(
    grammar: Grammar,
    ref: Ref,
    depth: int,
    max_depth: int,
    rng: random.Random,
    mode: Mode,
) -> DerivationTree:
    """Derive ``ref`` depth-first using an explicit stack of open nodes.

    The top frame's next candidate is opened; a finished subtree is appended
    to its parent frame, an unfinished node is pushed.
    """
    opened = _open(grammar, ref, depth, max_depth, rng, mode)
    if isinstance(opened, DerivationTree):
        return opened

    stack: list[_Frame] = [opened]
    while True:
        frame = stack[-1]
        i = len(frame.children)
        if i < len(frame.candidates):
            opened = _open(
                grammar,
                frame.candidates[i],
                frame.depth + 1,
                max_depth,
                rng,
                frame.child_mode,
            )
            if isinstance(opened, DerivationTree):
                frame.children.append(opened)
            else:
                stack.append(opened)
            continue

        stack.pop()
        tree = DerivationTree(frame.name, None, tuple(frame.children))
        if not stack:
            return tree
        stack[-1].children.append(tree)


def _kind_of(grammar: Grammar, name: str, kind: NodeKind | None) -> NodeKind:
    if kind is not None:
        return kind
    if name in grammar.node_defs:
        return "node"
    if name in grammar.leaf_gens:
        return "leaf"
    raise UnresolvedReference(name, "node", "the caller")


def _check_max_depth(max_depth: Any) -> None:
    if not isinstance(max_depth, int) or isinstance(max_depth, bool):
        raise ValueError(f"max_depth must be an integer, got {max_depth!r}")
    if max_depth < 0:
        raise ValueError(f"max_depth must be >= 0, got {max_depth}")


def expand(
    grammar: Grammar,
    name: str,
    current_depth: int,
    max_depth: int,
    rng: random.Random,
    kind: NodeKind | None = None,
) -> DerivationTree:
    """Derive ``name`` as if it sat ``current_depth`` hops below the root."""
    _check_max_depth(max_depth)
    ref = Unresolved(_kind_of(grammar, name, kind), name)
    return _derive(grammar, ref, current_depth, max_depth, rng, Mode.EXPAND)


def terminate(
    grammar: Grammar,
    name: str,
    rng: random.Random,
    kind: NodeKind | None = None,
) -> DerivationTree:
    """Force ``name`` to a childless tree.

    A leaf gets a newly produced value. A node keeps its kind but none of
    its slots are filled.
    """
    ref = Unresolved(_kind_of(grammar, name, kind), name)
    return _derive(grammar, ref, 0, 0, rng, Mode.TERMINATE)


def generate(
    grammar: Grammar,
    max_depth: int,
    rng: random.Random | None = None,
    *,
    seed: int | None = None,
) -> DerivationTree:
    """Derive one complete tree from the grammar's root.

    The root is at depth 0. Node children of a node at depth ``d`` are
    expanded while ``d < max_depth`` and terminated otherwise, so the
    result is never taller than ``max_depth + 1`` edges.

    ``rng`` is used as-is and is not locked; share one between threads only
    with external synchronization. When omitted a new ``random.Random(seed)``
    is created for this call.
    """
    if not isinstance(grammar, Grammar):
        raise TypeError(
            "generate() needs a validated Grammar; call GrammarBuilder.validate()"
        )
    _check_max_depth(max_depth)
    if rng is None:
        rng = random.Random(seed)

    root = Unresolved(grammar.root_kind(), grammar.root)
    tree = _derive(grammar, root, 0, max_depth, rng, Mode.EXPAND)
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(
            "derived %r at max_depth=%d: size=%d height=%d",
            grammar.root,
            max_depth,
            tree.size(),
            tree.height(),
        )
    return tree


# -------------------------
# Config parsing
# -------------------------


@dataclass(frozen=True)
class TreeConfig:
    name: str
    grammar: Grammar
    depth: int
    seed: int | None


def _const_producer(spec: dict[str, Any], path: str) -> Producer:
    _require("value" in spec, f"{path}.value is required")
    value = spec["value"]
    return lambda rng: value


def _uniform_producer(spec: dict[str, Any], path: str) -> Producer:
    low = _as_float(spec.get("low", 0.0), f"{path}.low")
    high = _as_float(spec.get("high", 1.0), f"{path}.high")
    _require(low <= high, f"{path}.low must be <= {path}.high")
    return lambda rng: rng.uniform(low, high)


def _randint_producer(spec: dict[str, Any], path: str) -> Producer:
    low = _as_int(spec.get("low"), f"{path}.low")
    high = _as_int(spec.get("high"), f"{path}.high")
    _require(low <= high, f"{path}.low must be <= {path}.high")
    return lambda rng: rng.randint(low, high)


def _choice_producer(spec: dict[str, Any], path: str) -> Producer:
    values = _as_list(spec.get("values"), f"{path}.values")
    _require(len(values) > 0, f"{path}.values must be non-empty")
    options = tuple(values)
    return lambda rng: rng.choice(options)


def _gauss_producer(spec: dict[str, Any], path: str) -> Producer:
    mu = _as_float(spec.get("mu", 0.0), f"{path}.mu")
    sigma = _as_float(spec.get("sigma", 1.0), f"{path}.sigma")
    _require(sigma >= 0, f"{path}.sigma must be >= 0")
    return lambda rng: rng.gauss(mu, sigma)


_PRODUCER_TYPES: dict[str, Callable[[dict[str, Any], str], Producer]] = {
    "const": _const_producer,
    "uniform": _uniform_producer,
    "randint": _randint_producer,
    "choice": _choice_producer,
    "gauss": _gauss_producer,
}


def parse_producer(obj: Any, path: str) -> Producer:
    spec = _as_dict(obj, path)
    ptype = _as_str(spec.get("type"), f"{path}.type")
    factory = _PRODUCER_TYPES.get(ptype)
    if factory is None:
        raise ConfigError(
            f"{path}.type must be one of {sorted(_PRODUCER_TYPES)}; got {ptype!r}"
        )
    return factory(spec, path)


def parse_slot(obj: Any, path: str) -> SlotSpec:
    spec = _as_dict(obj, path)
    _require(
        len(spec) == 1,
        f"{path} must have exactly one of 'leaf', 'node' or 'choice'",
    )
    key, value = next(iter(spec.items()))
    if key == "leaf":
        return LeafSlot(_as_str(value, f"{path}.leaf"))
    if key == "node":
        return NodeSlot(_as_str(value, f"{path}.node"))
    if key == "choice":
        alts = _as_list(value, f"{path}.choice")
        _require(len(alts) > 0, f"{path}.choice must be non-empty")
        return Choice(
            tuple(parse_slot(a, f"{path}.choice[{i}]") for i, a in enumerate(alts))
        )
    raise ConfigError(f"{path} has unknown slot kind {key!r}")


def parse_config(obj: dict[str, Any]) -> TreeConfig:
    obj = _as_dict(obj, "root")

    name = _as_str(obj.get("name", "Tree"), "name")
    root = _as_str(obj.get("root"), "root")
    _require(len(root) > 0, "root must be non-empty")

    depth = _as_int(obj.get("depth", 3), "depth")
    _require(depth >= 0, "depth must be >= 0")

    seed = obj.get("seed")
    if seed is not None:
        seed = _as_int(seed, "seed")

    builder = GrammarBuilder()

    leaves = _as_dict(obj.get("leaves", {}), "leaves")
    for leaf_name, spec in leaves.items():
        builder.register_leaf(leaf_name, parse_producer(spec, f"leaves['{leaf_name}']"))

    nodes = _as_dict(obj.get("nodes", {}), "nodes")
    for node_name, slots_obj in nodes.items():
        path = f"nodes['{node_name}']"
        slots = _as_list(slots_obj, path)
        builder.register_node(
            node_name,
            tuple(parse_slot(s, f"{path}[{i}]") for i, s in enumerate(slots)),
        )

    builder.set_root(root)
    return TreeConfig(name=name, grammar=builder.validate(), depth=depth, seed=seed)


def load_json(path: str) -> dict[str, Any]:
    with open(path, encoding="utf-8") as f:
        try:
            return cast(dict[str, Any], json.load(f))
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON in {path}: {e}") from e


def _ensure_parent_dir(path: str) -> None:
    os.makedirs(os.path.dirname(os.path.abspath(path)) or ".", exist_ok=True)


def dump_json(obj: dict[str, Any], path: str) -> None:
    _ensure_parent_dir(path)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(obj, f, indent=2, ensure_ascii=False)
        f.write("\n")


# -------------------------
# Example grammar
# -------------------------


def example_config() -> dict[str, Any]:
    """Recursive space partitioning: split a canvas or paint a square."""
    cfg = {
        "name": "Mondrian",
        "root": "split",
        "depth": 3,
        "leaves": {
            "angle": {"type": "uniform", "low": 0, "high": 360},
            "color": {
                "type": "choice",
                "values": ["white", "black", "red", "yellow", "green", "blue"],
            },
        },
        "nodes": {
            "split": [
                {"leaf": "angle"},
                {"choice": [{"node": "split"}, {"node": "square"}]},
                {"choice": [{"node": "split"}, {"node": "square"}]},
            ],
            "square": [{"leaf": "color"}],
        },
    }

    # Internal sanity check: the bundled config must always parse cleanly.
    parse_config(cfg)
    return cfg


# -------------------------
# CLI / Help
# -------------------------

HELP_EPILOG = r"""
GRAMMAR JSON SYNTAX

Top-level keys

  name: string (optional)
      A human-readable title.

  root: string (required)
      Name of the node (or leaf) the derivation starts from.

  depth: integer >= 0 (default 3)
      Maximum expansion depth. The root is at depth 0; node children of a
      node at the maximum depth are cut off as childless nodes.

  seed: integer (optional)
      Seed for repeatable trees.

  leaves: object mapping name -> producer (optional)

      { "type": "const",   "value": <any JSON value> }
      { "type": "uniform", "low": <number>, "high": <number> }
      { "type": "randint", "low": <int>, "high": <int> }
      { "type": "choice",  "values": [<any>, ...] }
      { "type": "gauss",   "mu": <number>, "sigma": <number> }

  nodes: object mapping name -> array of slots (optional)

      { "leaf": "<leaf name>" }       fill with a leaf value
      { "node": "<node name>" }       fill with a derived node
      { "choice": [<slot>, ...] }     pick one alternative uniformly

Example

    {
      "root": "split",
      "leaves": {"angle": {"type": "uniform", "low": 0, "high": 360}},
      "nodes": {
        "split": [
          {"leaf": "angle"},
          {"choice": [{"node": "split"}, {"leaf": "angle"}]}
        ]
      }
    }
"""


def build_argparser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="treegen",
        description="Random depth-bounded derivation trees from a grammar.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=HELP_EPILOG,
    )
    p.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging."
    )

    sub = p.add_subparsers(dest="cmd", required=True)

    pg = sub.add_parser(
        "generate",
        help="Derive one tree from a grammar config.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    pg.add_argument("config", help="Path to the grammar JSON config.")
    pg.add_argument(
        "output", nargs="?", default=None, help="Where to write the tree (default: stdout)."
    )
    pg.add_argument(
        "--depth", type=int, default=None, help="Override the config's depth."
    )
    pg.add_argument(
        "--seed", type=int, default=None, help="Seed for repeatable randomness."
    )
    pg.add_argument(
        "--format",
        choices=["json", "outline"],
        default="json",
        help="Output format. Default: json.",
    )

    pv = sub.add_parser(
        "validate",
        help="Validate a grammar config and print a brief summary.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    pv.add_argument("config", help="Path to the grammar JSON config.")

    pe = sub.add_parser(
        "example",
        help="Write the bundled example grammar config.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    pe.add_argument("output", help="Where to write the JSON file.")

    return p


# -------------------------
# Commands
# -------------------------


def cmd_generate(
    config_path: str,
    output_path: str | None,
    depth: int | None,
    seed: int | None,
    fmt: str,
) -> None:
    cfg = parse_config(load_json(config_path))
    if depth is None:
        depth = cfg.depth
    _require(depth >= 0, "--depth must be >= 0")
    if seed is None:
        seed = cfg.seed

    tree = generate(cfg.grammar, depth, seed=seed)

    if fmt == "outline":
        text = format_tree(tree) + "\n"
    else:
        text = json.dumps(tree.to_dict(), indent=2, ensure_ascii=False) + "\n"

    if output_path is None:
        sys.stdout.write(text)
        return
    _ensure_parent_dir(output_path)
    with open(output_path, "w", encoding="utf-8") as f:
        f.write(text)


def cmd_validate(config_path: str) -> None:
    cfg = parse_config(load_json(config_path))
    grammar = cfg.grammar.validate()

    print(f"name: {cfg.name}")
    print(f"root: {grammar.root} ({grammar.root_kind()})")
    print(f"nodes: {len(grammar.node_defs)}")
    print(f"leaves: {len(grammar.leaf_gens)}")
    print(f"depth: {cfg.depth}")

    ungrounded = grammar.ungrounded_nodes()
    if ungrounded:
        print(f"warning: nodes that never reach a leaf: {', '.join(ungrounded)}")

    # Derive one sample to catch failures raised by leaf producers.
    sample = generate(grammar, cfg.depth, seed=cfg.seed)
    print(f"sample tree: size={sample.size()} height={sample.height()}")


def cmd_example(output_path: str) -> None:
    dump_json(example_config(), output_path)


def main(argv: list[str] | None = None) -> int:
    ap = build_argparser()
    args = ap.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        if args.cmd == "generate":
            cmd_generate(args.config, args.output, args.depth, args.seed, args.format)
        elif args.cmd == "validate":
            cmd_validate(args.config)
        elif args.cmd == "example":
            cmd_example(args.output)
        else:
            raise AssertionError("unreachable")
    except GrammarError as e:
        print(f"Grammar error: {e}", file=sys.stderr)
        return 2
    except OSError as e:
        print(f"File error: {e}", file=sys.stderr)
        return 2
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
