# ruleset.py
import os
from dataclasses import dataclass
from typing import Any, Dict, List, Sequence, Tuple

from pydantic import BaseModel, Field, ValidationError

from errors import CompileError, ConfigurationError, EvaluationError
from hotspot_rules import RULE_TYPES, HotspotRule
from models import Snapshot


class RuleEntry(BaseModel):
    rule: str
    salience: int = 0
    params: Dict[str, Any] = Field(default_factory=dict)


class RuleResource(BaseModel):
    rules: List[RuleEntry]


@dataclass(frozen=True)
class CompiledRule:
    salience: int
    rule: HotspotRule


@dataclass(frozen=True)
class RuleSet:
    """
    A compiled, read-only set of hotspot rules.

    Rules are stateless, so one RuleSet may evaluate several snapshots
    concurrently as long as each snapshot is owned by a single caller.
    """

    name: str
    version: str
    rules: Tuple[CompiledRule, ...]

    def rule_names(self) -> List[str]:
        return [c.rule.name for c in self.rules]

    def evaluate(self, snapshot: Snapshot) -> Snapshot:
        """
        Run every rule once, in salience order, against the snapshot.
        A single pass: a rule's action never re-triggers earlier rules.
        """
        missing = [f for f in ("write_stats", "read_stats") if getattr(snapshot, f) is None]
        if missing:
            raise EvaluationError(
                f"rule set {self.name}/{self.version}: required facts not populated: {', '.join(missing)}"
            )

        for compiled in self.rules:
            try:
                if compiled.rule.when(snapshot):
                    compiled.rule.then(snapshot)
            except (ArithmeticError, AttributeError, TypeError, ValueError) as e:
                raise EvaluationError(f"rule {compiled.rule.name} failed: {e!r}") from e
        return snapshot

    def describe(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "version": self.version,
            "rules": [
                {"rule": c.rule.name, "salience": c.salience, "params": c.rule.params()}
                for c in self.rules
            ],
        }


def _parse_resource(resource: str, source: str) -> List[RuleEntry]:
    try:
        parsed = RuleResource.model_validate_json(resource)
    except ValidationError as e:
        raise CompileError(f"invalid rule resource {source}: {e}") from e
    return parsed.rules


def _build_rule(entry: RuleEntry, source: str) -> HotspotRule:
    rule_cls = RULE_TYPES.get(entry.rule)
    if rule_cls is None:
        raise CompileError(
            f"unknown rule {entry.rule!r} in {source}; known rules: {', '.join(sorted(RULE_TYPES))}"
        )
    try:
        return rule_cls(**entry.params)
    except (TypeError, ValueError) as e:
        raise CompileError(f"bad params for rule {entry.rule} in {source}: {e}") from e


def _compile_entries(name: str, version: str, sourced: Sequence[Tuple[RuleEntry, str]]) -> RuleSet:
    seen: Dict[str, str] = {}
    compiled: List[CompiledRule] = []
    for entry, source in sourced:
        if entry.rule in seen:
            raise CompileError(f"duplicate rule {entry.rule!r} in {source} (already defined in {seen[entry.rule]})")
        seen[entry.rule] = source
        compiled.append(CompiledRule(salience=entry.salience, rule=_build_rule(entry, source)))

    # sorted() is stable: equal salience keeps declaration order
    ordered = sorted(compiled, key=lambda c: -c.salience)
    return RuleSet(name=name, version=version, rules=tuple(ordered))


def compile_rule_set(name: str, version: str, resource: str, source: str = "<string>") -> RuleSet:
    """Compile a single rule resource (JSON text) into a RuleSet."""
    entries = _parse_resource(resource, source)
    return _compile_entries(name, version, [(e, source) for e in entries])


def load_rule_resource(path: str) -> str:
    if not os.path.exists(path):
        raise ConfigurationError(f"rule file not found: {path}")
    try:
        with open(path, "r", encoding="utf-8") as f:
            return f.read()
    except OSError as e:
        raise ConfigurationError(f"cannot read rule file {path}: {e}") from e


def compile_rule_files(paths: Sequence[str], name: str, version: str) -> RuleSet:
    """Load one or more rule files into the same RuleSet."""
    if not paths:
        raise ConfigurationError("at least one rule file is required")

    sourced: List[Tuple[RuleEntry, str]] = []
    for i, path in enumerate(paths):
        try:
            text = load_rule_resource(path)
            entries = _parse_resource(text, path)
        except ConfigurationError as e:
            raise type(e)(f"loading rule file [{i + 1}/{len(paths)}] {path} failed: {e}") from e
        sourced.extend((entry, path) for entry in entries)

    return _compile_entries(name, version, sourced)
