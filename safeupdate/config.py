from __future__ import annotations

from dataclasses import dataclass, replace
from types import MappingProxyType
from typing import Any, Callable, Iterable, Mapping, Optional, Sequence

from .compiler.models import Action
from .errors import ConfigurationError

LAST_UPDATED_FIELD = "lastUpdated"
VERSION_FIELD = "version"

ValueRule = Callable[[Any], None]

_RULE_KEYS = {
    "allowAll": "allow_all",
    "allow_all": "allow_all",
    "whitelist": "whitelist",
    "blacklist": "blacklist",
    "mandatoryFields": "mandatory_fields",
    "mandatory_fields": "mandatory_fields",
}

_POLICY_KEYS = {
    "actionRules": "action_rules",
    "action_rules": "action_rules",
    "autoTimestamp": "auto_timestamp",
    "auto_timestamp": "auto_timestamp",
    "autoVersion": "auto_version",
    "auto_version": "auto_version",
    "failOnError": "fail_on_error",
    "fail_on_error": "fail_on_error",
    "valueRules": "value_rules",
    "value_rules": "value_rules",
}


def _rename_keys(raw: Any, aliases: Mapping[str, str], what: str) -> dict[str, Any]:
    if not isinstance(raw, Mapping):
        raise ConfigurationError(
            "Malformed configuration",
            f"{what} must be an object, got {type(raw).__name__}",
        )
    kwargs: dict[str, Any] = {}
    for name, value in raw.items():
        if name not in aliases:
            raise ConfigurationError(
                "Malformed configuration",
                f"Unknown {what} option {name!r}",
            )
        kwargs[aliases[name]] = value
    return kwargs


def _field_set(value: Any, option: str) -> Optional[frozenset[str]]:
    if value is None:
        return None
    if isinstance(value, (str, bytes)) or not isinstance(value, Iterable):
        raise ConfigurationError(
            "Malformed configuration",
            f"`{option}` must be a list of field names",
        )
    fields = frozenset(value)
    for name in fields:
        if not isinstance(name, str):
            raise ConfigurationError(
                "Malformed configuration",
                f"`{option}` must contain only strings, got {name!r}",
            )
    return fields


def _check_flag(value: Any, option: str) -> None:
    if not isinstance(value, bool):
        raise ConfigurationError(
            "Malformed configuration",
            f"`{option}` must be a boolean, got {value!r}",
        )


@dataclass(frozen=True)
class ActionRule:
    """
    Permission rule for one action.

    ``allow_all`` accepts any field. Otherwise a whitelist restricts the action
    to the listed fields and a blacklist forbids the listed ones; a rule with
    none of the three grants nothing. ``mandatory_fields`` must appear whenever
    the action is used at all.
    """

    allow_all: bool = False
    whitelist: Optional[frozenset[str]] = None
    blacklist: Optional[frozenset[str]] = None
    mandatory_fields: Optional[frozenset[str]] = None

    def __post_init__(self) -> None:
        _check_flag(self.allow_all, "allowAll")
        object.__setattr__(self, "whitelist", _field_set(self.whitelist, "whitelist"))
        object.__setattr__(self, "blacklist", _field_set(self.blacklist, "blacklist"))
        object.__setattr__(
            self,
            "mandatory_fields",
            _field_set(self.mandatory_fields, "mandatoryFields"),
        )

    @classmethod
    def from_mapping(cls, raw: Any) -> "ActionRule":
        return cls(**_rename_keys(raw, _RULE_KEYS, "action rule"))

    @property
    def grants_anything(self) -> bool:
        return self.allow_all or self.whitelist is not None or self.blacklist is not None

    def allowing(self, field: str) -> "ActionRule":
        """Copy of this rule that also permits ``field``."""
        whitelist = self.whitelist
        if whitelist is not None:
            whitelist = whitelist | {field}
        elif not self.grants_anything:
            whitelist = frozenset({field})
        blacklist = self.blacklist
        if blacklist is not None:
            blacklist = blacklist - {field}
        return replace(self, whitelist=whitelist, blacklist=blacklist)


@dataclass(frozen=True)
class PolicyConfig:
    """
    Caller-owned policy for one compile call.

    The object is never modified by the compiler; see ``effective()``.
    """

    action_rules: Optional[Mapping[Action, ActionRule]]
    auto_timestamp: bool = False
    auto_version: bool = False
    fail_on_error: bool = True
    value_rules: Optional[Mapping[str, Sequence[ValueRule]]] = None

    def __post_init__(self) -> None:
        """Validate and normalize configuration parameters."""
        if self.action_rules is None:
            raise ConfigurationError(
                "Malformed configuration",
                "Configuration must contain `actionRules` object",
            )
        if not isinstance(self.action_rules, Mapping):
            raise ConfigurationError(
                "Malformed configuration",
                "`actionRules` must map action names to rules",
            )
        rules: dict[Action, ActionRule] = {}
        for name, rule in self.action_rules.items():
            try:
                action = Action.parse(name)
            except ValueError as exc:
                raise ConfigurationError("Malformed configuration", str(exc)) from exc
            if action in rules:
                raise ConfigurationError(
                    "Malformed configuration",
                    f"Action '{action.value}' has more than one rule",
                )
            if not isinstance(rule, ActionRule):
                rule = ActionRule.from_mapping(rule)
            rules[action] = rule
        object.__setattr__(self, "action_rules", MappingProxyType(rules))

        _check_flag(self.auto_timestamp, "autoTimestamp")
        _check_flag(self.auto_version, "autoVersion")
        _check_flag(self.fail_on_error, "failOnError")

        if self.value_rules is not None:
            if not isinstance(self.value_rules, Mapping):
                raise ConfigurationError(
                    "Malformed configuration",
                    "`valueRules` must map field names to lists of rules",
                )
            value_rules: dict[str, tuple[ValueRule, ...]] = {}
            for field, checks in self.value_rules.items():
                checks = (checks,) if callable(checks) else tuple(checks)
                if not all(callable(check) for check in checks):
                    raise ConfigurationError(
                        "Malformed configuration",
                        f"Value rules for field {field!r} must be callables",
                    )
                value_rules[field] = checks
            object.__setattr__(self, "value_rules", MappingProxyType(value_rules))

    @classmethod
    def from_mapping(cls, raw: Any) -> "PolicyConfig":
        """
        Build a policy from its JSON shape.

        Example:
            >>> PolicyConfig.from_mapping({
            ...     "actionRules": {"assign": {"whitelist": ["status"]}},
            ...     "autoTimestamp": True,
            ... })
        """
        kwargs = _rename_keys(raw, _POLICY_KEYS, "policy")
        kwargs.setdefault("action_rules", None)
        return cls(**kwargs)

    @classmethod
    def coerce(cls, obj: Any) -> "PolicyConfig":
        if isinstance(obj, PolicyConfig):
            return obj
        if obj is None:
            raise ConfigurationError(
                "Malformed configuration",
                "A policy configuration is required",
            )
        return cls.from_mapping(obj)

    def rule_for(self, action: Action) -> Optional[ActionRule]:
        return self.action_rules.get(action)

    def auto_fields(self) -> list[tuple[str, Action]]:
        """Bookkeeping fields injected into every request, with their action."""
        fields = []
        if self.auto_timestamp:
            fields.append((LAST_UPDATED_FIELD, Action.ASSIGN))
        if self.auto_version:
            fields.append((VERSION_FIELD, Action.INCREMENT))
        return fields

    def effective(self) -> "PolicyConfig":
        """
        Copy of this policy in which every auto field is permitted for its
        action. Idempotent.
        """
        rules = dict(self.action_rules)
        for field, action in self.auto_fields():
            rule = rules.get(action) or ActionRule()
            rules[action] = rule.allowing(field)
        return replace(self, action_rules=rules)


DEFAULT_UPDATE_POLICY = PolicyConfig(
    action_rules={
        Action.ASSIGN: ActionRule(allow_all=True),
        Action.REMOVE: ActionRule(allow_all=True),
        Action.INCREMENT: ActionRule(allow_all=True),
        Action.APPEND: ActionRule(allow_all=True),
    },
    auto_timestamp=True,
    auto_version=True,
    fail_on_error=True,
)
