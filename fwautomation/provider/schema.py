"""Provider and resource schema types.

These types give a provider the shape an infrastructure-as-code host
expects:
- a provider schema whose values may come from the environment
- resources with per-field validators and force-new (immutable) fields
- CRUD callbacks that receive resource data and the configured meta
- diagnostics instead of raised exceptions at the lifecycle boundary
"""

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field

from fwautomation.utils.errors import FWAutomationError

ValidateFunc = Callable[[Any, str], Tuple[List[str], List[str]]]


class ValueType(str, Enum):
    """Attribute value types."""

    STRING = "string"
    INT = "int"


class Severity(str, Enum):
    """Diagnostic severity."""

    ERROR = "error"
    WARNING = "warning"


class Diagnostic(BaseModel):
    """A single error or warning reported back to the host."""

    severity: Severity = Field(..., description="error or warning")
    summary: str = Field(..., description="Short description")
    detail: Optional[str] = Field(None, description="Longer explanation")
    attribute: Optional[str] = Field(None, description="Attribute the problem relates to")


class Diagnostics(list):
    """Ordered collection of diagnostics from one operation."""

    @classmethod
    def from_error(cls, error: Exception, attribute: Optional[str] = None) -> "Diagnostics":
        """Wrap an exception as a single error diagnostic."""
        return cls([
            Diagnostic(severity=Severity.ERROR, summary=str(error), attribute=attribute)
        ])

    def add_error(
        self,
        summary: str,
        detail: Optional[str] = None,
        attribute: Optional[str] = None,
    ) -> None:
        self.append(
            Diagnostic(
                severity=Severity.ERROR,
                summary=summary,
                detail=detail,
                attribute=attribute,
            )
        )

    def add_warning(
        self,
        summary: str,
        detail: Optional[str] = None,
        attribute: Optional[str] = None,
    ) -> None:
        self.append(
            Diagnostic(
                severity=Severity.WARNING,
                summary=summary,
                detail=detail,
                attribute=attribute,
            )
        )

    def has_error(self) -> bool:
        """Check if any diagnostic is an error."""
        return any(d.severity == Severity.ERROR for d in self)


def env_default(var: str, default: Any = None) -> Callable[[], Any]:
    """Build a default function that reads an environment variable."""

    def _default() -> Any:
        return os.environ.get(var, default)

    return _default


@dataclass
class Schema:
    """Schema for a single provider or resource attribute."""

    type: ValueType = ValueType.STRING
    required: bool = False
    force_new: bool = False
    description: str = ""
    default: Any = None
    default_func: Optional[Callable[[], Any]] = None
    validate_func: Optional[ValidateFunc] = None
    sensitive: bool = False

    def default_value(self) -> Any:
        """Get the default, preferring the default function."""
        if self.default_func is not None:
            value = self.default_func()
            if value not in (None, ""):
                return value
        return self.default

    def coerce(self, value: Any, key: str) -> Any:
        """Convert a raw value to the attribute type.

        Raises:
            ValueError: If the value cannot be converted
        """
        if self.type == ValueType.INT:
            if isinstance(value, bool):
                raise ValueError(f'"{key}" must be an integer.')
            try:
                return int(value)
            except (TypeError, ValueError):
                raise ValueError(f'"{key}" must be an integer.')
        if not isinstance(value, str):
            raise ValueError(f'"{key}" must be a string.')
        return value

    def validate(self, value: Any, key: str) -> Tuple[List[str], List[str]]:
        """Run the attribute validator.

        Returns:
            (warnings, errors)
        """
        if self.validate_func is None:
            return [], []
        return self.validate_func(value, key)

    def describe(self) -> Dict[str, Any]:
        return {
            "type": self.type.value,
            "required": self.required,
            "force_new": self.force_new,
            "sensitive": self.sensitive,
            "description": self.description,
        }


class ResourceData:
    """Prior and planned values for one resource instance.

    Prior is the last known state (absent on create), planned is the desired
    configuration (absent on delete).
    """

    def __init__(
        self,
        schema: Dict[str, Schema],
        prior: Optional[Dict[str, Any]] = None,
        planned: Optional[Dict[str, Any]] = None,
        id: str = "",
    ):
        self.schema = schema
        self._prior = dict(prior) if prior is not None else None
        self._planned = dict(planned) if planned is not None else None
        self._current: Dict[str, Any] = dict(
            planned if planned is not None else (prior or {})
        )
        self._id = id

    @property
    def id(self) -> str:
        return self._id

    def set_id(self, value: str) -> None:
        """Set the resource ID; an empty ID marks the resource as removed."""
        self._id = value

    def get(self, key: str) -> Any:
        return self._current.get(key)

    def get_change(self, key: str) -> Tuple[Any, Any]:
        """Get (old, new) for an attribute."""
        old = self._prior.get(key) if self._prior is not None else None
        new = self._current.get(key)
        return old, new

    def has_change(self, key: str) -> bool:
        """Check if an attribute differs between prior and planned values."""
        if self._prior is None or self._planned is None:
            return False
        old, new = self.get_change(key)
        return old != new

    def state(self) -> Optional[Dict[str, Any]]:
        """Resulting state, or None if the resource does not exist."""
        if not self._id:
            return None
        return {**self._current, "id": self._id}


CrudFunc = Callable[[ResourceData, Any], Awaitable[Diagnostics]]


@dataclass
class Resource:
    """A managed resource type and its lifecycle callbacks."""

    schema: Dict[str, Schema]
    create: CrudFunc
    read: CrudFunc
    delete: CrudFunc
    update: Optional[CrudFunc] = None
    schema_version: int = 0
    description: str = ""

    def validate(self, config: Dict[str, Any]) -> Diagnostics:
        """Validate attribute values against the schema."""
        diags = Diagnostics()

        for key in config:
            if key not in self.schema:
                diags.add_error(f'Unsupported argument "{key}".', attribute=key)

        for key, attr in self.schema.items():
            value = config.get(key)
            if value is None:
                if attr.required:
                    diags.add_error(
                        f'The argument "{key}" is required, but no definition was found.',
                        attribute=key,
                    )
                continue

            try:
                value = attr.coerce(value, key)
            except ValueError as e:
                diags.add_error(str(e), attribute=key)
                continue

            warnings, errors = attr.validate(value, key)
            for w in warnings:
                diags.add_warning(w, attribute=key)
            for e in errors:
                diags.add_error(e, attribute=key)

        return diags

    def requires_replace(self, data: ResourceData) -> bool:
        """Check if any force-new attribute changed."""
        return any(
            data.has_change(key) for key, attr in self.schema.items() if attr.force_new
        )

    def describe(self) -> Dict[str, Any]:
        return {
            "version": self.schema_version,
            "description": self.description,
            "attributes": {key: attr.describe() for key, attr in self.schema.items()},
        }


State = Optional[Dict[str, Any]]


def _split_state(state: State) -> Tuple[State, str]:
    """Separate the ID from the attribute values."""
    if state is None:
        return None, ""
    attrs = {k: v for k, v in state.items() if k != "id"}
    return attrs, str(state.get("id") or "")


@dataclass
class Provider:
    """Provider configuration schema, resources and lifecycle dispatch.

    Usage:
        provider = build_provider()
        diags = provider.configure_provider({"management_server": "fw1"})
        state, diags = await provider.apply("fwautomation_fwgroup", None, planned)
    """

    schema: Dict[str, Schema]
    resources_map: Dict[str, Resource]
    configure: Callable[[Dict[str, Any]], Any]
    meta: Any = field(default=None, init=False)

    def configure_provider(self, raw: Optional[Dict[str, Any]] = None) -> Diagnostics:
        """Resolve provider values and build the meta object.

        Explicit values win over defaults (including environment defaults).
        """
        raw = raw or {}
        diags = Diagnostics()
        values: Dict[str, Any] = {}

        for key in raw:
            if key not in self.schema:
                diags.add_error(f'Unsupported argument "{key}".', attribute=key)

        for key, attr in self.schema.items():
            value = raw.get(key)
            if value in (None, ""):
                value = attr.default_value()
            if value in (None, ""):
                if attr.required:
                    diags.add_error(
                        f'The argument "{key}" is required, but no definition was found.',
                        attribute=key,
                    )
                continue

            try:
                value = attr.coerce(value, key)
            except ValueError as e:
                diags.add_error(str(e), attribute=key)
                continue

            warnings, errors = attr.validate(value, key)
            for w in warnings:
                diags.add_warning(w, attribute=key)
            for e in errors:
                diags.add_error(e, attribute=key)
            values[key] = value

        if diags.has_error():
            return diags

        try:
            self.meta = self.configure(values)
        except FWAutomationError as e:
            diags.extend(Diagnostics.from_error(e))
        return diags

    def _resource(self, resource_type: str) -> Resource:
        try:
            return self.resources_map[resource_type]
        except KeyError:
            raise FWAutomationError(f"Unknown resource type: {resource_type}")

    def _check_configured(self) -> Diagnostics:
        diags = Diagnostics()
        if self.meta is None:
            diags.add_error("Provider is not configured")
        return diags

    async def apply(
        self,
        resource_type: str,
        prior: State,
        planned: State,
    ) -> Tuple[State, Diagnostics]:
        """Move one resource instance from its prior state to the planned one.

        Returns:
            (new state, diagnostics). On error the state reflects what is
            known to exist remotely.
        """
        try:
            resource = self._resource(resource_type)
        except FWAutomationError as e:
            return prior, Diagnostics.from_error(e)

        diags = self._check_configured()
        if diags.has_error():
            return prior, diags

        prior_attrs, prior_id = _split_state(prior)
        planned_attrs, _ = _split_state(planned)

        for attrs in (prior_attrs, planned_attrs):
            if attrs is not None:
                diags.extend(resource.validate(attrs))
        if diags.has_error():
            return prior, diags

        if prior_attrs is None and planned_attrs is None:
            return None, diags

        if prior_attrs is None:
            data = ResourceData(resource.schema, planned=planned_attrs)
            diags.extend(await resource.create(data, self.meta))
            return data.state(), diags

        if planned_attrs is None:
            data = ResourceData(resource.schema, prior=prior_attrs, id=prior_id)
            diags.extend(await resource.delete(data, self.meta))
            return data.state(), diags

        data = ResourceData(
            resource.schema, prior=prior_attrs, planned=planned_attrs, id=prior_id
        )

        if resource.requires_replace(data):
            diags.extend(await resource.delete(data, self.meta))
            if diags.has_error():
                return prior, diags
            replacement = ResourceData(resource.schema, planned=planned_attrs)
            diags.extend(await resource.create(replacement, self.meta))
            return replacement.state(), diags

        handler = resource.update or resource.read
        diags.extend(await handler(data, self.meta))
        return data.state(), diags

    async def read(self, resource_type: str, state: State) -> Tuple[State, Diagnostics]:
        """Refresh an existing resource instance."""
        try:
            resource = self._resource(resource_type)
        except FWAutomationError as e:
            return state, Diagnostics.from_error(e)

        diags = self._check_configured()
        if diags.has_error():
            return state, diags

        attrs, resource_id = _split_state(state)
        if attrs is None:
            return None, diags

        diags.extend(resource.validate(attrs))
        if diags.has_error():
            return state, diags

        data = ResourceData(resource.schema, prior=attrs, id=resource_id)
        diags.extend(await resource.read(data, self.meta))
        return data.state(), diags

    def describe(self) -> Dict[str, Any]:
        """Provider and resource schemas as plain data."""
        return {
            "provider": {key: attr.describe() for key, attr in self.schema.items()},
            "resource_schemas": {
                name: resource.describe()
                for name, resource in self.resources_map.items()
            },
        }
