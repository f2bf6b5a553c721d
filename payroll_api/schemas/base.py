# payroll_api/schemas/base.py
"""
Shared machinery for the declarative record schemas.

Every schema is a pydantic model; `run_schema` turns raw JSON/form input into a
`ValidationResult` carrying either the normalized snake_case values or a list of
field-scoped errors. Nothing here raises for bad input.
"""
from dataclasses import dataclass, field
from datetime import date
from functools import lru_cache
from typing import Annotated, Any, ClassVar, Dict, List, Optional, Tuple

from pydantic import BaseModel, BeforeValidator, ConfigDict, TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel


def _iso_date(v):
    # browsers send Date.toISOString(): keep the calendar part only
    if isinstance(v, str) and "T" in v:
        return v.split("T", 1)[0]
    return v


DateValue = Annotated[date, BeforeValidator(_iso_date)]


def today() -> date:
    return date.today()


@dataclass
class ValidationResult:
    value: Dict[str, Any] = field(default_factory=dict)
    errors: List[Dict[str, str]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


class BaseSchema(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,       # accept employeeId as well as employee_id
        populate_by_name=True,
        extra="ignore",
        str_strip_whitespace=True,
        coerce_numbers_to_str=True,     # employee codes typed as numbers in spreadsheets
    )

    # (start, end) field pair that must be ordered; checked after field validation
    span: ClassVar[Optional[Tuple[str, str]]] = None

    @classmethod
    def normalize(cls, value: Dict[str, Any], supplied: set) -> Dict[str, Any]:
        """Hook for value-level rewrites shared by full and partial validation."""
        return value


def _err(name: str, message: str) -> Dict[str, str]:
    return {"field": name, "message": message}


def _blank(v):
    if isinstance(v, str) and not v.strip():
        return None
    return v


@lru_cache(maxsize=None)
def _field_names(schema_cls) -> Dict[str, str]:
    names = {}
    for name, info in schema_cls.model_fields.items():
        names[name] = name
        if info.alias:
            names[info.alias] = name
    return names


# field-by-field validation does not see the model config, so carry the coercions over
_FIELD_CONFIG = ConfigDict(str_strip_whitespace=True, coerce_numbers_to_str=True)


@lru_cache(maxsize=None)
def _adapter(schema_cls, name: str) -> TypeAdapter:
    info = schema_cls.model_fields[name]
    meta = tuple(info.metadata)
    tp = Annotated[(info.annotation, *meta)] if meta else info.annotation
    return TypeAdapter(tp, config=_FIELD_CONFIG)


def _from_pydantic(schema_cls, detail) -> Dict[str, str]:
    loc = detail.get("loc") or ()
    key = str(loc[0]) if loc else "__all__"
    name = _field_names(schema_cls).get(key, key)
    info = schema_cls.model_fields.get(name)
    if detail.get("type") == "missing" or (
        detail.get("input") is None and info is not None and info.is_required()
    ):
        return _err(name, f"{name} is required")
    return _err(name, detail.get("msg") or "invalid value")


def _check_span(schema_cls, value: Dict[str, Any]) -> List[Dict[str, str]]:
    if not schema_cls.span:
        return []
    lo, hi = schema_cls.span
    start, end = value.get(lo), value.get(hi)
    if start is not None and end is not None and start > end:
        return [_err(hi, f"{hi} must be on or after {lo}")]
    return []


def run_schema(schema_cls, raw, partial: bool = False) -> ValidationResult:
    """
    Validate `raw` against `schema_cls`.

    partial=False: full create-style validation with defaults applied.
    partial=True:  only the supplied keys are validated, no defaults, unknown keys dropped.
    """
    if not isinstance(raw, dict):
        return ValidationResult(errors=[_err("__all__", "Expected a JSON object")])

    data = {k: _blank(v) for k, v in raw.items()}
    names = _field_names(schema_cls)

    if partial:
        value: Dict[str, Any] = {}
        errors: List[Dict[str, str]] = []
        for key, v in data.items():
            name = names.get(key)
            if name is None:
                continue
            info = schema_cls.model_fields[name]
            if v is None and info.is_required():
                errors.append(_err(name, f"{name} is required"))
                continue
            try:
                value[name] = _adapter(schema_cls, name).validate_python(v)
            except PydanticValidationError as e:
                errors.extend(_err(name, d.get("msg") or "invalid value") for d in e.errors())
        supplied = set(value)
    else:
        # on create a blank value means "not given": defaults apply, required fields report missing
        data = {k: v for k, v in data.items() if v is not None}
        try:
            model = schema_cls.model_validate(data)
        except PydanticValidationError as e:
            return ValidationResult(errors=[_from_pydantic(schema_cls, d) for d in e.errors()])
        value = model.model_dump()
        supplied = set(model.model_fields_set)
        errors = []

    errors = errors or _check_span(schema_cls, value)
    if errors:
        return ValidationResult(errors=errors)
    return ValidationResult(value=schema_cls.normalize(value, supplied))


def json_schema(schema_cls) -> Dict[str, Any]:
    return schema_cls.model_json_schema(by_alias=False)
