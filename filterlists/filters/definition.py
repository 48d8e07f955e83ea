"""
Filter definition models.

A definition is the parsed form of one source file in the definition corpus:
a YAML metadata block (title, params, tags, template) plus a markdown body
rendered to HTML. Definitions are immutable once loaded.
"""
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


FILTER_NAME_PATTERN = r'^[a-z0-9][a-z0-9-]*$'
PARAM_NAME_PATTERN = r'^[a-z_][a-z0-9_]*$'

ParamType = Literal['checkbox', 'string', 'multiline', 'list']

_EMPTY_VALUES = {
    'checkbox': False,
    'string': '',
    'multiline': '',
    'list': [],
}


def value_matches(param_type: str, value: Any) -> bool:
    """Return True if value is acceptable for a parameter of param_type."""
    if param_type == 'checkbox':
        return isinstance(value, bool)
    if param_type in ('string', 'multiline'):
        return isinstance(value, str)
    if param_type == 'list':
        return isinstance(value, list) and all(isinstance(v, str) for v in value)
    return False


class ParamSpec(BaseModel):
    """One declared parameter of a filter template."""
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., pattern=PARAM_NAME_PATTERN)
    type: ParamType
    description: str = ''
    default: Optional[Any] = None

    @model_validator(mode='after')
    def _default_matches_type(self):
        if self.default is not None and not value_matches(self.type, self.default):
            raise ValueError(f"default for '{self.name}' is not a valid {self.type} value")
        return self

    def default_value(self) -> Any:
        if self.default is not None:
            return self.default
        empty = _EMPTY_VALUES[self.type]
        return list(empty) if isinstance(empty, list) else empty


class FilterDefinition(BaseModel):
    """A named, versionless filter template with declared parameters."""
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., pattern=FILTER_NAME_PATTERN)
    title: str = Field(..., min_length=1)
    params: List[ParamSpec] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    template: str = Field(..., min_length=1)
    description_html: str = ''
    fingerprint: str = ''

    @field_validator('params')
    @classmethod
    def _unique_param_names(cls, params):
        seen = set()
        for param in params:
            if param.name in seen:
                raise ValueError(f"duplicate parameter '{param.name}'")
            seen.add(param.name)
        return params

    def param(self, name: str) -> Optional[ParamSpec]:
        for param in self.params:
            if param.name == name:
                return param
        return None

    def defaults(self) -> Dict[str, Any]:
        """Parameter name → default value, for every declared parameter."""
        return {param.name: param.default_value() for param in self.params}
