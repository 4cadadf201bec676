"""Generator specs (`generator-cli.generators` entries).

A spec is read fresh from the configuration on every run and never mutated.
Parameter values are classified once, when a `GeneratorSpec` is built, into one of four
variants; each variant owns the rule that turns it into an engine flag.
"""

from __future__ import annotations

import re
from typing import Annotated, Any, Callable, Literal, Mapping, Union

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict


Substitute = Callable[[str], str]

_PLACEHOLDER_RE = re.compile(r"#\{([^}]*)\}")


def kebab_case(key: str) -> str:
    """`additionalProperties` / `additional_properties` -> `additional-properties`."""

    value = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1-\2", key)
    value = re.sub(r"([a-z0-9])([A-Z])", r"\1-\2", value)
    value = re.sub(r"[\s_]+", "-", value)
    return value.strip("-").lower()


def substitute_placeholders(text: str, placeholders: Mapping[str, str | None]) -> str:
    """Replace `#{key}` tokens; unknown or empty placeholders stay as literal text."""

    def replace(match: re.Match[str]) -> str:
        value = placeholders.get(match.group(1))
        return value if value else match.group(0)

    return _PLACEHOLDER_RE.sub(replace, text)


def _scalar_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


class TextParam(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["text"] = "text"
    value: str

    def render(self, flag: str, substitute: Substitute) -> str | None:
        return f'--{flag}="{substitute(self.value)}"'


class NumberParam(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["number"] = "number"
    value: int | float

    def render(self, flag: str, substitute: Substitute) -> str | None:
        return f"--{flag}={_scalar_text(self.value)}"


class FlagParam(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["flag"] = "flag"
    value: bool

    def render(self, flag: str, substitute: Substitute) -> str | None:
        return f"--{flag}" if self.value else None


class MapParam(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["map"] = "map"
    value: dict[str, Any]

    def render(self, flag: str, substitute: Substitute) -> str | None:
        pairs = ",".join(f"{key}={substitute(_scalar_text(item))}" for key, item in self.value.items())
        return f'--{flag}="{pairs}"'


ParamValue = Annotated[
    Union[TextParam, NumberParam, FlagParam, MapParam],
    Field(discriminator="kind"),
]


def parse_param(raw: Any) -> ParamValue | None:
    """Classify a raw JSON value. `None` means the parameter is dropped."""

    if raw is None:
        return None
    # bool before number: bool is an int subclass.
    if isinstance(raw, bool):
        return FlagParam(value=raw)
    if isinstance(raw, (int, float)):
        return NumberParam(value=raw)
    if isinstance(raw, Mapping):
        return MapParam(value=dict(raw))
    if isinstance(raw, (list, tuple)):
        return TextParam(value=",".join(_scalar_text(item) for item in raw))
    return TextParam(value=str(raw))


# Keys consumed by the wrapper itself, compared in kebab form.
_RESERVED = {"glob", "disabled", "input-spec", "custom-jar-path"}


class GeneratorSpec(BaseModel):
    """One named entry of `generator-cli.generators`."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="Key of the entry in the generators map.")
    glob: str | None = Field(default=None, description="Spec files to generate from, relative to cwd.")
    input_spec: str | None = Field(default=None, description="Single input (path or URL) when no glob is given.")
    disabled: bool = Field(default=False)
    custom_jar_path: str | None = Field(default=None, description="Extra jar put on the engine classpath.")
    params: dict[str, ParamValue] = Field(
        default_factory=dict,
        description="Every other key, in configuration order; serialized as engine flags.",
    )

    @classmethod
    def from_config(cls, name: str, raw: Mapping[str, Any] | None) -> "GeneratorSpec":
        raw = raw or {}
        reserved: dict[str, Any] = {}
        params: dict[str, ParamValue] = {}
        for key, value in raw.items():
            flag = kebab_case(key)
            if flag in _RESERVED:
                reserved[flag] = value
                continue
            param = parse_param(value)
            if param is not None:
                params[key] = param

        return cls(
            name=name,
            glob=reserved.get("glob") or None,
            input_spec=reserved.get("input-spec") or None,
            disabled=reserved.get("disabled") is True,
            custom_jar_path=reserved.get("custom-jar-path") or None,
            params=params,
        )

    @property
    def output_template(self) -> str | None:
        return self._text_param("output")

    @property
    def generator_name(self) -> str | None:
        return self._text_param("generator-name")

    def _text_param(self, flag: str) -> str | None:
        for key, param in self.params.items():
            if kebab_case(key) == flag and isinstance(param, TextParam):
                return param.value
        return None

    def render_flags(self, substitute: Substitute) -> list[str]:
        rendered = (param.render(kebab_case(key), substitute) for key, param in self.params.items())
        return [flag for flag in rendered if flag is not None]
