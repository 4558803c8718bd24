from enum import Enum
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator

DEFAULT_CONFIG_NAME = "contentrecords.yml"


class DuplicateKeyPolicy(str, Enum):
    """How repeated metadata keys within one block are handled."""

    OVERWRITE = "overwrite"
    ERROR = "error"


class ParserOptions(BaseModel):
    """Options controlling how metadata blocks are recognized and read."""

    delimiter: str = Field(default="---", description="Marker line opening and closing the block.")
    duplicate_keys: DuplicateKeyPolicy = Field(
        default=DuplicateKeyPolicy.OVERWRITE,
        description="Whether later duplicate keys overwrite earlier ones or fail the parse.",
    )

    @field_validator("delimiter")
    def _normalize_delimiter(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("delimiter cannot be empty")
        if "\n" in cleaned or "\r" in cleaned:
            raise ValueError("delimiter must be a single line")
        return cleaned


def _default_suffixes() -> list[str]:
    return [".md", ".markdown", ".mdx", ".html"]


class Config(BaseModel):
    project_name: str = Field(default="Content Records")
    content_dir: Path = Field(default=Path("content"))
    suffixes: list[str] = Field(default_factory=_default_suffixes)
    skip_invalid: bool = Field(
        default=False,
        description="Log and skip malformed files instead of aborting the load.",
    )
    parser: ParserOptions = Field(default_factory=ParserOptions)

    @field_validator("content_dir", mode="before")
    def _ensure_path(cls, value: Any) -> Path:
        return Path(value)

    @field_validator("suffixes")
    def _normalize_suffixes(cls, value: list[str]) -> list[str]:
        normalized: list[str] = []
        for suffix in value:
            text = suffix.strip().lower()
            if not text:
                continue
            if not text.startswith("."):
                text = f".{text}"
            if text not in normalized:
                normalized.append(text)
        return normalized


def load_config(path: str | Path) -> Config:
    config_path = Path(path)
    data: dict[str, Any] = {}
    if config_path.exists():
        with config_path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
    else:
        raise FileNotFoundError(config_path)
    if not isinstance(data, dict):
        raise ValueError(f"Config file {config_path} should define a mapping.")
    return Config(**data)
