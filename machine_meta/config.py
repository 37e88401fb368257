from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Literal, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .core.parsing.models import AliasEntry
from .core.parsing.tables import (
    DEFAULT_BRANDS,
    DEFAULT_SERIES,
    DEFAULT_SITE_SUFFIXES,
    DEFAULT_STOP_PHRASES,
    ParserTables,
)

logger = logging.getLogger(__name__)


class StoreSettings(BaseModel):
    path: Path = Path("./machine-meta.sqlite3")
    table: str = "Sitemap Scraped"
    brand_model_table: str = "BrandModels"

    @field_validator("path", mode="before")
    @classmethod
    def _expand_path(cls, value: str | Path) -> Path:
        return Path(value).expanduser().resolve()


class FieldMapping(BaseModel):
    """Logical role -> attribute name on the listing table."""

    model_config = ConfigDict(protected_namespaces=())

    title: str = "PageTitle"
    brand: str = "Brand Detected"
    brand_fallbacks: List[str] = Field(default_factory=lambda: ["Brand Detected", "Detected Brand"])
    model: str = "Detected Model"
    model_normalized: str = "Detected Model (Normalized)"
    confidence: str = "Model Confidence"
    no_model: str = "No Model Detected"
    parser_version: str = "Parser Version"
    debug: str = "Parser Debug"
    listing_id: str = "Listing ID"
    series: str = "Model Series"
    brand_model_id: str = "BrandModel ID"
    brand_model: str = "BrandModel"

    def brand_candidates(self) -> list[str]:
        candidates: list[str] = []
        for name in [*self.brand_fallbacks, self.brand]:
            if name and name not in candidates:
                candidates.append(name)
        return candidates


class ParserSettings(BaseModel):
    version: str = "v1.7.4"
    dedup_mode: Literal["racy", "locked"] = "racy"
    worker_concurrency: int = 4

    @field_validator("worker_concurrency")
    @classmethod
    def _positive_workers(cls, value: int) -> int:
        if value < 1:
            raise ValueError("worker_concurrency must be at least 1")
        return value


class BrandSettings(BaseModel):
    canonical: str
    aliases: List[str] = Field(default_factory=list)


class TableSettings(BaseModel):
    brands: List[BrandSettings] = Field(
        default_factory=lambda: [
            BrandSettings(canonical=entry.canonical, aliases=list(entry.aliases)) for entry in DEFAULT_BRANDS
        ]
    )
    stop_phrases: List[str] = Field(default_factory=lambda: list(DEFAULT_STOP_PHRASES))
    series: List[str] = Field(default_factory=lambda: list(DEFAULT_SERIES))
    site_suffixes: List[str] = Field(default_factory=lambda: list(DEFAULT_SITE_SUFFIXES))

    @field_validator("brands")
    @classmethod
    def _unique_canonicals(cls, values: List[BrandSettings]) -> List[BrandSettings]:
        seen: set[str] = set()
        for entry in values:
            key = " ".join(entry.canonical.upper().split())
            if key in seen:
                raise ValueError(f"duplicate canonical brand: {entry.canonical}")
            seen.add(key)
        return values

    def to_parser_tables(self) -> ParserTables:
        return ParserTables.build(
            brands=[AliasEntry(b.canonical, tuple(b.aliases)) for b in self.brands],
            stop_phrases=self.stop_phrases,
            series=self.series,
            site_suffixes=self.site_suffixes,
        )


class Settings(BaseModel):
    store: StoreSettings = StoreSettings()
    field_map: FieldMapping = FieldMapping()
    parser: ParserSettings = ParserSettings()
    tables: TableSettings = TableSettings()

    @classmethod
    def load(cls, path: Path) -> "Settings":
        with path.open("r", encoding="utf-8") as fh:
            raw = yaml.safe_load(fh)
        return cls.model_validate(raw or {})


def find_config(explicit_path: Optional[Path]) -> Path:
    if explicit_path:
        return explicit_path
    cwd = Path.cwd()
    for candidate in (cwd / "config.yaml", cwd / "config.yml"):
        if candidate.exists():
            return candidate
    raise FileNotFoundError("Could not find config.yaml - pass --config explicitly.")


def load_settings(explicit_path: Optional[Path] = None) -> Settings:
    try:
        path = find_config(explicit_path)
    except FileNotFoundError:
        logger.debug("No config.yaml found; using built-in defaults")
        return Settings()
    return Settings.load(path)
