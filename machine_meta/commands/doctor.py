from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..app import MachineMetaApp
from ..config import Settings


@dataclass(slots=True)
class DoctorReport:
    ok: bool
    checks: list[str]


def _line(label: str, status: str, detail: Optional[str] = None) -> str:
    return f"{label}: {status} ({detail})" if detail else f"{label}: {status}"


def _optional_field_names(settings: Settings) -> list[str]:
    fm = settings.field_map
    return [
        fm.model,
        fm.model_normalized,
        fm.confidence,
        fm.no_model,
        fm.parser_version,
        fm.debug,
        fm.listing_id,
        fm.series,
        fm.brand_model_id,
    ]


def run(settings: Settings) -> DoctorReport:
    checks: list[str] = []
    ok = True

    try:
        tables = settings.tables.to_parser_tables()
    except ValueError as exc:
        return DoctorReport(ok=False, checks=[_line("Alias tables", "ERROR", str(exc))])
    checks.append(
        _line("Alias tables", "OK", f"{len(tables.brands)} brand(s), {len(tables.series)} series")
    )

    app = MachineMetaApp.create(settings)
    try:
        store = app.store
        checks.append(_line("Store", "OK", str(settings.store.path)))
        table = settings.store.table
        if not store.has_table(table):
            checks.append(_line("Listing table", "ERROR", f"{table!r} missing (run `machine-meta init`)"))
            return DoctorReport(ok=False, checks=checks)
        checks.append(_line("Listing table", "OK", f"{table!r}, {store.count_records(table)} record(s)"))

        names = set(store.field_names(table))
        fm = settings.field_map
        if fm.title not in names:
            ok = False
            checks.append(_line("Title field", "ERROR", f"{fm.title!r} missing"))
        else:
            checks.append(_line("Title field", "OK", fm.title))

        brand_fields = [name for name in fm.brand_candidates() if name in names]
        if brand_fields:
            checks.append(_line("Brand field", "OK", brand_fields[0]))
        else:
            checks.append(_line("Brand field", "WARNING", "none present; brand comes from titles only"))

        missing = [name for name in _optional_field_names(settings) if name not in names]
        if missing:
            checks.append(_line("Optional fields", "WARNING", f"not written: {', '.join(missing)}"))
        else:
            checks.append(_line("Optional fields", "OK"))

        spec = store.get_field(table, fm.brand_model)
        if spec is None:
            checks.append(_line("BrandModel field", "WARNING", f"{fm.brand_model!r} missing; keys are not linked"))
        elif spec.is_computed:
            checks.append(_line("BrandModel field", "SKIPPED", f"computed type {spec.type}"))
        elif spec.is_link:
            if not spec.linked_table or not store.has_table(spec.linked_table):
                ok = False
                checks.append(_line("BrandModel field", "ERROR", f"linked table {spec.linked_table!r} missing"))
            else:
                checks.append(
                    _line(
                        "BrandModel field",
                        "OK",
                        f"links to {spec.linked_table!r} ({settings.parser.dedup_mode} dedup)",
                    )
                )
        else:
            checks.append(_line("BrandModel field", "OK", "text copy"))
    finally:
        app.close()

    return DoctorReport(ok=ok, checks=checks)
