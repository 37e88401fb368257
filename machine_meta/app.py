from __future__ import annotations

import logging
from dataclasses import dataclass

from .config import FieldMapping, Settings
from .core.dedup import KeyResolver
from .core.parsing import TitleParser
from .store import LINK_FIELD_TYPE, FieldSpec, RecordStore
from .updater import ListingUpdater

logger = logging.getLogger(__name__)


def listing_fields(field_map: FieldMapping, brand_model_table: str) -> list[FieldSpec]:
    return [
        FieldSpec(field_map.title, is_primary=True),
        FieldSpec(field_map.brand),
        FieldSpec(field_map.model),
        FieldSpec(field_map.model_normalized),
        FieldSpec(field_map.confidence, type="number"),
        FieldSpec(field_map.no_model, type="checkbox"),
        FieldSpec(field_map.parser_version),
        FieldSpec(field_map.debug, type="multilineText"),
        FieldSpec(field_map.listing_id),
        FieldSpec(field_map.series),
        FieldSpec(field_map.brand_model_id),
        FieldSpec(field_map.brand_model, type=LINK_FIELD_TYPE, linked_table=brand_model_table),
    ]


@dataclass
class MachineMetaApp:
    settings: Settings
    store: RecordStore
    parser: TitleParser
    key_resolver: KeyResolver
    _updater: ListingUpdater | None = None

    @classmethod
    def create(cls, settings: Settings) -> "MachineMetaApp":
        store = RecordStore(settings.store.path)
        parser = TitleParser(settings.tables.to_parser_tables())
        key_resolver = KeyResolver(store, mode=settings.parser.dedup_mode)
        return cls(settings=settings, store=store, parser=parser, key_resolver=key_resolver)

    def init_schema(self) -> None:
        store_settings = self.settings.store
        self.store.create_table(store_settings.brand_model_table, [FieldSpec("Name", is_primary=True)])
        self.store.create_table(
            store_settings.table,
            listing_fields(self.settings.field_map, store_settings.brand_model_table),
        )
        logger.info("Initialised tables %r and %r", store_settings.table, store_settings.brand_model_table)

    def get_updater(self) -> ListingUpdater:
        if self._updater is None:
            self._updater = ListingUpdater(
                self.store,
                self.parser,
                self.key_resolver,
                table=self.settings.store.table,
                field_map=self.settings.field_map,
                parser_version=self.settings.parser.version,
            )
        return self._updater

    def close(self) -> None:
        self.store.close()
