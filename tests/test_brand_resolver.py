import unittest

from machine_meta.core.parsing import (
    DEFAULT_TABLES,
    AliasEntry,
    ParserTables,
    canonicalize_brand_name,
    detect_brand_from_title,
    resolve_brand,
    strip_brands,
)


class TestCanonicalizeBrandName(unittest.TestCase):
    def test_alias_with_extra_whitespace(self) -> None:
        self.assertEqual(canonicalize_brand_name("yamazaki  mazak", DEFAULT_TABLES), "Mazak")

    def test_spacing_variants(self) -> None:
        self.assertEqual(canonicalize_brand_name("DMGMORI", DEFAULT_TABLES), "DMG MORI")
        self.assertEqual(canonicalize_brand_name("mori seiki", DEFAULT_TABLES), "DMG MORI")
        self.assertEqual(canonicalize_brand_name("okuma & howa", DEFAULT_TABLES), "Okuma")

    def test_requires_whole_value(self) -> None:
        self.assertEqual(canonicalize_brand_name("Mazak Corp", DEFAULT_TABLES), "")

    def test_empty_values(self) -> None:
        self.assertEqual(canonicalize_brand_name(None, DEFAULT_TABLES), "")
        self.assertEqual(canonicalize_brand_name("   ", DEFAULT_TABLES), "")


class TestDetectBrandFromTitle(unittest.TestCase):
    def test_whole_word_hit(self) -> None:
        self.assertEqual(detect_brand_from_title("2018 okuma lb3000", DEFAULT_TABLES), "Okuma")
        self.assertEqual(detect_brand_from_title("MORI SEIKI NL2500", DEFAULT_TABLES), "DMG MORI")

    def test_substring_is_not_a_hit(self) -> None:
        self.assertEqual(detect_brand_from_title("USED MAZAKER 500", DEFAULT_TABLES), "")

    def test_table_order_wins_over_title_position(self) -> None:
        self.assertEqual(
            detect_brand_from_title("DOOSAN PUMA vs MAZAK QTN", DEFAULT_TABLES), "Mazak"
        )


class TestResolveBrand(unittest.TestCase):
    def test_field_wins_over_title(self) -> None:
        self.assertEqual(
            resolve_brand("mori seiki", "MAZAK QTN 250", DEFAULT_TABLES), ("DMG MORI", "DMG MORI")
        )

    def test_unknown_field_falls_back_to_title(self) -> None:
        self.assertEqual(resolve_brand("Brand X", "MAZAK QTN", DEFAULT_TABLES), ("Mazak", "Mazak"))

    def test_unknown_field_is_kept_for_key(self) -> None:
        self.assertEqual(resolve_brand("Acme", "no brand here", DEFAULT_TABLES), ("", "Acme"))

    def test_nothing_resolves(self) -> None:
        self.assertEqual(resolve_brand(None, "nothing", DEFAULT_TABLES), ("", ""))


class TestStripBrands(unittest.TestCase):
    def test_longest_spelling_erased_whole(self) -> None:
        self.assertEqual(strip_brands("OKUMA HOWA LB15 MAZAK", DEFAULT_TABLES), "LB15")

    def test_no_brand_tables(self) -> None:
        tables = ParserTables.build(brands=[])
        self.assertEqual(strip_brands("MAZAK QTN 200", tables), "MAZAK QTN 200")


class TestParserTables(unittest.TestCase):
    def test_duplicate_canonical_rejected(self) -> None:
        with self.assertRaises(ValueError):
            ParserTables.build(brands=[AliasEntry("Mazak"), AliasEntry("MAZAK")])

    def test_empty_series_rejected(self) -> None:
        with self.assertRaises(ValueError):
            ParserTables.build(series=[])

    def test_alias_terms_deduplicated(self) -> None:
        entry = AliasEntry("Mazak", ("MAZAK", "Yamazaki  Mazak", "YAMAZAKI MAZAK"))
        self.assertEqual(entry.terms(), ("Mazak", "Yamazaki  Mazak"))

    def test_canonical_series_accepts_spacing_variants(self) -> None:
        self.assertEqual(DEFAULT_TABLES.canonical_series("quickturn"), "QUICK TURN")
        self.assertEqual(DEFAULT_TABLES.canonical_series("Integrex"), "INTEGREX")
        self.assertEqual(DEFAULT_TABLES.canonical_series("NOPE"), "")


if __name__ == "__main__":
    unittest.main()
