import unittest

from machine_meta.core.parsing import NO_MODEL, TitleParser, build_brand_model_key, extract_model
from machine_meta.errors import MissingInputError


class TestTitleParserScenarios(unittest.TestCase):
    def setUp(self) -> None:
        self.parser = TitleParser()

    def test_series_token_listing(self) -> None:
        record = self.parser.parse("USED MAZAK INTEGREX i-200S #12345")
        self.assertEqual(record.brand, "Mazak")
        self.assertEqual(record.model, "I-200S")
        self.assertEqual(record.normalized_model, "I-200S")
        self.assertEqual(record.series, "INTEGREX")
        self.assertEqual(record.listing_id, "12345")
        self.assertEqual(record.brand_model_key, "Mazak I-200S")
        self.assertEqual(record.confidence, 0.96)
        self.assertFalse(record.no_model_detected)

    def test_year_and_stop_phrases_removed(self) -> None:
        record = self.parser.parse("2018 OKUMA LB3000 EX II CNC LATHE")
        self.assertEqual(record.brand, "Okuma")
        self.assertEqual(record.model, "LB3000")
        self.assertEqual(record.series, "")
        self.assertEqual(record.brand_model_key, "Okuma LB3000")
        self.assertEqual(record.confidence, 0.88)

    def test_no_model_detected(self) -> None:
        record = self.parser.parse("Great Deal On Equipment For Sale")
        self.assertEqual(record.model, NO_MODEL)
        self.assertEqual(record.normalized_model, "")
        self.assertEqual(record.brand, "")
        self.assertEqual(record.brand_model_key, "")
        self.assertEqual(record.confidence, 0.1)
        self.assertTrue(record.no_model_detected)
        self.assertEqual(record.last_stage, "fixup")

    def test_letter_run_merged_with_digits(self) -> None:
        record = self.parser.parse("DOOSAN DNM 4500")
        self.assertEqual(record.brand, "Doosan")
        self.assertEqual(record.model, "DNM4500")
        self.assertEqual(record.brand_model_key, "Doosan DNM4500")
        self.assertEqual(record.confidence, 0.88)

    def test_letter_delimited_model(self) -> None:
        record = self.parser.parse("OKUMA MB-46VAE VERTICAL MACHINING CENTER")
        self.assertEqual(record.model, "MB-46VAE")
        self.assertEqual(record.confidence, 0.93)
        self.assertEqual(record.series, "")

    def test_digit_delimited_model(self) -> None:
        record = self.parser.parse("ZIMMERMANN 4V-24 PORTAL")
        self.assertEqual(record.brand, "Zimmermann")
        self.assertEqual(record.model, "4V-24")
        self.assertEqual(record.confidence, 0.92)

    def test_series_token_beats_fallback(self) -> None:
        record = self.parser.parse("MAZAK QUICK TURN 250 MSY")
        self.assertEqual(record.model, "250MSY")
        self.assertEqual(record.series, "QUICK TURN")
        self.assertEqual(record.confidence, 0.96)
        self.assertEqual(record.debug_trace[-1], ("match:series_token", "250MSY"))

    def test_site_tail_and_listing_id(self) -> None:
        record = self.parser.parse("MAKINO a51nx | Premier Equipment #998")
        self.assertEqual(record.brand, "Makino")
        self.assertEqual(record.model, "A51NX")
        self.assertEqual(record.listing_id, "998")

    def test_brand_substring_not_detected(self) -> None:
        record = self.parser.parse("MAZAKER 500 SPECIAL")
        self.assertEqual(record.brand, "")
        self.assertEqual(record.model, "MAZAKER500")
        self.assertEqual(record.brand_model_key, "")

    def test_unknown_brand_field_used_verbatim(self) -> None:
        record = self.parser.parse("QTN 250 lathe", brand="Acme")
        self.assertEqual(record.brand, "Acme")
        self.assertEqual(record.model, "250")
        self.assertEqual(record.series, "QTN")
        self.assertEqual(record.brand_model_key, "Acme 250")

    def test_brand_field_wins_over_title(self) -> None:
        record = self.parser.parse("MAZAK QTN 250", brand="mori seiki")
        self.assertEqual(record.brand, "DMG MORI")
        self.assertEqual(record.brand_model_key, "DMG MORI 250")

    def test_title_with_only_boilerplate(self) -> None:
        record = self.parser.parse("USED MAZAK CNC LATHE")
        self.assertEqual(record.brand, "Mazak")
        self.assertEqual(record.model, NO_MODEL)
        self.assertEqual(record.brand_model_key, "")
        self.assertEqual(record.last_stage, "strip brands+stops")


class TestTitleParserContract(unittest.TestCase):
    def setUp(self) -> None:
        self.parser = TitleParser()

    def test_blank_title_raises(self) -> None:
        for title in ("", "   ", None):
            with self.subTest(title=title):
                with self.assertRaises(MissingInputError):
                    self.parser.parse(title)

    def test_deterministic(self) -> None:
        titles = [
            "USED MAZAK INTEGREX i-200S #12345",
            "2018 OKUMA LB3000 EX II CNC LATHE",
            "Great Deal On Equipment For Sale",
        ]
        for title in titles:
            with self.subTest(title=title):
                self.assertEqual(self.parser.parse(title), TitleParser().parse(title))

    def test_trace_stage_order(self) -> None:
        record = self.parser.parse("USED MAZAK INTEGREX i-200S #12345")
        self.assertEqual(
            [stage for stage, _ in record.debug_trace],
            [
                "normalized",
                "strip site/id",
                "strip accessories",
                "strip brands+stops",
                "fixup",
                "match:series_token",
            ],
        )
        self.assertEqual(record.debug_trace[3], ("strip brands+stops", "INTEGREX i-200S"))
        self.assertEqual(record.debug_trace[4], ("fixup", "INTEGREX I-200S"))

    def test_key_requires_brand_and_model(self) -> None:
        self.assertEqual(build_brand_model_key("Mazak", "I-200S"), "Mazak I-200S")
        self.assertEqual(build_brand_model_key("", "I-200S"), "")
        self.assertEqual(build_brand_model_key("Mazak", ""), "")

    def test_extract_model_empty_title(self) -> None:
        result = extract_model("")
        self.assertEqual(result.model, NO_MODEL)
        self.assertEqual(result.confidence, 0.0)
        self.assertFalse(result.detected)

    def test_to_dict_serializes_trace(self) -> None:
        data = self.parser.parse("DOOSAN DNM 4500").to_dict()
        self.assertEqual(data["brand_model_key"], "Doosan DNM4500")
        self.assertEqual(data["debug_trace"][0], ["normalized", "DOOSAN DNM 4500"])


if __name__ == "__main__":
    unittest.main()
