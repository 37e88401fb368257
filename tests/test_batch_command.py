import tempfile
import unittest
from pathlib import Path

from machine_meta.app import MachineMetaApp
from machine_meta.commands.batch import run
from machine_meta.config import ParserSettings, Settings, StoreSettings


class TestBatchCommand(unittest.TestCase):
    def _app(self, tmpdir: str, dedup_mode: str = "racy") -> MachineMetaApp:
        settings = Settings(
            store=StoreSettings(path=Path(tmpdir) / "store.sqlite3"),
            parser=ParserSettings(dedup_mode=dedup_mode),
        )
        app = MachineMetaApp.create(settings)
        app.init_schema()
        return app

    def test_failures_are_counted_not_fatal(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            app = self._app(tmpdir)
            try:
                table = app.settings.store.table
                good = [
                    app.store.create_record(table, {"PageTitle": "DOOSAN DNM 4500"}),
                    app.store.create_record(table, {"PageTitle": "ZIMMERMANN 4V-24 PORTAL"}),
                ]
                bad = app.store.create_record(table, {"PageTitle": ""})

                with self.assertLogs("machine_meta.commands.batch", level="WARNING"):
                    report = run(app.get_updater(), [*good, bad], workers=3)

                self.assertEqual(report.updated, 2)
                self.assertEqual(report.failed, 1)
                self.assertEqual(list(report.errors), [bad])
                for record_id in good:
                    self.assertIn("Detected Model", app.store.get_record(table, record_id))
            finally:
                app.close()

    def test_racy_batch_links_every_listing(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            app = self._app(tmpdir)
            try:
                table = app.settings.store.table
                ids = [
                    app.store.create_record(table, {"PageTitle": "USED MAZAK INTEGREX i-200S #1"}),
                    app.store.create_record(table, {"PageTitle": "MAZAK INTEGREX I-200S #2"}),
                ]
                report = run(app.get_updater(), ids, workers=2)
                self.assertEqual(report.updated, 2)
                self.assertIn(app.store.count_records("BrandModels"), (1, 2))
                for record_id in ids:
                    self.assertEqual(len(app.store.get_record(table, record_id)["BrandModel"]), 1)
            finally:
                app.close()

    def test_locked_batch_creates_one_row_per_key(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            app = self._app(tmpdir, dedup_mode="locked")
            try:
                table = app.settings.store.table
                ids = [
                    app.store.create_record(table, {"PageTitle": f"MAZAK INTEGREX I-200S #{n}"})
                    for n in range(6)
                ]
                report = run(app.get_updater(), ids, workers=4)
                self.assertEqual(report.updated, 6)
                self.assertEqual(app.store.count_records("BrandModels"), 1)
                links = {app.store.get_record(table, rid)["BrandModel"][0]["id"] for rid in ids}
                self.assertEqual(len(links), 1)
            finally:
                app.close()

    def test_empty_batch(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            app = self._app(tmpdir)
            try:
                report = run(app.get_updater(), [])
                self.assertEqual((report.updated, report.failed), (0, 0))
            finally:
                app.close()


if __name__ == "__main__":
    unittest.main()
