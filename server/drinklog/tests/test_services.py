import unittest

from drinklog import services
from drinklog.errors import ConflictError, ValidationError
from drinklog.storage import InMemoryDocumentStore, WriteResult


class SaveDayTests(unittest.TestCase):
    def setUp(self):
        self.store = InMemoryDocumentStore()

    def test_empty_record_is_accepted(self):
        services.save_day(self.store, "2024-03-05", {})
        self.assertEqual(self.store.read(), {"2024-03-05": {}})

    def test_falsy_values_are_missing(self):
        for data in (None, "", 0, False):
            with self.assertRaises(ValidationError):
                services.save_day(self.store, "2024-03-05", data)
        self.assertEqual(self.store.history, [])

    def test_date_must_be_string_in_format(self):
        for date in ("2024-3-5", "2024/03/05", "2024-03-05T00:00", 20240305):
            with self.assertRaises(ValidationError):
                services.save_day(self.store, date, {"bob": {}})

    def test_writes_against_snapshot_revision(self):
        revision = self.store.seed({"2024-01-01": {}})
        calls = []
        original = self.store.write_if_match

        def recording_write(doc, expected_revision):
            calls.append(expected_revision)
            return original(doc, expected_revision)

        self.store.write_if_match = recording_write
        services.save_day(self.store, "2024-01-02", {"bob": {"beer": 1}})
        self.assertEqual(calls, [revision])

    def test_conflict_is_raised(self):
        self.store.write_if_match = lambda doc, rev: WriteResult(ok=False, conflict=True)
        with self.assertRaises(ConflictError):
            services.save_day(self.store, "2024-01-02", {"bob": {"beer": 1}})


class ImportDaysTests(unittest.TestCase):
    def test_returns_imported_count(self):
        store = InMemoryDocumentStore()
        store.seed({"2024-01-01": {"a": {"beer": 1}}, "2024-01-03": {}})
        count = services.import_days(
            store, {"2024-01-01": {"b": {}}, "2024-01-02": {"c": {}}}
        )
        self.assertEqual(count, 2)
        self.assertEqual(
            store.read(),
            {"2024-01-01": {"b": {}}, "2024-01-03": {}, "2024-01-02": {"c": {}}},
        )

    def test_empty_import_still_commits(self):
        store = InMemoryDocumentStore()
        self.assertEqual(services.import_days(store, {}), 0)
        self.assertEqual(len(store.history), 1)


if __name__ == "__main__":
    unittest.main()
