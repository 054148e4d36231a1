"""
Fleet core unittests for the record repository and the filters
"""

import logging
import datetime
import unittest

from fleet_core.persistence import filters, models
from fleet_core.persistence.err import InvalidRecord, MalformedIdentifier
from fleet_core.persistence.repository import AircraftRepository

from . import utils


class FilterTests(unittest.TestCase):
    def test_normalize_filter(self):
        self.assertEqual({}, filters.normalize_filter({}))
        self.assertEqual({}, filters.normalize_filter({"status": "", "airline": "", "page": "2", "foo": "bar"}))
        self.assertEqual(
            {
                "status": filters.MatchRule(filters.MatchKind.EXACT, "Active"),
                "airline": filters.MatchRule(filters.MatchKind.SUBSTRING, "klm")
            },
            filters.normalize_filter({"status": "Active", "airline": "klm", "limit": "5"})
        )

    def test_custom_recognized_filters(self):
        result = filters.normalize_filter({"model": "A380", "status": "Active"}, {"model": filters.MatchKind.EXACT})
        self.assertEqual({"model": filters.MatchRule(filters.MatchKind.EXACT, "A380")}, result)

    def test_unknown_field(self):
        query_filter = {"engine": filters.MatchRule(filters.MatchKind.EXACT, "jet")}
        self.assertRaises(KeyError, filters.to_criteria, models.Aircraft, query_filter)


class RepositoryTests(utils.BasePersistenceTests):
    repository: AircraftRepository

    def setUp(self) -> None:
        super().setUp()
        self.repository = AircraftRepository(self.session, logging.getLogger(__name__))

    def _fill(self):
        return [self.repository.create(fields) for fields in self.get_sample_fleet()]

    def test_create(self):
        aircraft = self.repository.create({"model": "A380", "registration": "A6-EDA", "airline": "Emirates", "status": "Active"})
        self.assertEqual(1, aircraft.id)
        self.assertEqual(models.DEFAULT_HOMEBASE, aircraft.homebase)
        self.assertEqual(models.DEFAULT_DESCRIPTION, aircraft.description)
        self.assertEqual(aircraft.created_at, aircraft.updated_at)
        self.assertEqual(datetime.timezone.utc, aircraft.last_modified.tzinfo)

        second = self.repository.create(self.get_sample_fleet()[4])
        self.assertEqual(2, second.id)
        self.assertEqual("London Heathrow", second.homebase)

    def test_create_missing_fields(self):
        self.assertRaises(InvalidRecord, self.repository.create, {"model": "A380"})
        self.assertRaises(
            InvalidRecord,
            self.repository.create,
            {"model": "A380", "registration": "", "airline": "Emirates", "status": "Active"}
        )
        self.assertEqual(0, self.repository.count({}))

    def test_count_and_find(self):
        self._fill()
        self.assertEqual(6, self.repository.count({}))
        self.assertEqual([1, 2, 3, 4, 5, 6], [a.id for a in self.repository.find({})])
        self.assertEqual([3, 4], [a.id for a in self.repository.find({}, 2, 2)])
        self.assertEqual([5, 6], [a.id for a in self.repository.find({}, 4, 10)])
        self.assertEqual([], self.repository.find({}, 10, 2))

    def test_find_beyond_integer_range(self):
        self._fill()
        self.assertEqual([], self.repository.find({}, 10**19, 1))
        self.assertEqual([], self.repository.find({}, 2**63, 2**64))
        self.assertEqual([1, 2, 3, 4, 5, 6], [a.id for a in self.repository.find({}, 0, 10**20)])
        self.assertEqual([6], [a.id for a in self.repository.find({}, 5, 2**63)])

    def test_filter_semantics(self):
        self._fill()
        active = filters.normalize_filter({"status": "Active"})
        self.assertEqual(["A6-EDA", "PH-NXA", "PH-KLM"], [a.registration for a in self.repository.find(active)])
        self.assertNotIn("D-AIXA", [a.registration for a in self.repository.find(active)])

        klm = filters.normalize_filter({"airline": "klm"})
        self.assertEqual(2, self.repository.count(klm))
        self.assertEqual(
            {"KLM Royal Dutch Airlines", "KLM"},
            {a.airline for a in self.repository.find(klm)}
        )

        both = filters.normalize_filter({"airline": "KLM", "status": "Active"})
        self.assertEqual(["PH-NXA"], [a.registration for a in self.repository.find(both)])

    def test_airline_wildcards_match_literally(self):
        self._fill()
        self.assertEqual(0, self.repository.count(filters.normalize_filter({"airline": "%"})))
        self.assertEqual(0, self.repository.count(filters.normalize_filter({"airline": "K_M"})))

    def test_find_by_id(self):
        self._fill()
        self.assertEqual("PH-AOA", self.repository.find_by_id("3").registration)
        self.assertEqual("PH-AOA", self.repository.find_by_id(3).registration)
        self.assertIsNone(self.repository.find_by_id("42"))
        for identifier in ["abc", "-1", "0", "1.0", " 1", "", str(2**64), "٣", True]:
            with self.subTest(identifier=identifier):
                self.assertRaises(MalformedIdentifier, self.repository.find_by_id, identifier)

    def test_replace(self):
        records = self._fill()
        original = records[4]
        created_at = original.created_at
        updated_at = original.updated_at

        result = self.repository.replace(
            "5",
            {"model": "A321neo", "registration": "G-EUXC", "airline": "British Airways", "status": "Active"}
        )
        self.assertEqual("A321neo", result.model)
        self.assertEqual(models.DEFAULT_HOMEBASE, result.homebase)
        self.assertEqual(models.DEFAULT_DESCRIPTION, result.description)
        self.assertEqual(created_at, result.created_at)
        self.assertGreater(result.updated_at, updated_at)

        self.assertIsNone(self.repository.replace("77", self.get_sample_fleet()[0]))
        self.assertRaises(InvalidRecord, self.repository.replace, "5", {"model": "A321"})

    def test_patch(self):
        records = self._fill()
        before = {key: getattr(records[2], key) for key in ["model", "registration", "airline", "homebase"]}
        updated_at = records[2].updated_at

        result = self.repository.patch(3, {"status": "Active"})
        self.assertEqual("Active", result.status)
        self.assertEqual(before, {key: getattr(result, key) for key in before})
        self.assertGreater(result.updated_at, updated_at)

        self.assertIsNone(self.repository.patch("99", {"status": "Active"}))
        self.assertRaises(InvalidRecord, self.repository.patch, 3, {})
        self.assertRaises(InvalidRecord, self.repository.patch, 3, {"status": ""})
        self.assertRaises(InvalidRecord, self.repository.patch, 3, {"status": None})
        self.assertRaises(InvalidRecord, self.repository.patch, 3, {"engine": "jet"})
        self.assertEqual("Active", self.repository.find_by_id(3).status)

    def test_patch_resets_emptied_optional_fields(self):
        self._fill()
        result = self.repository.patch(5, {"homebase": "", "description": None})
        self.assertEqual(models.DEFAULT_HOMEBASE, result.homebase)
        self.assertEqual(models.DEFAULT_DESCRIPTION, result.description)
        self.assertEqual("A321", result.model)
        self.assertEqual("Dubai", self.repository.patch(5, {"homebase": "Dubai"}).homebase)

    def test_updates_strictly_increase(self):
        aircraft = self._fill()[0]
        future = models.utcnow() + datetime.timedelta(days=1)
        aircraft.updated_at = future
        self.session.commit()
        result = self.repository.patch(1, {"description": "Flagship"})
        self.assertEqual(future + datetime.timedelta(microseconds=1), result.updated_at)

    def test_delete(self):
        self._fill()
        self.assertTrue(self.repository.delete("2"))
        self.assertFalse(self.repository.delete("2"))
        self.assertIsNone(self.repository.find_by_id(2))
        self.assertEqual(5, self.repository.count({}))
        self.assertRaises(MalformedIdentifier, self.repository.delete, "two")


if __name__ == '__main__':
    unittest.main()
