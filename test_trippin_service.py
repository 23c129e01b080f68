#!/usr/bin/env python3
"""
Tests for services bound to a client: URLs, HTTP semantics and payloads.

The client is a mock which records the last request, so every test checks
what a real client would have been asked to do.
"""

import asyncio
import os
import unittest

from odata_codegen_lib import MetadataParser, digest, digest_metadata, generate_all
from odata_codegen_lib.constants import ODataVersions
from odata_codegen_lib.errors import ReferenceLookupError
from odata_codegen_lib.runtime import (
    CollectionPropertyService,
    CollectionService,
    EntityService,
    KeyStructured,
    ModelService,
    ODataClient,
    bind_service,
)
from odata_schema_builder import ODataSchemaBuilder

FIXTURES = os.path.join(os.path.dirname(os.path.abspath(__file__)), "fixtures")
BASE_URL = "/test"


class MockODataClient(ODataClient):
    """Records the last request instead of sending it."""

    def __init__(self):
        self.last_operation = None
        self.last_url = None
        self.last_data = None
        self.last_params = None

    def _record(self, operation, url, data=None, params=None):
        self.last_operation = operation
        self.last_url = url
        self.last_data = data
        self.last_params = params
        return {"operation": operation, "url": url}

    def get(self, url, params=None):
        return self._record("GET", url, params=params)

    def post(self, url, data=None):
        return self._record("POST", url, data)

    def put(self, url, data):
        return self._record("PUT", url, data)

    def patch(self, url, data):
        return self._record("PATCH", url, data)

    def merge(self, url, data):
        return self._record("MERGE", url, data)

    def delete(self, url):
        return self._record("DELETE", url)


class AsyncMockODataClient(MockODataClient):
    """Client whose requests are coroutines."""

    def get(self, url, params=None):
        async def request():
            return self._record("GET", url, params=params)
        return request()


def load_result(fixture):
    metadata = MetadataParser().parse_file(os.path.join(FIXTURES, fixture))
    return generate_all(digest_metadata(metadata))


class TestEntitySetScenario(unittest.TestCase):
    """Scenario A: a single entity set addressed by key."""

    def setUp(self):
        builder = ODataSchemaBuilder("Tester")
        builder.add_entity_type("TestEntity", fn=lambda t: t.add_key_prop("id", "Edm.String"))
        builder.add_entity_set("Ents", "Tester.TestEntity")
        self.client = MockODataClient()
        self.service = bind_service(generate_all(digest(builder.get_schemas())), self.client, BASE_URL)

    def test_entity_set_path(self):
        self.assertEqual(self.service.ents.get_path(), "/test/Ents")

    def test_get_by_key(self):
        self.assertEqual(self.service.ents.get("x").get_path(), "/test/Ents('x')")
        self.assertEqual(self.service.ents.get({"id": "x"}).get_path(), "/test/Ents('x')")


class TestServiceMemberNames(unittest.TestCase):
    """Property services of names the runtime could otherwise swallow."""

    def setUp(self):
        builder = ODataSchemaBuilder("Tester")
        builder.add_complex_type("Doc", fn=lambda t: t.add_prop("Version", "Edm.String"))
        builder.add_entity_type("File", fn=lambda t: t.add_key_prop("Id", "Edm.Int32").add_prop("Doc", "Tester.Doc")
                                .add_nav_prop("1stParent", "Tester.File"))
        builder.add_entity_set("Files", "Tester.File")
        self.result = generate_all(digest(builder.get_schemas()))
        self.service = bind_service(self.result, MockODataClient(), BASE_URL)

    def test_member_with_leading_underscore(self):
        declaration = next(p for p in self.result.get("entity_service", "FileService").props
                           if p.odata_name == "1stParent")
        self.assertTrue(declaration.name.startswith("_"))
        parent = getattr(self.service.files.get(1), declaration.name)
        self.assertIsInstance(parent, EntityService)
        self.assertEqual(parent.get_path(), "/test/Files(1)/1stParent")

    def test_property_services_are_kept(self):
        entity = self.service.files.get(1)
        self.assertIs(entity.doc, entity.doc)
        self.assertEqual(entity.doc.get_path(), "/test/Files(1)/Doc")

    def test_dunder_lookups_are_not_members(self):
        with self.assertRaises(AttributeError):
            self.service.__wrapped__
        with self.assertRaises(AttributeError):
            self.service.files.get(1).__wrapped__


class TestTrippinService(unittest.TestCase):

    @classmethod
    def setUpClass(cls):
        cls.result = load_result("trippin_v4.xml")

    def setUp(self):
        self.client = MockODataClient()
        self.service = bind_service(self.result, self.client, BASE_URL + "/")

    def test_entry_points(self):
        self.assertIsInstance(self.service.people, CollectionService)
        self.assertIs(self.service.people, self.service.people)
        self.assertEqual(self.service.people.get_path(), "/test/People")
        self.assertIsInstance(self.service.me, EntityService)
        self.assertEqual(self.service.me.get_path(), "/test/Me")

    def test_query_collection(self):
        self.service.people.query({"$top": 5})
        self.assertEqual(self.client.last_operation, "GET")
        self.assertEqual(self.client.last_url, "/test/People")
        self.assertEqual(self.client.last_params, {"$top": 5})

    def test_create(self):
        model = {"UserName": "tester", "FirstName": "Test"}
        self.service.people.create(model)
        self.assertEqual((self.client.last_operation, self.client.last_url), ("POST", "/test/People"))
        self.assertEqual(self.client.last_data, model)

    def test_entity_crud(self):
        person = self.service.people.get("tester")
        self.assertEqual(person.get_path(), "/test/People('tester')")

        person.query()
        self.assertEqual((self.client.last_operation, self.client.last_url), ("GET", "/test/People('tester')"))
        person.update({"UserName": "tester"})
        self.assertEqual(self.client.last_operation, "PUT")
        person.patch({"FirstName": "T"})
        self.assertEqual((self.client.last_operation, self.client.last_data), ("PATCH", {"FirstName": "T"}))
        person.delete()
        self.assertEqual((self.client.last_operation, self.client.last_url), ("DELETE", "/test/People('tester')"))
        self.assertIsNone(self.client.last_data)

    def test_collection_shortcuts_by_key(self):
        self.service.people.patch("tester", {"FirstName": "T"})
        self.assertEqual((self.client.last_operation, self.client.last_url), ("PATCH", "/test/People('tester')"))
        self.service.people.delete(KeyStructured({"UserName": "tester"}))
        self.assertEqual((self.client.last_operation, self.client.last_url), ("DELETE", "/test/People('tester')"))

    def test_key_spec(self):
        keys = self.service.people.get("tester").get_key_spec()
        self.assertEqual([(k.name, k.odata_name) for k in keys], [("user_name", "UserName")])
        self.assertEqual(self.service.people.get_key_spec(), keys)

    def test_navigation_chain(self):
        city = self.service.people.get("tester").best_friend.best_friend.best_friend.home_address.city
        self.assertIsInstance(city, ModelService)
        self.assertEqual(city.get_path(),
                         "/test/People('tester')/BestFriend/BestFriend/BestFriend/HomeAddress/City")

    def test_navigation_collection(self):
        friends = self.service.people.get("tester").friends
        self.assertIsInstance(friends, CollectionService)
        self.assertEqual(friends.get("other").get_path(), "/test/People('tester')/Friends('other')")

    def test_complex_property(self):
        """Scenario D, scalar variant: query and update only."""
        home_address = self.service.people.get("tester").home_address
        home_address.query()
        self.assertEqual((self.client.last_operation, self.client.last_url),
                         ("GET", "/test/People('tester')/HomeAddress"))
        home_address.update({"Address": "Street 1"})
        self.assertEqual(self.client.last_operation, "PUT")
        self.assertFalse(hasattr(home_address, "add"))
        self.assertEqual(home_address.get_query_object().get_artifact().name, "QLocation")

    def test_complex_collection_property(self):
        """Scenario D, collection variant: add, update and delete."""
        address_info = self.service.people.get("tester").address_info
        self.assertIsInstance(address_info, CollectionPropertyService)
        url = "/test/People('tester')/AddressInfo"

        address_info.query()
        self.assertEqual((self.client.last_operation, self.client.last_url), ("GET", url))
        address_info.add({"Address": "Street 1"})
        self.assertEqual((self.client.last_operation, self.client.last_data), ("POST", {"Address": "Street 1"}))
        address_info.update([{"Address": "Street 2"}])
        self.assertEqual((self.client.last_operation, self.client.last_data), ("PUT", [{"Address": "Street 2"}]))
        address_info.delete()
        self.assertEqual((self.client.last_operation, self.client.last_url), ("DELETE", url))
        self.assertEqual(address_info.get_query_object().get_artifact().name, "QLocation")

    def test_unbound_function(self):
        """Scenario C."""
        self.service.get_nearest_airport(lat=123, lon=345)
        self.assertEqual((self.client.last_operation, self.client.last_url),
                         ("GET", "/test/GetNearestAirport(lat=123,lon=345)"))

    def test_unbound_function_without_params(self):
        self.service.get_person_with_most_friends()
        self.assertEqual(self.client.last_url, "/test/GetPersonWithMostFriends()")

    def test_unbound_action(self):
        self.service.reset_data_source()
        self.assertEqual((self.client.last_operation, self.client.last_url), ("POST", "/test/ResetDataSource"))
        self.assertEqual(self.client.last_data, {})

    def test_bound_function(self):
        self.service.people.get("tester").get_friends_trips(user_name="other")
        self.assertEqual((self.client.last_operation, self.client.last_url),
                         ("GET", "/test/People('tester')/Trippin.GetFriendsTrips(userName='other')"))

    def test_bound_action(self):
        self.service.me.share_trip({"userName": "other", "tripId": 7})
        self.assertEqual((self.client.last_operation, self.client.last_url), ("POST", "/test/Me/Trippin.ShareTrip"))
        self.assertEqual(self.client.last_data, {"userName": "other", "tripId": 7})

    def test_collection_bound_function(self):
        self.service.people.get_oldest()
        self.assertEqual(self.client.last_url, "/test/People/Trippin.GetOldest()")

    def test_unknown_members(self):
        with self.assertRaises(AttributeError):
            self.service.no_such_entry
        with self.assertRaises(AttributeError):
            self.service.people.no_such_operation
        with self.assertRaises(AttributeError):
            self.service.me.user_name

    def test_client_result_is_passed_through(self):
        response = self.service.people.query()
        self.assertEqual(response, {"operation": "GET", "url": "/test/People"})

    def test_awaitable_results(self):
        service = bind_service(self.result, AsyncMockODataClient(), BASE_URL)
        response = asyncio.run(service.people.get("tester").query())
        self.assertEqual(response["url"], "/test/People('tester')")

    def test_service_needs_client_and_path(self):
        with self.assertRaises(ValueError):
            bind_service(self.result, None, BASE_URL)
        with self.assertRaises(ValueError):
            bind_service(self.result, self.client, "")

    def test_bind_requires_main_service(self):
        empty = self.result.model_copy(update={"services": ()})
        with self.assertRaises(ReferenceLookupError):
            bind_service(empty, self.client, BASE_URL)


class TestV2Service(unittest.TestCase):

    @classmethod
    def setUpClass(cls):
        cls.result = load_result("demo_v2.xml")

    def setUp(self):
        self.client = MockODataClient()
        self.service = bind_service(self.result, self.client, "/v2")

    def test_numeric_key(self):
        self.assertEqual(self.result.version, ODataVersions.V2)
        self.assertEqual(self.service.products.get(1).get_path(), "/v2/Products(1)")

    def test_patch_uses_merge(self):
        self.service.products.get(1).patch({"Name": "New"})
        self.assertEqual((self.client.last_operation, self.client.last_url), ("MERGE", "/v2/Products(1)"))

    def test_function_import_query_string(self):
        self.service.get_products_by_rating(rating=4)
        self.assertEqual((self.client.last_operation, self.client.last_url), ("GET", "/v2/GetProductsByRating?rating=4"))

    def test_function_import_without_params(self):
        self.service.get_top_supplier()
        self.assertEqual(self.client.last_url, "/v2/GetTopSupplier")

    def test_post_function_import(self):
        self.service.increase_prices(percent=2.5)
        self.assertEqual((self.client.last_operation, self.client.last_url), ("POST", "/v2/IncreasePrices?percent=2.5"))
        self.assertIsNone(self.client.last_data)

    def test_association_navigation(self):
        category = self.service.products.get(1).category
        self.assertIsInstance(category, EntityService)
        self.assertEqual(category.get_path(), "/v2/Products(1)/Category")
        products = self.service.categories.get(2).products
        self.assertEqual(products.get(3).get_path(), "/v2/Categories(2)/Products(3)")

    def test_complex_property(self):
        self.service.suppliers.get(1).address.update({"Street": "Main"})
        self.assertEqual((self.client.last_operation, self.client.last_url), ("PUT", "/v2/Suppliers(1)/Address"))


if __name__ == '__main__':
    unittest.main()
