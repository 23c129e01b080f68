#!/usr/bin/env python3
"""
Tests for the service family: entity, collection and main services.
"""

import os
import unittest

from odata_codegen_lib import (
    GenerationOptions,
    MetadataParser,
    NameSettings,
    NamingOptions,
    NamingStrategies,
    digest,
    digest_metadata,
)
from odata_codegen_lib.errors import ConfigurationError, ReferenceLookupError
from odata_codegen_lib.generator import generate_all, generate_services
from odata_codegen_lib.models import OperationKinds
from odata_schema_builder import ODataSchemaBuilder

FIXTURES = os.path.join(os.path.dirname(os.path.abspath(__file__)), "fixtures")


def trippin_services(options=None):
    metadata = MetadataParser().parse_file(os.path.join(FIXTURES, "trippin_v4.xml"))
    return generate_services(digest_metadata(metadata, options), options=options)


def by_name(artifacts, kind):
    return {a.name: a for a in artifacts if a.kind == kind}


class TestServiceGenerator(unittest.TestCase):

    @classmethod
    def setUpClass(cls):
        cls.artifacts = trippin_services()
        cls.services = by_name(cls.artifacts, "entity_service")
        cls.collections = by_name(cls.artifacts, "collection_service")
        cls.main = cls.artifacts[-1]

    def test_artifact_order(self):
        self.assertEqual([a.name for a in self.artifacts], [
            "PersonService", "PersonCollectionService",
            "EmployeeService", "EmployeeCollectionService",
            "AirlineService", "AirlineCollectionService",
            "AirportService", "AirportCollectionService",
            "TripService", "TripCollectionService",
            "LocationService", "CityService", "AirportLocationService",
            "TrippinService",
        ])

    def test_entity_service_props(self):
        person = self.services["PersonService"]
        props = {p.odata_name: p for p in person.props}
        self.assertEqual(list(props), ["AddressInfo", "HomeAddress", "Friends", "BestFriend", "Trips"])
        self.assertEqual((props["AddressInfo"].service_kind, props["AddressInfo"].service),
                         ("model_collection", "LocationService"))
        self.assertEqual(props["AddressInfo"].query_object, "QLocation")
        self.assertEqual((props["HomeAddress"].service_kind, props["HomeAddress"].service), ("model", "LocationService"))
        self.assertEqual((props["Friends"].service_kind, props["Friends"].service),
                         ("entity_collection", "PersonCollectionService"))
        self.assertEqual((props["BestFriend"].service_kind, props["BestFriend"].service), ("entity", "PersonService"))
        self.assertEqual(props["BestFriend"].name, "best_friend")

    def test_entity_service_keys_and_operations(self):
        person = self.services["PersonService"]
        self.assertEqual([(k.name, k.odata_name, k.type) for k in person.keys], [("user_name", "UserName", "str")])
        self.assertEqual([o.name for o in person.operations], ["get_favorite_airline", "get_friends_trips", "share_trip"])
        self.assertEqual(person.editable_model, "EditablePerson")
        self.assertEqual(person.query_object, "QPerson")

    def test_complex_type_service(self):
        location = self.services["LocationService"]
        self.assertFalse(location.is_entity)
        self.assertEqual(location.keys, ())
        self.assertEqual([(p.name, p.service_kind, p.service) for p in location.props], [("city", "model", "CityService")])
        self.assertNotIn("LocationCollectionService", self.collections)

    def test_collection_service(self):
        people = self.collections["PersonCollectionService"]
        self.assertEqual(people.entity_service, "PersonService")
        self.assertEqual([o.name for o in people.operations], ["get_oldest"])
        self.assertEqual(people.keys[0].odata_name, "UserName")

    def test_inherited_operations_and_props(self):
        employee = self.services["EmployeeService"]
        self.assertEqual([o.name for o in employee.operations], ["get_favorite_airline", "get_friends_trips", "share_trip"])
        self.assertEqual([p.odata_name for p in employee.props][-1], "Peers")
        self.assertEqual([o.name for o in self.collections["EmployeeCollectionService"].operations], ["get_oldest"])

    def test_primitive_property_services(self):
        services = by_name(trippin_services(GenerationOptions(enable_primitive_property_services=True)),
                           "entity_service")
        props = {p.odata_name: p.service_kind for p in services["PersonService"].props}
        self.assertEqual(props["UserName"], "primitive")
        self.assertEqual(props["Gender"], "enum")
        self.assertEqual(props["Features"], "enum_collection")
        self.assertEqual(props["Emails"], "primitive_collection")
        self.assertEqual(props["HomeAddress"], "model")

    def test_private_field_names(self):
        props = {p.odata_name: p for p in self.services["PersonService"].props}
        self.assertEqual(props["BestFriend"].field_name, "_best_friend")
        self.assertEqual(props["AddressInfo"].field_name, "_address_info")

    def test_private_field_naming_options(self):
        naming = NamingOptions(private_fields=NameSettings(prefix="m", naming_strategy=NamingStrategies.CAMEL_CASE))
        services = by_name(trippin_services(GenerationOptions(naming=naming)), "entity_service")
        props = {p.odata_name: p for p in services["PersonService"].props}
        self.assertEqual(props["BestFriend"].field_name, "mBestFriend")
        self.assertEqual(props["BestFriend"].name, "best_friend")

    def test_main_service_entry_points(self):
        self.assertEqual(self.main.name, "TrippinService")
        entries = {e.name: e for e in self.main.entry_points}
        self.assertEqual(list(entries), ["people", "airlines", "airports", "me"])
        self.assertEqual((entries["people"].entry_kind, entries["people"].service),
                         ("entity_set", "PersonCollectionService"))
        self.assertEqual((entries["me"].entry_kind, entries["me"].service), ("singleton", "PersonService"))

    def test_navigation_bindings_resolved(self):
        entries = {e.name: e for e in self.main.entry_points}
        bindings = [(b.path, b.target_kind, b.target_entry) for b in entries["people"].navigation_bindings]
        self.assertEqual(bindings, [("Friends", "entity_set", "people"), ("BestFriend", "entity_set", "people"),
                                    ("Employee/Peers", "entity_set", "people")])
        qualified = entries["me"].navigation_bindings[1]
        self.assertEqual((qualified.target, qualified.target_entry), ("Trippin.Container/People", "people"))

    def test_main_service_operations(self):
        operations = {o.name: o for o in self.main.operations}
        self.assertEqual(list(operations), ["get_person_with_most_friends", "get_nearest_airport", "reset_data_source"])
        self.assertEqual(operations["get_nearest_airport"].query_operation, "QGetNearestAirport")
        self.assertEqual(operations["get_nearest_airport"].entity_set, "Airports")
        self.assertEqual(operations["reset_data_source"].operation_kind, OperationKinds.ACTION)

    def test_model_prefix_consistent_across_families(self):
        options = GenerationOptions(model_prefix="I")
        metadata = MetadataParser().parse_file(os.path.join(FIXTURES, "trippin_v4.xml"))
        result = generate_all(digest_metadata(metadata, options), options=options)
        model = result.get("model", "IPerson")
        query_object = result.get("query_object", "QPerson")
        service = result.get("entity_service", "PersonService")
        self.assertEqual(query_object.model, model.name)
        self.assertEqual(service.model, model.name)
        self.assertEqual(service.editable_model, model.editable.name)


class TestServiceGeneratorErrors(unittest.TestCase):

    def test_entity_set_without_key(self):
        builder = ODataSchemaBuilder("Tester")
        builder.add_entity_type("Log", fn=lambda t: t.add_prop("Message", "Edm.String"))
        builder.add_entity_set("Logs", "Tester.Log")
        with self.assertRaises(ReferenceLookupError) as ctx:
            generate_services(digest(builder.get_schemas()))
        self.assertEqual(ctx.exception.identifier, "Logs")

    def test_dangling_binding_target(self):
        builder = ODataSchemaBuilder("Tester")
        builder.add_entity_type("A", fn=lambda t: t.add_key_prop("Id", "Edm.Int32").add_nav_prop("Next", "Tester.A"))
        builder.add_entity_set("As", "Tester.A", bindings=[("Next", "Bs")])
        data_model = digest(builder.get_schemas())
        with self.assertRaises(ReferenceLookupError) as ctx:
            generate_services(data_model)
        self.assertEqual(ctx.exception.identifier, "Bs")

    def test_accessor_collides_with_operation(self):
        builder = ODataSchemaBuilder("Tester")
        builder.add_entity_type("A", fn=lambda t: t.add_key_prop("Id", "Edm.Int32").add_nav_prop("Refresh", "Tester.A"))
        builder.add_action("Refresh", bound=True, fn=lambda o: o.add_param("a", "Tester.A"))
        with self.assertRaises(ConfigurationError):
            generate_services(digest(builder.get_schemas()))


if __name__ == '__main__':
    unittest.main()
