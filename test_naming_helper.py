#!/usr/bin/env python3
"""
Tests for NamingHelper name mapping and the SymbolTable collision checks.
"""

import unittest

from odata_codegen_lib.errors import ConfigurationError
from odata_codegen_lib.naming_helper import NamingHelper, SymbolTable, convert, tokenize
from odata_codegen_lib.options import GenerationOptions, NamingStrategies


class TestTokenize(unittest.TestCase):

    def test_camel_and_pascal_case(self):
        self.assertEqual(tokenize("UserName"), ["User", "Name"])
        self.assertEqual(tokenize("userName"), ["user", "Name"])

    def test_acronyms_stay_together(self):
        self.assertEqual(tokenize("XMLParser"), ["XML", "Parser"])
        self.assertEqual(tokenize("ID"), ["ID"])

    def test_separators(self):
        self.assertEqual(tokenize("Person_Address.City"), ["Person", "Address", "City"])

    def test_convert_strategies(self):
        cases = [
            (NamingStrategies.PASCAL_CASE, "HomeAddress"),
            (NamingStrategies.CAMEL_CASE, "homeAddress"),
            (NamingStrategies.SNAKE_CASE, "home_address"),
            (NamingStrategies.CONSTANT_CASE, "HOME_ADDRESS"),
            (None, "home_Address"),
        ]
        for strategy, expected in cases:
            with self.subTest(strategy=strategy):
                self.assertEqual(convert("home_Address", strategy), expected)


class TestNamingHelper(unittest.TestCase):
    """Default naming of every artifact kind."""

    def setUp(self):
        self.naming = NamingHelper(GenerationOptions(), "Trippin", ["Trippin", "TP"])

    def test_models(self):
        self.assertEqual(self.naming.get_model_name("Trippin.Person"), "Person")
        self.assertEqual(self.naming.get_model_name("TP.Person"), "Person")
        self.assertEqual(self.naming.get_editable_model_name("Person"), "EditablePerson")
        self.assertEqual(self.naming.get_model_prop_name("UserName"), "user_name")

    def test_enums(self):
        self.assertEqual(self.naming.get_enum_name("Trippin.PersonGender"), "PersonGender")
        self.assertEqual(self.naming.get_enum_member_name("Male"), "MALE")
        self.assertEqual(self.naming.get_enum_member_name("SomeValue"), "SOME_VALUE")

    def test_query_objects_and_services(self):
        self.assertEqual(self.naming.get_query_object_name("Person"), "QPerson")
        self.assertEqual(self.naming.get_query_operation_name("GetNearestAirport"), "QGetNearestAirport")
        self.assertEqual(self.naming.get_service_name("Person"), "PersonService")
        self.assertEqual(self.naming.get_collection_service_name("Person"), "PersonCollectionService")
        self.assertEqual(self.naming.get_main_service_name(), "TrippinService")

    def test_operations(self):
        self.assertEqual(self.naming.get_operation_name("GetNearestAirport", "Function"), "get_nearest_airport")
        self.assertEqual(self.naming.get_operation_name("ResetDataSource", "Action"), "reset_data_source")
        self.assertEqual(self.naming.get_operation_params_model_name("GetNearestAirport", "Function"),
                         "GetNearestAirportParams")

    def test_entry_points_and_fields(self):
        self.assertEqual(self.naming.get_entry_point_name("People"), "people")
        self.assertEqual(self.naming.get_private_field_name("UserName"), "_user_name")
        self.assertEqual(self.naming.get_navigation_accessor_name("BestFriend"), "best_friend")

    def test_deterministic(self):
        """Same input, same output, also across helper instances."""
        other = NamingHelper(GenerationOptions(), "Trippin", ["Trippin", "TP"])
        for raw in ["Person", "HomeAddress", "XMLDoc", "a_b"]:
            self.assertEqual(self.naming.get_model_name(raw), other.get_model_name(raw))
            self.assertEqual(self.naming.get_model_name(raw), self.naming.get_model_name(raw))

    def test_keywords_and_leading_digits(self):
        self.assertEqual(self.naming.get_model_prop_name("class"), "class_")
        self.assertEqual(self.naming.get_model_prop_name("None"), "none")
        self.assertEqual(self.naming.get_model_name("1stPlace"), "_1stPlace")

    def test_model_prefix_and_suffix(self):
        naming = NamingHelper(GenerationOptions(model_prefix="I", model_suffix="Model"), "Trippin")
        self.assertEqual(naming.get_model_name("Person"), "IPersonModel")
        self.assertEqual(naming.get_editable_model_name("Person"), "EditableIPersonModel")
        # other kinds are not affected
        self.assertEqual(naming.get_query_object_name("Person"), "QPerson")

    def test_naming_strategy_none_keeps_raw(self):
        options = GenerationOptions.from_dict({"naming": {"model_props": {"naming_strategy": None}}})
        naming = NamingHelper(options, "Trippin")
        self.assertEqual(naming.get_model_prop_name("UserName"), "UserName")

    def test_custom_service_name(self):
        naming = NamingHelper(GenerationOptions(service_name="TripPin"), "Microsoft.OData.Trippin")
        self.assertEqual(naming.get_main_service_name(), "TripPinService")


class TestSymbolTable(unittest.TestCase):

    def test_register_same_raw_twice(self):
        table = SymbolTable("test")
        table.register("Person", "Tester.Person")
        table.register("Person", "Tester.Person")
        self.assertEqual(table.symbols(), ["Person"])
        self.assertIn("Person", table)

    def test_collision_raises(self):
        table = SymbolTable("test")
        table.register("person_name", "PersonName")
        with self.assertRaises(ConfigurationError) as ctx:
            table.register("person_name", "person_Name", "property")
        self.assertEqual(ctx.exception.identifier, "person_Name")
        self.assertIn("PersonName", str(ctx.exception))


if __name__ == '__main__':
    unittest.main()
