#!/usr/bin/env python3
"""
Tests for the model family: enums, read and editable models, operation params.
"""

import os
import unittest

from odata_codegen_lib import GenerationOptions, MetadataParser, digest, digest_metadata
from odata_codegen_lib.errors import ConfigurationError
from odata_codegen_lib.generator import generate_models
from odata_codegen_lib.models import DataTypes
from odata_schema_builder import ODataSchemaBuilder

FIXTURES = os.path.join(os.path.dirname(os.path.abspath(__file__)), "fixtures")


def trippin_models(options=None):
    metadata = MetadataParser().parse_file(os.path.join(FIXTURES, "trippin_v4.xml"))
    return generate_models(digest_metadata(metadata, options), options=options)


def by_name(artifacts, kind):
    return {a.name: a for a in artifacts if a.kind == kind}


class TestModelGenerator(unittest.TestCase):

    @classmethod
    def setUpClass(cls):
        cls.artifacts = trippin_models()
        cls.models = by_name(cls.artifacts, "model")

    def test_artifact_order(self):
        kinds = [a.kind for a in self.artifacts]
        self.assertEqual(kinds[:2], ["enum", "enum"])
        self.assertEqual(kinds[2:10], ["model"] * 8)
        self.assertEqual(kinds[10:13], ["operation_params"] * 3)
        self.assertEqual(kinds[-1], "model_module")

    def test_enum(self):
        gender = by_name(self.artifacts, "enum")["PersonGender"]
        self.assertEqual([(m.name, m.odata_name) for m in gender.members],
                         [("MALE", "Male"), ("FEMALE", "Female"), ("UNKNOWN", "Unknown")])

    def test_read_model(self):
        person = self.models["Person"]
        self.assertEqual(person.keys, ("UserName",))
        self.assertEqual(len(person.fields), 14)
        user_name = person.fields[0]
        self.assertEqual((user_name.name, user_name.odata_name, user_name.type), ("user_name", "UserName", "str"))
        best_friend = next(f for f in person.fields if f.odata_name == "BestFriend")
        self.assertTrue(best_friend.is_navigation)
        self.assertEqual(best_friend.type, "Person")

    def test_editable_model_excludes_navigation(self):
        editable = self.models["Person"].editable
        self.assertEqual(editable.name, "EditablePerson")
        names = [f.odata_name for f in editable.fields]
        self.assertNotIn("BestFriend", names)
        self.assertNotIn("Friends", names)
        self.assertEqual(len(names), 11)

    def test_editable_required_and_complex_types(self):
        fields = {f.odata_name: f for f in self.models["Person"].editable.fields}
        self.assertTrue(fields["UserName"].required)
        self.assertTrue(fields["FirstName"].required)
        self.assertFalse(fields["LastName"].required)
        self.assertEqual(fields["HomeAddress"].type, "EditableLocation")
        self.assertEqual(fields["AddressInfo"].type, "EditableLocation")
        self.assertTrue(fields["AddressInfo"].is_collection)
        self.assertEqual(fields["Gender"].data_type, DataTypes.ENUM)

    def test_flattened_base_props(self):
        employee = self.models["Employee"]
        self.assertEqual(employee.base_class, "Person")
        self.assertEqual([f.odata_name for f in employee.fields], ["Cost", "Peers"])
        self.assertIsNone(employee.editable.base_class)
        self.assertEqual(len(employee.editable.fields), 12)
        self.assertEqual(employee.keys, ("UserName",))

    def test_editable_extends_base(self):
        models = by_name(trippin_models(GenerationOptions(flatten_editable_base_props=False)), "model")
        employee = models["Employee"]
        self.assertEqual(employee.editable.base_class, "EditablePerson")
        self.assertEqual([f.odata_name for f in employee.editable.fields], ["Cost"])

    def test_operation_params(self):
        params = by_name(self.artifacts, "operation_params")
        self.assertEqual(list(params), ["Person", "Trip", "Trippin"])
        person_shapes = {s.name: s for s in params["Person"].shapes}
        self.assertEqual(list(person_shapes), ["PersonGetFriendsTripsParams", "PersonShareTripParams"])
        # the binding parameter is implicit
        self.assertEqual([f.odata_name for f in person_shapes["PersonShareTripParams"].fields], ["userName", "tripId"])
        self.assertEqual(params["Trip"].shapes, ())
        root = params["Trippin"]
        self.assertEqual(root.binding, "/")
        self.assertEqual([s.name for s in root.shapes], ["GetNearestAirportParams"])

    def test_module(self):
        module = self.artifacts[-1]
        self.assertEqual(module.name, "Trippin")
        self.assertEqual(module.symbols[:4], ("PersonGender", "Feature", "Person", "EditablePerson"))
        self.assertEqual(module.primitive_imports, ("GuidString", "DateTimeOffsetString"))
        self.assertEqual(module.imports_module, "odata_codegen_lib.runtime.types")

    def test_model_prefix(self):
        options = GenerationOptions(model_prefix="I", model_suffix="Model")
        models = by_name(trippin_models(options), "model")
        self.assertIn("IPersonModel", models)
        employee = models["IEmployeeModel"]
        self.assertEqual(employee.base_class, "IPersonModel")
        self.assertEqual(employee.editable.name, "EditableIEmployeeModel")

    def test_deterministic(self):
        self.assertEqual([a.model_dump() for a in trippin_models()], [a.model_dump() for a in self.artifacts])


class TestModelGeneratorCollisions(unittest.TestCase):

    def test_model_collides_with_editable_model(self):
        builder = ODataSchemaBuilder("Tester")
        builder.add_complex_type("Person")
        builder.add_complex_type("EditablePerson")
        with self.assertRaises(ConfigurationError):
            generate_models(digest(builder.get_schemas()))

    def test_model_collides_with_params(self):
        builder = ODataSchemaBuilder("Tester")
        builder.add_complex_type("DoItParams")
        builder.add_action("DoIt", fn=lambda o: o.add_param("x", "Edm.String"))
        with self.assertRaises(ConfigurationError):
            generate_models(digest(builder.get_schemas()))


if __name__ == '__main__':
    unittest.main()
