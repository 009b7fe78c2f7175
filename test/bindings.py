"""
Binding formatter tests: ParseState → environment mapping.
"""
import unittest
from unittest import TestCase

from argshell import FALSE, TRUE, compile_schema, format_bindings, match


def bindings(document, argv):
    return format_bindings(match(compile_schema({"name": "tool", "executable": "/bin/true"} | document), argv))


class TestFormatBindings(TestCase):

    def testValuesAreJoinedWithSeparator(self):
        result = bindings({"args": [
            {"arg1": {"long": "arg1", "arg_action": "append", "number_of_values": 2}},
            {"arg2": {"long": "arg2", "arg_action": "append"}},
            {"arg3": {"required": True}},
        ]}, "--arg1 a b --arg2 c --arg1 d e positional-val")
        self.assertEqual(dict(result), {"ARG1": "a,b,d,e", "ARG2": "c", "ARG3": "positional-val"})

    def testCustomSeparator(self):
        result = bindings({"separator": " ", "args": [{"files": {"number_of_values": "*"}}]}, "a b c")
        self.assertEqual(result["FILES"], "a b c")

    def testSeparatorInsideValuesIsNotEscaped(self):
        result = bindings({"args": [{"tag": {"long": "tag", "arg_action": "append"}}]}, ["--tag", "a,b", "--tag", "c"])
        self.assertEqual(result["TAG"], "a,b,c")

    def testFlagsBindLiterals(self):
        result = bindings({"args": [
            {"dry": {"long": "dry", "arg_action": "set_true"}},
            {"cache": {"long": "no-cache", "arg_action": "set_false"}},
        ]}, "--dry --no-cache")
        self.assertEqual(dict(result), {"DRY": TRUE, "CACHE": FALSE})

    def testCountBindsDecimal(self):
        result = bindings({"args": [{"verbose": {"short": "v", "arg_action": "count"}}]}, "-v -v -v")
        self.assertEqual(result["VERBOSE"], "3")

    def testUnsuppliedArgumentsAreOmitted(self):
        result = bindings({"args": [
            {"tag": {"long": "tag", "arg_action": "append"}},
            {"dry": {"long": "dry", "arg_action": "set_true"}},
            {"verbose": {"short": "v", "arg_action": "count"}},
        ]}, [])
        self.assertEqual(dict(result), {})

    def testDefaultsAreBoundWhenUnsupplied(self):
        result = bindings({"args": [{"level": {"long": "level", "default": ["info", "warn"]}}]}, [])
        self.assertEqual(result["LEVEL"], "info,warn")

    def testSuppliedValueOverridesDefault(self):
        result = bindings({"args": [{"level": {"long": "level", "default": "info"}}]}, "--level debug")
        self.assertEqual(result["LEVEL"], "debug")

    def testExplicitEnvVarIsUsed(self):
        result = bindings({"args": [{"out-dir": {"long": "out", "env_var": "TARGET"}}]}, "--out /tmp")
        self.assertEqual(dict(result), {"TARGET": "/tmp"})

    def testKeysAreTransliterated(self):
        result = bindings({"args": [{"out-dir": {"long": "out"}}]}, "--out /tmp")
        self.assertEqual(dict(result), {"OUT_DIR": "/tmp"})

    def testOnlyLeafArgumentsAreBound(self):
        result = bindings({
            "args": [{"verbose": {"short": "v", "arg_action": "count"}}],
            "subcommands": {"push": {"executable": "/bin/push", "args": [{"target": {}}]}},
        }, "-v push prod")
        self.assertEqual(dict(result), {"TARGET": "prod"})

    def testBindingsAreReadOnly(self):
        result = bindings({"args": [{"name": {}}]}, "x")
        with self.assertRaises(TypeError):
            result["NAME"] = "y"


if __name__ == "__main__":
    unittest.main()
