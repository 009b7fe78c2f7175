"""
Matching engine behavioral tests.

Scope
- Value consumption (arity, inline values, literal option-like values).
- Action semantics (set, append, count, flags) and positional filling.
- Post-pass checks (required, partial positionals) and MatchError reporting.
- Subcommand routing and help/version short-circuits.
"""
import unittest
from unittest import TestCase

from argshell import (
    Action,
    MatchError,
    MissingRequiredError,
    MissingSubcommandError,
    MissingValueError,
    Scanner,
    UnexpectedArgumentError,
    UnexpectedValueError,
    UnknownArgumentError,
    UnknownSubcommandError,
    compile_schema,
    match,
)


def schema(*args, **metadata):
    return compile_schema({"name": "tool", "executable": "/bin/true"} | metadata | {"args": list(args)})


EXAMPLE = schema(
    {"arg1": {"long": "arg1", "value_name": "ARG1", "arg_action": "append", "number_of_values": 2}},
    {"arg2": {"long": "arg2", "arg_action": "append"}},
    {"arg3": {"required": True}},
)


class TestValues(TestCase):
    """Value consumption per occurrence."""

    def testAppendAccumulatesInOrder(self):
        state = match(EXAMPLE, "--arg1 a b --arg2 c --arg1 d e positional-val")
        self.assertEqual(state.values, {"arg1": ["a", "b", "d", "e"], "arg2": ["c"], "arg3": ["positional-val"]})

    def testShortfallIsReported(self):
        with self.assertRaises(MissingValueError) as context:
            match(EXAMPLE, ["--arg1", "a"])
        self.assertEqual(context.exception.key, "arg1")
        self.assertEqual(context.exception.shortfall, 1)
        self.assertEqual(context.exception.index, 1)

    def testOptionLikeValuesAreLiteral(self):
        state = match(EXAMPLE, ["--arg2", "--arg1", "x"])
        self.assertEqual(state.values["arg2"], ["--arg1"])
        self.assertNotIn("arg1", state.seen)

    def testTerminatorCanBeAValue(self):
        state = match(EXAMPLE, ["--arg2", "--", "x"])
        self.assertEqual(state.values["arg2"], ["--"])
        self.assertFalse(state.terminated)

    def testInlineValueEndsMultiValueOption(self):
        with self.assertRaises(MissingValueError) as context:
            match(EXAMPLE, ["--arg1=a", "b", "x"])
        self.assertEqual((context.exception.key, context.exception.shortfall), ("arg1", 1))
        self.assertEqual(context.exception.token, "--arg1=a")

    def testInlineValueIsSoleValue(self):
        state = match(EXAMPLE, ["--arg2=c", "x"])
        self.assertEqual(state.values, {"arg2": ["c"], "arg3": ["x"]})

    def testInlineValueOnSwitchIsRejected(self):
        tool = schema({"dry": {"long": "dry", "arg_action": "set_true"}})
        with self.assertRaises(UnexpectedValueError) as context:
            match(tool, ["--dry=yes"])
        self.assertEqual(context.exception.key, "dry")

    def testShortSpellingConsumesValues(self):
        tool = schema({"name": {"long": "name", "short": "n"}})
        self.assertEqual(match(tool, ["-n", "x"]).values["name"], ["x"])

    def testSetKeepsLastOccurrence(self):
        tool = schema({"name": {"long": "name"}})
        self.assertEqual(match(tool, "--name a --name b").values["name"], ["b"])

    def testCountCountsOccurrences(self):
        tool = schema({"verbose": {"short": "v", "arg_action": "count"}})
        self.assertEqual(match(tool, "-v -v -v").counts["verbose"], 3)

    def testFlagsAreIdempotent(self):
        tool = schema({"dry": {"long": "dry", "arg_action": "set_true"}})
        self.assertEqual(match(tool, "--dry --dry").seen, {"dry"})


class TestPositionals(TestCase):
    """Positional filling, terminator and surplus handling."""

    def testTerminatorTurnsSwitchesIntoPositionals(self):
        state = match(EXAMPLE, ["--", "--arg2"])
        self.assertEqual(state.values, {"arg3": ["--arg2"]})
        self.assertTrue(state.terminated)

    def testUnboundedPositionalCollectsRest(self):
        tool = schema({"files": {"number_of_values": "*"}}, {"all": {"long": "all", "arg_action": "set_true"}})
        state = match(tool, ["a", "--all", "b", "--", "--all"])
        self.assertEqual(state.values["files"], ["a", "b", "--all"])

    def testMultiValuePositionalsFillInOrder(self):
        tool = schema({"pair": {"number_of_values": 2}}, {"last": {}})
        state = match(tool, "a b c")
        self.assertEqual(state.values, {"pair": ["a", "b"], "last": ["c"]})

    def testPartialPositionalIsReported(self):
        tool = schema({"pair": {"number_of_values": 2}})
        with self.assertRaises(MissingValueError) as context:
            match(tool, ["a"])
        self.assertEqual((context.exception.key, context.exception.shortfall), ("pair", 1))

    def testSurplusPositionalIsRejected(self):
        with self.assertRaises(UnexpectedArgumentError) as context:
            match(EXAMPLE, ["a", "b"])
        self.assertEqual((context.exception.token, context.exception.index), ("b", 2))

    def testClusteredShortsAreNotOptions(self):
        self.assertEqual(match(EXAMPLE, ["-abc"]).values["arg3"], ["-abc"])


class TestChecks(TestCase):
    """Unknown spellings and required arguments."""

    def testMissingRequiredIsReported(self):
        with self.assertRaises(MissingRequiredError) as context:
            match(EXAMPLE, "--arg2 c")
        self.assertEqual(context.exception.key, "arg3")

    def testUnknownOptionSuggestsCloseSpelling(self):
        with self.assertRaises(UnknownArgumentError) as context:
            match(EXAMPLE, "--arg4 x")
        self.assertIn("--arg1", context.exception.suggestions)
        self.assertEqual(context.exception.index, 1)

    def testMatchErrorsExitWithUsageStatus(self):
        with self.assertRaises(MatchError) as context:
            match(EXAMPLE, [])
        self.assertEqual(context.exception.exitcode, 2)

    def testHelpStopsMatching(self):
        state = match(EXAMPLE, ["--help", "--bogus"])
        self.assertIs(state.request, Action.HELP)
        self.assertEqual(state.position, 1)

    def testVersionSkipsRequiredCheck(self):
        tool = schema({"target": {"required": True}}, version="1.0")
        self.assertIs(match(tool, ["-V"]).request, Action.VERSION)

    def testSyntheticArgvAlwaysMatches(self):
        for argv in (
                ["x"],
                ["--arg1", "a", "b", "x"],
                ["x", "--arg2", "c", "--arg2", "d"],
                ["--arg2=c", "--arg1", "a", "b", "--", "x"],
        ):
            with self.subTest(argv=argv):
                self.assertIn("arg3", match(EXAMPLE, Scanner(argv)).seen)

    def testNonIterableIsRejected(self):
        with self.assertRaises(TypeError):
            match(EXAMPLE, 42)


class TestSubcommands(TestCase):
    """Routing into children."""

    def setUp(self):
        self.schema = compile_schema({
            "name": "deploy",
            "args": [{"verbose": {"short": "v", "arg_action": "count"}}],
            "subcommands": {
                "push": {
                    "executable": "/bin/push",
                    "args": [{"force": {"long": "force", "arg_action": "set_true"}}, {"target": {"required": True}}],
                },
                "pull": {"executable": "/bin/pull"},
            },
        })

    def testLeafStateKeepsParent(self):
        state = match(self.schema, "-v push --force prod")
        self.assertEqual(state.schema.name, "push")
        self.assertEqual(state.values, {"target": ["prod"]})
        self.assertEqual(state.parent.counts, {"verbose": 1})

    def testParentSwitchesAreUnknownInChild(self):
        with self.assertRaises(UnknownArgumentError):
            match(self.schema, "push -v prod")

    def testMissingSubcommandIsReported(self):
        with self.assertRaises(MissingSubcommandError):
            match(self.schema, "-v")

    def testUnknownSubcommandSuggestsCloseName(self):
        with self.assertRaises(UnknownSubcommandError) as context:
            match(self.schema, "pus")
        self.assertEqual(context.exception.suggestions[0], "push")

    def testChildRequirementsAreChecked(self):
        with self.assertRaises(MissingRequiredError):
            match(self.schema, "push --force")

    def testChildHelpIsRequested(self):
        state = match(self.schema, "pull --help")
        self.assertEqual((state.schema.name, state.request), ("pull", Action.HELP))


if __name__ == "__main__":
    unittest.main()
