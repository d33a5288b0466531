import random
import unittest

from arith.core.lexical import FalseTerm, IfThenElse, IsZero, Pred, Succ, TrueTerm, Zero, parse
from arith.core.reduction import SmallStepReducer, evaluate
from arith.lang.error import ArithSyntaxError, StuckTerm


def random_term(rng, depth):
    """Random well-formed term, mostly well-typed so that reduction gets somewhere."""
    if depth == 0:
        return rng.choice([TrueTerm, FalseTerm, Zero])()

    choice = rng.randrange(7)
    if choice == 0:
        return rng.choice([TrueTerm, FalseTerm, Zero])()
    elif choice <= 2:
        return IfThenElse(random_term(rng, depth - 1), random_term(rng, depth - 1), random_term(rng, depth - 1))
    return rng.choice([Succ, Pred, IsZero])(random_term(rng, depth - 1))


class StepTestCase(unittest.TestCase):

    def test_rules(self):
        cases = {
            "if true then succ 0 else 0": ("succ 0", "E-IfTrue"),
            "if false then succ 0 else 0": ("0", "E-IfFalse"),
            "if iszero 0 then 0 else true": ("if true then 0 else true", "E-If"),
            "succ pred 0": ("succ 0", "E-Succ"),
            "pred 0": ("0", "E-PredZero"),
            "pred succ succ 0": ("succ 0", "E-PredSucc"),
            "pred pred 0": ("pred 0", "E-Pred"),
            "iszero 0": ("true", "E-IsZeroZero"),
            "iszero succ 0": ("false", "E-IsZeroSucc"),
            "iszero pred succ 0": ("iszero 0", "E-IsZero"),
        }
        for case, (expected, rule) in cases.items():
            self.assertEqual((parse(expected), rule), parse(case).step(), case)

    def test_values_do_not_step(self):
        for case in ["true", "false", "0", "succ 0", "succ succ succ 0"]:
            self.assertIsNone(parse(case).step(), case)

    def test_stuck_terms_do_not_step(self):
        for case in ["succ true", "pred false", "iszero true", "if 0 then 0 else 0", "pred succ false",
                     "iszero succ true", "if succ 0 then true else false", "succ succ iszero false"]:
            self.assertIsNone(parse(case).step(), case)

    def test_branches_wait_for_condition(self):
        term = parse("if iszero 0 then pred 0 else pred 0")
        reduced, rule = term.step()
        self.assertEqual("E-If", rule)
        self.assertEqual(parse("pred 0"), reduced.get([1]))
        self.assertEqual(parse("pred 0"), reduced.get([2]))

    def test_step_builds_new_terms(self):
        term = parse("succ pred 0")
        reduced, __ = term.step()
        self.assertEqual("succ pred 0", term.expr)
        self.assertEqual(Pred(Zero()), term.get([0]))
        self.assertIsNot(term, reduced)


class SmallStepReducerTestCase(unittest.TestCase):

    def test_reduce(self):
        cases = {
            "true": "true",
            "iszero 0": "true",
            "if iszero 0 then 0 else succ 0": "0",
            "pred succ succ 0": "succ 0",
            "succ pred succ pred 0": "succ 0",
            "if false then true else iszero pred succ 0": "true",
            "if if true then false else true then 0 else succ succ 0": "succ succ 0",
            "iszero if iszero succ 0 then 0 else succ pred 0": "false",
            "succ (if (iszero (pred (succ 0))) then (succ 0) else 0)": "succ succ 0",
        }
        for case, expected in cases.items():
            self.assertEqual(parse(expected), SmallStepReducer(case).reduce(), case)

    def test_steps(self):
        reducer = SmallStepReducer("if iszero 0 then 0 else succ 0")
        self.assertFalse(reducer.reduced)
        self.assertEqual(Zero(), reducer.reduce())
        self.assertTrue(reducer.reduced)
        self.assertEqual([("E-If", "if true then 0 else succ 0"), ("E-IfTrue", "0")], reducer.steps)

        reducer = SmallStepReducer("pred succ succ 0")
        reducer.reduce()
        self.assertEqual([("E-PredSucc", "succ 0")], reducer.steps)

    def test_register_step(self):
        class Recorder:
            def __init__(self):
                self.steps = []

            def register_step(self, rule, expr):
                self.steps.append((rule, expr))

        recorder = Recorder()
        reducer = SmallStepReducer("iszero pred succ 0")
        reducer.reduce(recorder)
        self.assertEqual(reducer.steps, recorder.steps)
        self.assertEqual([("E-IsZero", "iszero 0"), ("E-IsZeroZero", "true")], recorder.steps)

    def test_stuck(self):
        cases = {
            "succ true": ("succ true", "succ true"),
            "if 0 then true else false": ("if 0 then true else false", "if 0 then true else false"),
            "pred true": ("pred true", "pred true"),
            "iszero false": ("iszero false", "iszero false"),
            "succ pred true": ("succ pred true", "pred true"),
            "if iszero succ pred true then 0 else 0": ("if iszero succ pred true then 0 else 0", "pred true"),
            "succ if true then false else 0": ("succ false", "succ false"),
            "pred if iszero 0 then succ true else 0": ("pred succ true", "succ true"),
        }
        for case, (term, subterm) in cases.items():
            with self.assertRaises(StuckTerm, msg=case) as context:
                evaluate(case)
            self.assertEqual(parse(term), context.exception.term, case)
            self.assertEqual(parse(subterm), context.exception.subterm, case)

    def test_stuck_message(self):
        with self.assertRaises(StuckTerm) as context:
            SmallStepReducer("(succ true)").reduce()
        self.assertEqual(Succ(TrueTerm()), context.exception.term)
        self.assertEqual("'(succ true)' is stuck: no reduction rule applies to 'succ true'", str(context.exception))
        self.assertFalse(context.exception.diagnosis)

    def test_accepts_terms(self):
        term = IfThenElse(IsZero(Zero()), FalseTerm(), TrueTerm())
        self.assertEqual(FalseTerm(), evaluate(term))
        self.assertEqual(term, SmallStepReducer(term).tree)
        self.assertEqual(term.expr, SmallStepReducer(term).original_expr)

    def test_syntax_errors_pass_through(self):
        self.assertRaises(ArithSyntaxError, evaluate, "if true then")
        self.assertRaises(ArithSyntaxError, SmallStepReducer, "succ succ 0", None, 2)

    def test_deep_terms(self):
        deep = "succ " * 200 + "pred " * 50 + "0"
        self.assertEqual(parse("succ " * 200 + "0"), evaluate(deep))

        countdown = "pred " * 100 + "succ " * 150 + "0"
        self.assertEqual(parse("succ " * 50 + "0"), evaluate(countdown))


class PropertiesTestCase(unittest.TestCase):

    def setUp(self):
        self.rng = random.Random(3)

    def test_values_are_fixed_points(self):
        for case in ["true", "false", "0", "succ 0", "succ succ 0", "succ succ succ succ 0"]:
            reducer = SmallStepReducer(case)
            self.assertEqual(parse(case), reducer.reduce(), case)
            self.assertEqual([], reducer.steps, case)

    def test_terminates_deterministically(self):
        for __ in range(300):
            term = random_term(self.rng, self.rng.randrange(1, 7))
            outcomes = []
            for __ in range(2):
                try:
                    outcomes.append(evaluate(term))
                except StuckTerm as error:
                    self.assertFalse(error.term.is_value, term)
                    self.assertIsNone(error.term.step(), term)
                    outcomes.append(error.term)
            self.assertEqual(outcomes[0], outcomes[1], term)

    def test_results_are_values(self):
        for __ in range(300):
            term = random_term(self.rng, self.rng.randrange(1, 7))
            try:
                value = evaluate(term)
            except StuckTerm:
                continue
            self.assertTrue(value.is_value, term)
            self.assertEqual(value, evaluate(value), term)
            self.assertEqual(value, evaluate(parse(term.expr)), term)


if __name__ == '__main__':
    unittest.main()
