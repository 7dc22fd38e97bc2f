import io
import unittest

from hezarfen.core.callable import HezarfenFunction, NativeFunction
from hezarfen.core.interpreter import Interpreter
from hezarfen.core.parser import Parser
from hezarfen.core.scanner import Scanner
from hezarfen.lang.error import ErrorHandler


def run(source, interpreter=None):
    """Runs source and returns (printed lines, diagnostics, error_handler)."""
    out, diagnostics = io.StringIO(), io.StringIO()
    error_handler = ErrorHandler(fatal=False, out=diagnostics)
    if interpreter is None:
        interpreter = Interpreter(error_handler, out)
    else:
        interpreter.error_handler, interpreter.out = error_handler, out

    statements = Parser(Scanner(source, error_handler).scan_tokens(), error_handler).parse()
    assert not error_handler.had_error, diagnostics.getvalue()
    interpreter.interpret(statements)

    return out.getvalue().splitlines(), diagnostics.getvalue(), error_handler


class ExpressionTestCase(unittest.TestCase):

    def test_arithmetic(self):
        should_pass = {
            "1 + 2 * 3": "7",
            "(1 + 2) * 3": "9",
            "10 - 4 - 3": "3",
            "7 / 2": "3.5",
            "-(3)": "-3",
            "--3": "3",
            "0.1 + 0.2": "0.30000000000000004",
            "1 / 0": "Infinity",
            "-1 / 0": "-Infinity",
            "0 / 0": "NaN",
        }
        for case, expected in should_pass.items():
            self.assertEqual([expected], run(f"print {case};")[0], case)

    def test_comparison_and_equality(self):
        should_pass = {
            "1 < 2": "true",
            "2 <= 2": "true",
            "3 > 4": "false",
            "3 >= 4": "false",
            "1 == 1": "true",
            "\"a\" == \"a\"": "true",
            "\"a\" != \"b\"": "true",
            "nil == nil": "true",
            "nil == false": "false",
            "false == nil": "false",
            "0 == false": "false",
            "1 == true": "false",
            "\"1\" == 1": "false",
            "clock == clock": "true",
            "!nil": "true",
            "!0": "false",
            "!\"\"": "false",
            "0 / 0 == 0 / 0": "true",
            "0 / 0 != 0 / 0": "false",
            "0 / 0 == 1": "false",
            "0 == -0": "false",
            "-0 == -0": "true",
            "1 / 0 == 1 / 0": "true",
        }
        for case, expected in should_pass.items():
            self.assertEqual([expected], run(f"print {case};")[0], case)

    def test_string_concatenation(self):
        should_pass = {
            "\"foo\" + \"bar\"": "foobar",
            "1 + \"a\"": "1a",
            "\"a\" + 1.5": "a1.5",
            "\"n=\" + 2 * 3": "n=6",
        }
        for case, expected in should_pass.items():
            self.assertEqual([expected], run(f"print {case};")[0], case)

    def test_logical(self):
        should_pass = {
            "nil or \"yes\"": "yes",
            "1 or 2": "1",
            "false or false": "false",
            "nil and 1": "nil",
            "false and 1": "false",
            "1 and 2": "2",
            "0 and \"zero is truthy\"": "zero is truthy",
        }
        for case, expected in should_pass.items():
            self.assertEqual([expected], run(f"print {case};")[0], case)

    def test_logical_short_circuit(self):
        source = """
        var calls = 0;
        fun bump() { calls = calls + 1; return true; }
        true or bump();
        false and bump();
        print calls;
        false or bump();
        true and bump();
        print calls;
        """
        self.assertEqual(["0", "2"], run(source)[0])

    def test_ternary(self):
        should_pass = {
            "true ? 1 : 2": "1",
            "nil ? 1 : 2": "2",
            "0 ? \"a\" : \"b\"": "a",
            "false ? 1 : false ? 2 : 3": "3",
        }
        for case, expected in should_pass.items():
            self.assertEqual([expected], run(f"print {case};")[0], case)

    def test_ternary_evaluates_both_branches(self):
        source = """
        var log = "";
        fun mark(s) { log = log + s; return s; }
        print true ? mark("then") : mark("else");
        print log;
        """
        self.assertEqual(["then", "thenelse"], run(source)[0])

    def test_comma_series(self):
        self.assertEqual(["3"], run("var a = 0; print (a = 1, a + 2);")[0])

    def test_stringify(self):
        should_pass = {
            "nil": "nil",
            "true": "true",
            "false": "false",
            "3": "3",
            "3.0": "3",
            "2.5": "2.5",
            "-0.5": "-0.5",
            "-0": "0",
            "100000000 * 100000000": "10000000000000000",
            "123456789012345678": "123456789012345680",
            "1000000000000000000000": "1e+21",
            "\"text\"": "text",
            "clock": "<native fn>",
        }
        for case, expected in should_pass.items():
            self.assertEqual([expected], run(f"print {case};")[0], case)

        self.assertEqual(["<fn f>"], run("fun f() {} print f;")[0])

    def test_clock(self):
        lines, __, __ = run("var t = clock(); print t > 0; print t - t;")
        self.assertEqual(["true", "0"], lines)


class StatementTestCase(unittest.TestCase):

    def test_variables(self):
        self.assertEqual(["nil"], run("var a; print a;")[0])
        self.assertEqual(["2"], run("var a = 1; a = a + 1; print a;")[0])
        self.assertEqual(["3", "3"], run("var a; var b; a = b = 3; print a; print b;")[0])
        self.assertEqual(["2"], run("var a = 1; var a = 2; print a;")[0])

    def test_block_shadowing(self):
        self.assertEqual(["2", "1"], run("var a = 1; { var a = 2; print a; } print a;")[0])

    def test_block_assigns_outer(self):
        self.assertEqual(["2"], run("var a = 1; { a = 2; } print a;")[0])

    def test_block_scope_is_discarded(self):
        lines, diagnostics, error_handler = run("{ var inner = 1; } print inner;")
        self.assertEqual([], lines)
        self.assertTrue(error_handler.had_runtime_error)
        self.assertIn("Undefined variable 'inner'.", diagnostics)

    def test_self_referential_initializer(self):
        lines, diagnostics, error_handler = run("var x = x;")
        self.assertTrue(error_handler.had_runtime_error)
        self.assertIn("Undefined variable 'x'.", diagnostics)

        # with an outer x, the initializer reads it before the inner x exists
        self.assertEqual(["2"], run("var x = 1; { var x = x + 1; print x; }")[0])

    def test_if(self):
        should_pass = {
            "if (true) print 1; else print 2;": ["1"],
            "if (nil) print 1; else print 2;": ["2"],
            "if (0) print 1;": ["1"],
            "if (false) print 1;": [],
            "if (true) if (false) print 1; else print 2;": ["2"],
        }
        for case, expected in should_pass.items():
            self.assertEqual(expected, run(case)[0], case)

    def test_while(self):
        self.assertEqual(["0", "1", "2"], run("var i = 0; while (i < 3) { print i; i = i + 1; }")[0])
        self.assertEqual([], run("while (false) print 1;")[0])

    def test_for(self):
        self.assertEqual(["0", "1", "2"], run("for (var i = 0; i < 3; i = i + 1) print i;")[0])

        # the loop variable lives in the desugared block only
        __, diagnostics, __ = run("for (var i = 0; i < 1; i = i + 1) {} print i;")
        self.assertIn("Undefined variable 'i'.", diagnostics)

        source = """
        var a = 0;
        var temp;
        for (var b = 1; a < 50; b = temp + b) {
          print a;
          temp = a;
          a = b;
        }
        """
        self.assertEqual(["0", "1", "1", "2", "3", "5", "8", "13", "21", "34"], run(source)[0])


class FunctionTestCase(unittest.TestCase):

    def test_call_and_return(self):
        self.assertEqual(["3"], run("fun add(a, b) { return a + b; } print add(1, 2);")[0])
        self.assertEqual(["nil"], run("fun f() {} print f();")[0])
        self.assertEqual(["nil"], run("fun f() { return; } print f();")[0])
        self.assertEqual(["hi"], run("fun f() { print \"hi\"; } f();")[0])

    def test_return_unwinds_blocks_and_loops(self):
        source = """
        fun find(limit) {
          var i = 0;
          while (true) {
            {
              if (i == limit) return i;
            }
            i = i + 1;
          }
          print "unreachable";
        }
        print find(4);
        var after = "scope restored";
        print after;
        """
        lines, diagnostics, error_handler = run(source)
        self.assertEqual(["4", "scope restored"], lines)
        self.assertFalse(error_handler.had_runtime_error)
        self.assertEqual("", diagnostics)

    def test_return_from_for_loop(self):
        source = "fun f() { for (var i = 0; ; i = i + 1) if (i == 2) return i * 10; } print f();"
        self.assertEqual(["20"], run(source)[0])

    def test_recursion(self):
        source = "fun fib(n) { if (n < 2) return n; return fib(n - 2) + fib(n - 1); } print fib(15);"
        self.assertEqual(["610"], run(source)[0])

    def test_closure_counter(self):
        source = """
        fun counter() {
          var i = 0;
          fun inc() { i = i + 1; return i; }
          return inc;
        }
        var c = counter();
        print c();
        print c();
        """
        self.assertEqual(["1", "2"], run(source)[0])

    def test_closures_are_independent(self):
        source = """
        fun counter() { var i = 0; fun inc() { i = i + 1; return i; } return inc; }
        var a = counter();
        var b = counter();
        a(); a();
        print a();
        print b();
        """
        self.assertEqual(["3", "1"], run(source)[0])

    def test_closure_sees_later_assignment(self):
        """Lookups are dynamic: a closure reads the current value of a captured variable."""
        source = """
        var x = "before";
        fun show() { print x; }
        x = "after";
        show();
        """
        self.assertEqual(["after"], run(source)[0])

    def test_call_uses_closure_not_caller(self):
        source = """
        var name = "global";
        fun outer() {
          var name = "outer";
          fun inner() { return name; }
          return inner;
        }
        fun caller(f) { var name = "caller"; return f(); }
        print caller(outer());
        """
        self.assertEqual(["outer"], run(source)[0])

    def test_parameters_are_local(self):
        source = "var a = \"global\"; fun f(a) { a = \"param\"; return a; } print f(1); print a;"
        self.assertEqual(["param", "global"], run(source)[0])

    def test_functions_are_values(self):
        source = """
        fun twice(f, x) { return f(f(x)); }
        fun inc(n) { return n + 1; }
        print twice(inc, 1);
        var g = inc;
        print g(10);
        """
        self.assertEqual(["3", "11"], run(source)[0])

    def test_function_values(self):
        interpreter = Interpreter(ErrorHandler(fatal=False, out=io.StringIO()), io.StringIO())
        run("fun f(a, b) {}", interpreter)

        function = interpreter.globals.values["f"]
        self.assertIsInstance(function, HezarfenFunction)
        self.assertEqual(2, function.arity())
        self.assertIs(interpreter.globals, function.closure)

        clock = interpreter.globals.values["clock"]
        self.assertIsInstance(clock, NativeFunction)
        self.assertEqual(0, clock.arity())

    def test_globals_persist_between_runs(self):
        interpreter = Interpreter(ErrorHandler(fatal=False, out=io.StringIO()), io.StringIO())
        run("var a = 1;", interpreter)
        self.assertEqual(["1"], run("print a;", interpreter)[0])

        # a fresh Interpreter shares nothing
        __, diagnostics, __ = run("print a;")
        self.assertIn("Undefined variable 'a'.", diagnostics)


class RuntimeErrorTestCase(unittest.TestCase):

    def test_errors(self):
        should_fail = {
            "print \"a\" + true;": "Operands must be two numbers or two strings.",
            "print nil + nil;": "Operands must be two numbers or two strings.",
            "print 1 - \"a\";": "Operands must be numbers.",
            "print \"a\" * 2;": "Operands must be numbers.",
            "print true < 1;": "Operands must be numbers.",
            "print -\"a\";": "Operand must be a number.",
            "print undefined;": "Undefined variable 'undefined'.",
            "undefined = 1;": "Undefined variable 'undefined'.",
            "\"not a function\"();": "Can only call functions and classes.",
            "var x = 1; x();": "Can only call functions and classes.",
            "fun f(a) {} f();": "Expected 1 arguments but got 0.",
            "fun f() {} f(1, 2);": "Expected 0 arguments but got 2.",
            "clock(1);": "Expected 0 arguments but got 1.",
        }
        for case, message in should_fail.items():
            lines, diagnostics, error_handler = run(case)
            self.assertTrue(error_handler.had_runtime_error, case)
            self.assertFalse(error_handler.had_error, case)
            self.assertIn(message, diagnostics, case)
            self.assertIn("[line 1]", diagnostics, case)

    def test_error_stops_the_run(self):
        lines, diagnostics, error_handler = run("print 1;\nprint 2 + nil;\nprint 3;")
        self.assertEqual(["1"], lines)
        self.assertIn("[line 2]", diagnostics)
        self.assertEqual(1, diagnostics.count("error: "))

    def test_error_inside_function_restores_environment(self):
        interpreter = Interpreter(ErrorHandler(fatal=False, out=io.StringIO()), io.StringIO())
        __, diagnostics, __ = run("fun f() { var local = 1; { return nil + 1; } } f();", interpreter)
        self.assertIn("Operands must be two numbers or two strings.", diagnostics)
        self.assertIs(interpreter.globals, interpreter.environment)

    def test_deep_recursion(self):
        source = "fun sum(n) { if (n == 0) return 0; return n + sum(n - 1); } print sum(500);"
        lines, diagnostics, error_handler = run(source)
        self.assertEqual(["125250"], lines)
        self.assertFalse(error_handler.had_runtime_error)
        self.assertEqual("", diagnostics)

    def test_stack_overflow(self):
        interpreter = Interpreter(ErrorHandler(fatal=False, out=io.StringIO()), io.StringIO())
        source = "fun forever(n) {\n  return forever(n + 1);\n}\nprint \"before\";\nforever(0);\nprint \"after\";"
        lines, diagnostics, error_handler = run(source, interpreter)

        self.assertEqual(["before"], lines)
        self.assertTrue(error_handler.had_runtime_error)
        self.assertIn("error: Stack overflow.\n[line ", diagnostics)
        self.assertEqual(1, diagnostics.count("error: "))
        self.assertIs(interpreter.globals, interpreter.environment)

        # the interpreter is still usable afterwards
        self.assertEqual(["10"], run("fun ten() { return 10; } print ten();", interpreter)[0])

    def test_arguments_evaluated_before_arity_check(self):
        source = "var n = 0; fun f() {} fun bump() { n = n + 1; return n; } f(bump(), bump());"
        interpreter = Interpreter(ErrorHandler(fatal=False, out=io.StringIO()), io.StringIO())
        __, diagnostics, __ = run(source, interpreter)
        self.assertIn("Expected 0 arguments but got 2.", diagnostics)
        self.assertEqual(["2"], run("print n;", interpreter)[0])


if __name__ == '__main__':
    unittest.main()
