"""Tests for the text-scan metrics collector."""

import pytest

from code_hints.complexity_analysis import ComplexityClassifier, TextScanMetricsCollector
from code_hints.locator import CodeLocator, build_unit
from code_hints.models import AnalysisMode, CodeUnit, TimeClass


@pytest.fixture
def collector():
    return TextScanMetricsCollector()


class TestLoops:
    def test_single_kotlin_loop(self, collector):
        code = """fun total(items: List<Int>): Int {
    var sum = 0
    for (item in items) {
        sum += item
    }
    return sum
}"""
        metrics = collector.collect_text(code, "total")

        assert metrics.mode is AnalysisMode.TEXT
        assert metrics.loop_count == 1
        assert metrics.max_nested_depth == 1
        assert not metrics.has_logarithmic_pattern

    def test_nested_loops_track_depth(self, collector):
        code = """fun pairs(items: List<Int>): Int {
    var count = 0
    for (a in items) {
        for (b in items) {
            count++
        }
    }
    return count
}"""
        metrics = collector.collect_text(code, "pairs")

        assert metrics.loop_count == 2
        assert metrics.max_nested_depth == 2

    def test_sequential_loops_do_not_nest(self, collector):
        code = """func both(xs []int) {
    for _, x := range xs {
        use(x)
    }
    for _, x := range xs {
        use(x)
    }
}"""
        metrics = collector.collect_text(code, "both")

        assert metrics.loop_count == 2
        assert metrics.max_nested_depth == 1

    def test_ruby_end_closes_a_loop(self, collector):
        code = """def total(items)
  sum = 0
  items.each do |item|
    sum += item
  end
  sum
end"""
        metrics = collector.collect_text(code, "total")

        assert metrics.loop_count == 1
        assert metrics.max_nested_depth == 1

    def test_comment_lines_are_ignored(self, collector):
        code = """fun noop() {
    // for (x in xs) { sort(x) }
    # while true
    /* permutations */
    return
}"""
        metrics = collector.collect_text(code, "noop")

        assert metrics.loop_count == 0
        assert not metrics.has_sorting_pattern
        assert not metrics.has_factorial_pattern


class TestRecursion:
    def test_declaration_line_is_not_a_call(self, collector):
        code = """fun countdown(n: Int) {
    if (n > 0) countdown(n - 1)
}"""
        metrics = collector.collect_text(code, "countdown")

        assert metrics.recursive_calls == 1
        assert metrics.double_recursive_calls == 0

    def test_two_calls_on_one_line_are_double_recursion(self, collector):
        code = """fun fib(n: Int): Int {
    if (n <= 1) return n
    return fib(n - 1) + fib(n - 2)
}"""
        metrics = collector.collect_text(code, "fib")

        assert metrics.recursive_calls == 1
        assert metrics.double_recursive_calls == 1

    def test_no_declared_name_means_no_recursion(self, collector):
        metrics = collector.collect_text("return fib(n - 1) + fib(n - 2)")
        assert metrics.recursive_calls == 0

    def test_name_prefix_is_not_a_call(self, collector):
        code = """fun sum(xs: List<Int>): Int {
    return checksum(xs)
}"""
        assert collector.collect_text(code, "sum").recursive_calls == 0

    def test_typescript_arrow_function_double_recursion(self, collector):
        unit = build_unit("const fib = (n: number): number => n < 2 ? n : fib(n - 1) + fib(n - 2);", "typescript")
        metrics = collector.collect(unit)

        assert unit.declared_name == "fib"
        assert metrics.recursive_calls == 1
        assert metrics.double_recursive_calls == 1
        assert ComplexityClassifier().classify(metrics).time_class is TimeClass.EXPONENTIAL

    def test_located_arrow_function_with_block_body(self, collector):
        source = """export const fib = (n: number): number => {
  if (n < 2) return n;
  return fib(n - 1) + fib(n - 2);
};
"""
        unit = CodeLocator().locate(source, "typescript", line=3)
        metrics = collector.collect(unit)

        assert unit.declared_name == "fib"
        assert metrics.recursive_calls == 1
        assert metrics.double_recursive_calls == 1

    def test_typed_c_header_is_the_declaration(self, collector):
        code = """int fib(int n) {
    if (n < 2) return n;
    return fib(n - 1) + fib(n - 2);
}"""
        metrics = collector.collect_text(code, "fib")

        assert metrics.recursive_calls == 1
        assert metrics.double_recursive_calls == 1


class TestPatterns:
    def test_sorting_keyword(self, collector):
        code = """fun names(people: List<Person>): List<String> {
    return people.map { it.name }.sorted()
}"""
        assert collector.collect_text(code, "names").has_sorting_pattern

    def test_sorting_keyword_must_be_a_whole_word(self, collector):
        code = """fun sortedNames(names: List<String>): List<String> {
    return names
}"""
        assert not collector.collect_text(code, "sortedNames").has_sorting_pattern

    def test_permutation_keyword(self, collector):
        code = """fun arrangements(items: List<Int>) {
    return permutations(items)
}"""
        assert collector.collect_text(code, "arrangements").has_factorial_pattern

    @pytest.mark.parametrize(
        "line",
        [
            "x = x / 2",
            "hi = (lo + hi) / 2",
            "step *= 2",
            "n >>= 1",
            "val depth = log2(size)",
            "val depth = Math.log(size)",
            "val mid = lo + hi >> 1",
        ],
    )
    def test_logarithmic_signals(self, collector, line):
        assert collector.collect_text(line).has_logarithmic_pattern

    @pytest.mark.parametrize(
        "line",
        [
            "if (n <= 2) return n",
            "if (a == b * 2) return",
            "console.log(items.length);",
            "total += price * 3",
        ],
    )
    def test_non_logarithmic_lines(self, collector, line):
        assert not collector.collect_text(line).has_logarithmic_pattern

    def test_allocations_and_streams_stay_at_zero(self, collector):
        code = """fun build(xs: List<Int>) {
    val out = ArrayList<Int>()
    xs.stream().map { it * 3 }
}"""
        metrics = collector.collect_text(code, "build")

        assert metrics.new_collections == 0
        assert metrics.stream_ops == 0
        assert not metrics.has_binary_search_pattern


class TestCollect:
    def test_collect_uses_unit_text_and_name(self, collector):
        unit = CodeUnit(
            id="kotlin:fib",
            language="kotlin",
            source_text="fun fib(n: Int): Int =\n    if (n < 2) n else fib(n - 1) + fib(n - 2)",
            declared_name="fib",
        )
        metrics = collector.collect(unit)

        assert metrics.recursive_calls == 1
        assert metrics.double_recursive_calls == 1

    def test_collect_is_idempotent(self, collector):
        code = "fun f(xs: List<Int>) {\n    for (x in xs) {\n        g(x)\n    }\n}"
        assert collector.collect_text(code, "f") == collector.collect_text(code, "f")
