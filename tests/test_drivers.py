import pytest

from engine.drivers import cpp, csharp, java, python
from engine.drivers.generator import DriverMode, generate_driver, helper_sources
from engine.drivers.types import coerce, normalize_type
from engine.errors import InvalidTestCase, UnsupportedLanguage, UnsupportedType
from schemas.code import Language
from schemas.problem import ProblemSpec, TestCase


@pytest.mark.parametrize(
    "name, expected",
    [
        ("int", "int"),
        ("String", "string"),
        ("bool", "boolean"),
        ("List<Integer>", "int[]"),
        ("vector<vector<int>>", "int[][]"),
        ("listnode", "ListNode"),
        (" int [ ] ", "int[]"),
    ],
)
def test_normalize_type_aliases(name, expected):
    assert normalize_type(name) == expected


def test_unknown_type_is_rejected():
    with pytest.raises(UnsupportedType):
        normalize_type("Map<String,Integer>")


def test_coerce_null_sentinels():
    assert coerce("int", None) == 0
    assert coerce("double", None) == 0.0
    assert coerce("boolean", None) is False
    assert coerce("string", None) == ""
    assert coerce("int[]", None) == []
    assert coerce("ListNode", None) == []
    assert coerce("TreeNode", None) == []


def test_coerce_reads_json_text():
    assert coerce("int[]", "[1, 2, 3]") == [1, 2, 3]
    assert coerce("int", " 42 ") == 42
    assert coerce("boolean", "true") is True
    assert coerce("string", "[1]") == "[1]"
    assert coerce("TreeNode", "[1,null,2]") == [1, None, 2]


@pytest.mark.parametrize(
    "type_name, value",
    [("int[]", "not json"), ("int", "abc"), ("int[]", [1, "x"]), ("TreeNode", [1, {}]), ("int[][]", [["a"]])],
)
def test_coerce_rejects_unreadable_values(type_name, value):
    with pytest.raises(InvalidTestCase) as exc:
        coerce(type_name, value)
    assert exc.value.kind == "input"


def test_python_literals():
    assert python.literal("int[]", [1, 2]) == "[1, 2]"
    assert python.literal("string", 'say "hi"') == "'say \"hi\"'"
    assert python.literal("boolean", None) == "False"
    assert python.literal("ListNode", None) == "None"
    assert python.literal("TreeNode", [1, None, 2]) == "build_tree_node([1, None, 2])"
    assert python.literal("double", float("inf")) == 'float("inf")'


def test_java_literals():
    assert java.literal("int[]", [1, 2]) == "new int[]{1, 2}"
    assert java.literal("long", 5) == "5L"
    assert java.literal("string[]", ["a", "b"]) == 'new String[]{"a", "b"}'
    assert java.literal("int[][]", [[1], [2, 3]]) == "new int[][]{{1}, {2, 3}}"
    assert java.literal("TreeNode", None) == "null"
    assert java.literal("string", "line\nbreak") == '"line\\nbreak"'


def test_cpp_literals():
    assert cpp.literal("int[]", [1, 2]) == "vector<int>{1, 2}"
    assert cpp.literal("long", -(2**63)) == "(-9223372036854775807LL - 1)"
    assert cpp.literal("string", "a\"b") == 'string("a\\042b", 3)'
    assert cpp.literal("ListNode", []) == "nullptr"


def test_csharp_literals_and_names():
    assert csharp.literal("int[]", [1, 2]) == "new int[] {1, 2}"
    assert csharp.literal("ListNode", [1]) == "Judge.BuildListNode(new int[] {1})"
    assert csharp.method_name("twoSum") == "TwoSum"
    assert csharp.pascal("int_array") == "IntArray"


def test_missing_parameters_keep_call_arity(two_sum):
    case = TestCase(input={"nums": [1, 2]})
    driver = generate_driver(Language.PYTHON, two_sum, [case])
    assert "Solution().twoSum([1, 2], 0)" in driver


def test_positional_inputs(two_sum):
    case = TestCase(input=[[5, 6], 11])
    driver = generate_driver(Language.JAVA, two_sum, [case])
    assert "int[] p0 = new int[]{5, 6};" in driver
    assert "int p1 = 11;" in driver


@pytest.mark.parametrize("language", list(Language))
def test_solution_driver_prints_one_block_per_case(language, two_sum):
    driver = generate_driver(language, two_sum, two_sum.test_cases)
    assert driver.count('"---"') == len(two_sum.test_cases)


def test_csharp_driver_uses_pascal_case_method(two_sum):
    driver = generate_driver(Language.CSHARP, two_sum, two_sum.test_cases)
    assert "solution.TwoSum(p0, p1)" in driver
    assert "Judge.ShowIntArray(" in driver


def test_cpp_driver_includes_solution(two_sum):
    driver = generate_driver(Language.CPP, two_sum, two_sum.test_cases[:1])
    assert driver.startswith('#include "Solution.cpp"')
    assert "show_int_array(solution.twoSum(p0, p1))" in driver


def test_judged_driver_compares_canonical_forms(two_sum):
    driver = generate_driver(Language.JAVA, two_sum, two_sum.test_cases[:2], DriverMode.JUDGED, ["[0,1]", "oops"])
    assert "Marker marker = new Marker();" in driver
    assert 'expected = int_array_of(parse("[0,1]"));' in driver
    assert 'expected = int_array_of(parse("oops"));' in driver
    assert "boolean correct = parsed && actual.equals(show_int_array(expected));" in driver
    assert driver.count("System.out.println(correct);") == 2


def test_judged_driver_with_custom_checker(two_sum):
    problem = two_sum.model_copy(update={"custom_checker": True})
    driver = generate_driver(Language.JAVA, problem, problem.test_cases[:1], DriverMode.JUDGED, ["[1,0]"])
    assert "marker.isCorrect(c0, c1, expected)" in driver
    assert "actual.equals" not in driver


def test_judged_driver_needs_one_expected_per_case(two_sum):
    with pytest.raises(InvalidTestCase):
        generate_driver(Language.JAVA, two_sum, two_sum.test_cases, DriverMode.JUDGED, ["[0,1]"])


def test_judged_driver_only_exists_for_the_jvm(two_sum):
    with pytest.raises(UnsupportedLanguage):
        generate_driver(Language.PYTHON, two_sum, two_sum.test_cases[:1], DriverMode.JUDGED, ["[0,1]"])


def test_unsupported_output_type_fails_before_generation():
    problem = ProblemSpec(functionName="f", params=[], outputType="Map<int,int>")
    with pytest.raises(UnsupportedType):
        generate_driver(Language.PYTHON, problem, [TestCase()])


def test_helper_sources_are_copies():
    files = helper_sources(Language.JAVA)
    files["ListNode.java"] = "broken"
    assert helper_sources(Language.JAVA)["ListNode.java"] != "broken"
    assert set(helper_sources(Language.CPP)) == {"ListNode.cpp", "TreeNode.cpp"}
