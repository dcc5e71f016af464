import json

from engine.drivers.types import coerce, float_repr, normalize_type, tree_is_empty, SUFFIX
from schemas.problem import ProblemSpec, TestCase

LIST_NODE = '''public class ListNode {
    public int val;
    public ListNode next;

    public ListNode(int val = 0, ListNode next = null) {
        this.val = val;
        this.next = next;
    }
}
'''

TREE_NODE = '''public class TreeNode {
    public int val;
    public TreeNode left;
    public TreeNode right;

    public TreeNode(int val = 0, TreeNode left = null, TreeNode right = null) {
        this.val = val;
        this.left = left;
        this.right = right;
    }
}
'''

# fixed project file; keeps `dotnet build` away from templates and the network
PROJECT_FILE = '''<Project Sdk="Microsoft.NET.Sdk">
  <PropertyGroup>
    <OutputType>Exe</OutputType>
    <TargetFramework>net8.0</TargetFramework>
    <ImplicitUsings>enable</ImplicitUsings>
    <Nullable>disable</Nullable>
    <AssemblyName>App</AssemblyName>
    <RootNamespace>App</RootNamespace>
    <InvariantGlobalization>true</InvariantGlobalization>
  </PropertyGroup>
</Project>
'''

HELPER_FILES = {"ListNode.cs": LIST_NODE, "TreeNode.cs": TREE_NODE}

TYPE_NAMES = {
    "int": "int",
    "long": "long",
    "double": "double",
    "boolean": "bool",
    "string": "string",
    "int[]": "int[]",
    "long[]": "long[]",
    "double[]": "double[]",
    "boolean[]": "bool[]",
    "string[]": "string[]",
    "int[][]": "int[][]",
    "ListNode": "ListNode",
    "TreeNode": "TreeNode",
}

PRELUDE = r'''using System.Globalization;
using System.Text;

public static class Judge {
    public static ListNode BuildListNode(int[] values) {
        var dummy = new ListNode();
        var tail = dummy;
        foreach (var v in values) {
            tail.next = new ListNode(v);
            tail = tail.next;
        }
        return dummy.next;
    }

    public static TreeNode BuildTreeNode(int?[] values) {
        if (values.Length == 0 || values[0] == null) return null;
        var root = new TreeNode(values[0].Value);
        var pending = new Queue<TreeNode>();
        pending.Enqueue(root);
        int i = 1;
        while (pending.Count > 0 && i < values.Length) {
            var node = pending.Dequeue();
            if (values[i] != null) {
                node.left = new TreeNode(values[i].Value);
                pending.Enqueue(node.left);
            }
            i++;
            if (i < values.Length && values[i] != null) {
                node.right = new TreeNode(values[i].Value);
                pending.Enqueue(node.right);
            }
            i++;
        }
        return root;
    }

    public static string ShowInt(long x) => x.ToString(CultureInfo.InvariantCulture);

    public static string ShowLong(long x) => x.ToString(CultureInfo.InvariantCulture);

    public static string ShowDouble(double x) => x.ToString("F5", CultureInfo.InvariantCulture);

    public static string ShowBool(bool x) => x ? "true" : "false";

    public static string ShowString(string s) {
        if (s == null) return "null";
        var sb = new StringBuilder("\"");
        foreach (var c in s) {
            switch (c) {
                case '"': sb.Append("\\\""); break;
                case '\\': sb.Append("\\\\"); break;
                case '\n': sb.Append("\\n"); break;
                case '\r': sb.Append("\\r"); break;
                case '\t': sb.Append("\\t"); break;
                case '\b': sb.Append("\\b"); break;
                case '\f': sb.Append("\\f"); break;
                default:
                    if (c < 0x20) sb.Append("\\u").Append(((int) c).ToString("x4"));
                    else sb.Append(c);
                    break;
            }
        }
        return sb.Append('"').ToString();
    }

    static string ShowSeq<T>(IEnumerable<T> xs, Func<T, string> show) =>
        "[" + string.Join(",", (xs ?? Enumerable.Empty<T>()).Select(show)) + "]";

    public static string ShowIntArray(IEnumerable<int> xs) => ShowSeq(xs, x => ShowInt(x));

    public static string ShowLongArray(IEnumerable<long> xs) => ShowSeq(xs, ShowLong);

    public static string ShowDoubleArray(IEnumerable<double> xs) => ShowSeq(xs, ShowDouble);

    public static string ShowBoolArray(IEnumerable<bool> xs) => ShowSeq(xs, ShowBool);

    public static string ShowStringArray(IEnumerable<string> xs) => ShowSeq(xs, ShowString);

    public static string ShowIntMatrix(IEnumerable<IEnumerable<int>> rows) => ShowSeq(rows, ShowIntArray);

    public static string ShowListNode(ListNode node) {
        var out_ = new List<string>();
        for (; node != null; node = node.next) out_.Add(ShowInt(node.val));
        return "[" + string.Join(",", out_) + "]";
    }

    public static string ShowTreeNode(TreeNode root) {
        var out_ = new List<string>();
        var pending = new Queue<TreeNode>();
        pending.Enqueue(root);
        while (pending.Count > 0) {
            var node = pending.Dequeue();
            if (node == null) {
                out_.Add("null");
                continue;
            }
            out_.Add(ShowInt(node.val));
            pending.Enqueue(node.left);
            pending.Enqueue(node.right);
        }
        int end = out_.Count;
        while (end > 0 && out_[end - 1] == "null") end--;
        return "[" + string.Join(",", out_.Take(end)) + "]";
    }
}
'''


def pascal(name: str) -> str:
    return "".join(part[:1].upper() + part[1:] for part in name.split("_"))


def method_name(function_name: str) -> str:
    # C# solutions follow the PascalCase convention (twoSum -> TwoSum)
    return function_name[:1].upper() + function_name[1:]


def string_literal(value: str) -> str:
    return json.dumps(value)


def _double(v: float) -> str:
    r = float_repr(v)
    if r is not None:
        return r
    if v != v:
        return "double.NaN"
    return "double.PositiveInfinity" if v > 0 else "double.NegativeInfinity"


def _element(t: str, v) -> str:
    if t == "int":
        return str(v)
    if t == "long":
        return f"{v}L"
    if t == "double":
        return _double(v)
    if t == "boolean":
        return "true" if v else "false"
    return string_literal(v)


def literal(type_name: str, value) -> str:
    t = normalize_type(type_name)
    v = coerce(t, value)
    if t in ("int", "long", "double", "boolean", "string"):
        return _element(t, v)
    if t == "ListNode":
        if not v:
            return "null"
        return f"Judge.BuildListNode(new int[] {{{', '.join(str(x) for x in v)}}})"
    if t == "TreeNode":
        if tree_is_empty(v):
            return "null"
        return f"Judge.BuildTreeNode(new int?[] {{{', '.join('null' if x is None else str(x) for x in v)}}})"
    if t == "int[][]":
        rows = ", ".join("new int[] {" + ", ".join(str(x) for x in row) + "}" for row in v)
        return f"new int[][] {{{rows}}}"
    elem = t[:-2]
    return f"new {TYPE_NAMES[t][:-2]}[] {{{', '.join(_element(elem, x) for x in v)}}}"


def solution_driver(problem: ProblemSpec, test_cases: list[TestCase]) -> str:
    show = "Judge.Show" + pascal(SUFFIX[normalize_type(problem.output_type)])
    method = method_name(problem.function_name)
    lines = [PRELUDE, "public static class Program {", "    public static void Main(string[] args) {"]
    for case in test_cases:
        names = []
        lines.append("        {")
        lines.append("            var solution = new Solution();")
        for i, (param, value) in enumerate(zip(problem.params, case.values_for(problem.params))):
            t = normalize_type(param.type)
            lines.append(f"            {TYPE_NAMES[t]} p{i} = {literal(t, value)};")
            names.append(f"p{i}")
        lines.append(f"            Console.WriteLine({show}(solution.{method}({', '.join(names)})));")
        lines.append('            Console.WriteLine("---");')
        lines.append("        }")
    lines.append("        Console.Out.Flush();")
    lines.append("    }")
    lines.append("}")
    lines.append("")
    return "\n".join(lines)
