import json

from engine.drivers.types import coerce, float_repr, normalize_type, tree_is_empty, SUFFIX
from schemas.problem import ProblemSpec, TestCase

LIST_NODE = '''public class ListNode {
    public int val;
    public ListNode next;

    public ListNode() {}

    public ListNode(int val) { this.val = val; }

    public ListNode(int val, ListNode next) { this.val = val; this.next = next; }
}
'''

TREE_NODE = '''public class TreeNode {
    public int val;
    public TreeNode left;
    public TreeNode right;

    public TreeNode() {}

    public TreeNode(int val) { this.val = val; }

    public TreeNode(int val, TreeNode left, TreeNode right) {
        this.val = val;
        this.left = left;
        this.right = right;
    }
}
'''

HELPER_FILES = {"ListNode.java": LIST_NODE, "TreeNode.java": TREE_NODE}

TYPE_NAMES = {
    "int": "int",
    "long": "long",
    "double": "double",
    "boolean": "boolean",
    "string": "String",
    "int[]": "int[]",
    "long[]": "long[]",
    "double[]": "double[]",
    "boolean[]": "boolean[]",
    "string[]": "String[]",
    "int[][]": "int[][]",
    "ListNode": "ListNode",
    "TreeNode": "TreeNode",
}

DEFAULTS = {"int": "0", "long": "0L", "double": "0.0", "boolean": "false"}

# static members of Main; parsing is only used by judged drivers
PRELUDE = r'''
    static ListNode build_list_node(int[] values) {
        ListNode dummy = new ListNode();
        ListNode tail = dummy;
        for (int v : values) {
            tail.next = new ListNode(v);
            tail = tail.next;
        }
        return dummy.next;
    }

    static TreeNode build_tree_node(Integer[] values) {
        if (values.length == 0 || values[0] == null) return null;
        TreeNode root = new TreeNode(values[0]);
        ArrayDeque<TreeNode> queue = new ArrayDeque<>();
        queue.add(root);
        int i = 1;
        while (!queue.isEmpty() && i < values.length) {
            TreeNode node = queue.poll();
            if (values[i] != null) {
                node.left = new TreeNode(values[i]);
                queue.add(node.left);
            }
            i++;
            if (i < values.length && values[i] != null) {
                node.right = new TreeNode(values[i]);
                queue.add(node.right);
            }
            i++;
        }
        return root;
    }

    static String quote(String s) {
        StringBuilder sb = new StringBuilder("\"");
        for (int i = 0; i < s.length(); i++) {
            char c = s.charAt(i);
            switch (c) {
                case '"': sb.append("\\\""); break;
                case '\\': sb.append("\\\\"); break;
                case '\n': sb.append("\\n"); break;
                case '\r': sb.append("\\r"); break;
                case '\t': sb.append("\\t"); break;
                case '\b': sb.append("\\b"); break;
                case '\f': sb.append("\\f"); break;
                default:
                    if (c < 0x20) sb.append(String.format("\\u%04x", (int) c));
                    else sb.append(c);
            }
        }
        return sb.append('"').toString();
    }

    static String show_int(int x) { return Integer.toString(x); }

    static String show_long(long x) { return Long.toString(x); }

    static String show_double(double x) { return String.format(Locale.ROOT, "%.5f", x); }

    static String show_bool(boolean x) { return x ? "true" : "false"; }

    static String show_string(String s) { return s == null ? "null" : quote(s); }

    static String show_int_array(int[] xs) {
        StringJoiner out = new StringJoiner(",", "[", "]");
        if (xs != null) for (int x : xs) out.add(show_int(x));
        return out.toString();
    }

    static String show_int_array(List<Integer> xs) {
        StringJoiner out = new StringJoiner(",", "[", "]");
        if (xs != null) for (Integer x : xs) out.add(x == null ? "null" : show_int(x));
        return out.toString();
    }

    static String show_long_array(long[] xs) {
        StringJoiner out = new StringJoiner(",", "[", "]");
        if (xs != null) for (long x : xs) out.add(show_long(x));
        return out.toString();
    }

    static String show_double_array(double[] xs) {
        StringJoiner out = new StringJoiner(",", "[", "]");
        if (xs != null) for (double x : xs) out.add(show_double(x));
        return out.toString();
    }

    static String show_bool_array(boolean[] xs) {
        StringJoiner out = new StringJoiner(",", "[", "]");
        if (xs != null) for (boolean x : xs) out.add(show_bool(x));
        return out.toString();
    }

    static String show_string_array(String[] xs) {
        StringJoiner out = new StringJoiner(",", "[", "]");
        if (xs != null) for (String x : xs) out.add(show_string(x));
        return out.toString();
    }

    static String show_string_array(List<String> xs) {
        StringJoiner out = new StringJoiner(",", "[", "]");
        if (xs != null) for (String x : xs) out.add(show_string(x));
        return out.toString();
    }

    static String show_int_matrix(int[][] rows) {
        StringJoiner out = new StringJoiner(",", "[", "]");
        if (rows != null) for (int[] row : rows) out.add(show_int_array(row));
        return out.toString();
    }

    static String show_int_matrix(List<List<Integer>> rows) {
        StringJoiner out = new StringJoiner(",", "[", "]");
        if (rows != null) for (List<Integer> row : rows) out.add(show_int_array(row));
        return out.toString();
    }

    static String show_list_node(ListNode node) {
        StringJoiner out = new StringJoiner(",", "[", "]");
        for (; node != null; node = node.next) out.add(show_int(node.val));
        return out.toString();
    }

    static String show_tree_node(TreeNode root) {
        List<String> out = new ArrayList<>();
        ArrayDeque<Optional<TreeNode>> queue = new ArrayDeque<>();
        queue.add(Optional.ofNullable(root));
        while (!queue.isEmpty()) {
            TreeNode node = queue.poll().orElse(null);
            if (node == null) {
                out.add("null");
                continue;
            }
            out.add(show_int(node.val));
            queue.add(Optional.ofNullable(node.left));
            queue.add(Optional.ofNullable(node.right));
        }
        int end = out.size();
        while (end > 0 && out.get(end - 1).equals("null")) end--;
        return "[" + String.join(",", out.subList(0, end)) + "]";
    }

    static final class Reader {
        private final String s;
        private int i;

        Reader(String s) { this.s = s; }

        private void skip() {
            while (i < s.length() && Character.isWhitespace(s.charAt(i))) i++;
        }

        Object value() {
            skip();
            if (i >= s.length()) return null;
            char c = s.charAt(i);
            if (c == '[') {
                i++;
                List<Object> out = new ArrayList<>();
                skip();
                if (i < s.length() && s.charAt(i) == ']') {
                    i++;
                    return out;
                }
                while (true) {
                    out.add(value());
                    skip();
                    if (i >= s.length()) throw new IllegalArgumentException("unterminated array");
                    char d = s.charAt(i++);
                    if (d == ']') return out;
                    if (d != ',') throw new IllegalArgumentException("unexpected " + d);
                }
            }
            if (c == '"') return string();
            int start = i;
            while (i < s.length() && ",]".indexOf(s.charAt(i)) < 0 && !Character.isWhitespace(s.charAt(i))) i++;
            String token = s.substring(start, i);
            return token.equals("null") ? null : token;
        }

        private String string() {
            i++;
            StringBuilder sb = new StringBuilder();
            while (true) {
                if (i >= s.length()) throw new IllegalArgumentException("unterminated string");
                char c = s.charAt(i++);
                if (c == '"') return sb.toString();
                if (c != '\\') {
                    sb.append(c);
                    continue;
                }
                char e = s.charAt(i++);
                switch (e) {
                    case 'n': sb.append('\n'); break;
                    case 'r': sb.append('\r'); break;
                    case 't': sb.append('\t'); break;
                    case 'b': sb.append('\b'); break;
                    case 'f': sb.append('\f'); break;
                    case 'u':
                        sb.append((char) Integer.parseInt(s.substring(i, i + 4), 16));
                        i += 4;
                        break;
                    default: sb.append(e);
                }
            }
        }
    }

    static Object parse(String s) { return new Reader(s.trim()).value(); }

    static List<?> list_of(Object v) { return v == null ? new ArrayList<Object>() : (List<?>) v; }

    static int int_of(Object v) { return v == null ? 0 : Integer.parseInt(v.toString()); }

    static long long_of(Object v) { return v == null ? 0L : Long.parseLong(v.toString()); }

    static double double_of(Object v) { return v == null ? 0.0 : Double.parseDouble(v.toString()); }

    static boolean bool_of(Object v) {
        if (v == null) return false;
        String t = v.toString();
        if (!t.equals("true") && !t.equals("false")) throw new IllegalArgumentException("not a boolean: " + t);
        return t.equals("true");
    }

    static String string_of(Object v) { return v == null ? null : v.toString(); }

    static int[] int_array_of(Object v) {
        List<?> xs = list_of(v);
        int[] out = new int[xs.size()];
        for (int i = 0; i < out.length; i++) out[i] = int_of(xs.get(i));
        return out;
    }

    static long[] long_array_of(Object v) {
        List<?> xs = list_of(v);
        long[] out = new long[xs.size()];
        for (int i = 0; i < out.length; i++) out[i] = long_of(xs.get(i));
        return out;
    }

    static double[] double_array_of(Object v) {
        List<?> xs = list_of(v);
        double[] out = new double[xs.size()];
        for (int i = 0; i < out.length; i++) out[i] = double_of(xs.get(i));
        return out;
    }

    static boolean[] bool_array_of(Object v) {
        List<?> xs = list_of(v);
        boolean[] out = new boolean[xs.size()];
        for (int i = 0; i < out.length; i++) out[i] = bool_of(xs.get(i));
        return out;
    }

    static String[] string_array_of(Object v) {
        List<?> xs = list_of(v);
        String[] out = new String[xs.size()];
        for (int i = 0; i < out.length; i++) out[i] = string_of(xs.get(i));
        return out;
    }

    static int[][] int_matrix_of(Object v) {
        List<?> rows = list_of(v);
        int[][] out = new int[rows.size()][];
        for (int i = 0; i < out.length; i++) out[i] = int_array_of(rows.get(i));
        return out;
    }

    static ListNode list_node_of(Object v) { return build_list_node(int_array_of(v)); }

    static TreeNode tree_node_of(Object v) {
        List<?> xs = list_of(v);
        Integer[] values = new Integer[xs.size()];
        for (int i = 0; i < values.length; i++) values[i] = xs.get(i) == null ? null : int_of(xs.get(i));
        return build_tree_node(values);
    }
'''


def type_name(type_name: str) -> str:
    return TYPE_NAMES[normalize_type(type_name)]


def string_literal(value: str) -> str:
    # \\uXXXX escapes from json are plain Java escapes; quotes and newlines never use them
    return json.dumps(value)


def _int(v: int) -> str:
    return str(v)


def _long(v: int) -> str:
    return f"{v}L"


def _double(v: float) -> str:
    r = float_repr(v)
    if r is not None:
        return r
    if v != v:
        return "Double.NaN"
    return "Double.POSITIVE_INFINITY" if v > 0 else "Double.NEGATIVE_INFINITY"


def _element(t: str, v) -> str:
    if t == "int":
        return _int(v)
    if t == "long":
        return _long(v)
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
        return f"build_list_node(new int[]{{{', '.join(_int(x) for x in v)}}})"
    if t == "TreeNode":
        if tree_is_empty(v):
            return "null"
        return f"build_tree_node(new Integer[]{{{', '.join('null' if x is None else _int(x) for x in v)}}})"
    if t == "int[][]":
        rows = ", ".join("{" + ", ".join(_int(x) for x in row) + "}" for row in v)
        return f"new int[][]{{{rows}}}"
    elem = t[:-2]
    return f"new {TYPE_NAMES[t][:-2]}[]{{{', '.join(_element(elem, x) for x in v)}}}"


def _declarations(problem: ProblemSpec, case: TestCase, indent: str, prefix: str = "p") -> tuple[list[str], str]:
    lines = []
    names = []
    for i, (param, value) in enumerate(zip(problem.params, case.values_for(problem.params))):
        lines.append(f"{indent}{type_name(param.type)} {prefix}{i} = {literal(param.type, value)};")
        names.append(f"{prefix}{i}")
    return lines, ", ".join(names)


def _wrap(body: list[str]) -> str:
    return "\n".join(
        [
            "import java.util.*;",
            "",
            "public class Main {",
            PRELUDE,
            "    public static void main(String[] args) throws Exception {",
            *body,
            "        System.out.flush();",
            "    }",
            "}",
            "",
        ]
    )


def solution_driver(problem: ProblemSpec, test_cases: list[TestCase]) -> str:
    show = "show_" + SUFFIX[normalize_type(problem.output_type)]
    body = []
    for case in test_cases:
        decls, args = _declarations(problem, case, " " * 12)
        body.append("        {")
        body.append("            Solution solution = new Solution();")
        body.extend(decls)
        body.append(f"            System.out.println({show}(solution.{problem.function_name}({args})));")
        body.append('            System.out.println("---");')
        body.append("        }")
    return _wrap(body)


def judged_driver(problem: ProblemSpec, test_cases: list[TestCase], expected: list[str]) -> str:
    """Driver around the `Marker` reference solution.

    Each block prints the verdict for the caller-supplied expected string,
    then the marker's own canonical answer. Both sides go through the same
    parse/show pair; a custom checker gets the parsed value instead.
    """
    out_type = normalize_type(problem.output_type)
    suffix = SUFFIX[out_type]
    indent = " " * 12
    body = []
    for case, raw in zip(test_cases, expected):
        body.append("        {")
        body.append("            Marker marker = new Marker();")
        body.append("            boolean parsed = true;")
        body.append(f"            {TYPE_NAMES[out_type]} expected = {DEFAULTS.get(out_type, 'null')};")
        body.append("            try {")
        body.append(f"                expected = {suffix}_of(parse({string_literal(raw.strip())}));")
        body.append("            } catch (RuntimeException e) {")
        body.append("                parsed = false;")
        body.append("            }")
        if problem.custom_checker:
            decls, args = _declarations(problem, case, indent, prefix="c")
            body.extend(decls)
            sep = ", " if args else ""
            body.append(f"            boolean correct = parsed && marker.isCorrect({args}{sep}expected);")
        decls, args = _declarations(problem, case, indent)
        body.extend(decls)
        body.append(f"            String actual = show_{suffix}(marker.{problem.function_name}({args}));")
        if not problem.custom_checker:
            body.append(f"            boolean correct = parsed && actual.equals(show_{suffix}(expected));")
        body.append("            System.out.println(correct);")
        body.append("            System.out.println(actual);")
        body.append('            System.out.println("---");')
        body.append("        }")
    return _wrap(body)
