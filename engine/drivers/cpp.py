from engine.drivers.types import coerce, float_repr, normalize_type, tree_is_empty, SUFFIX
from schemas.problem import ProblemSpec, TestCase

LIST_NODE = '''#pragma once
#include <bits/stdc++.h>
using namespace std;

struct ListNode {
    int val;
    ListNode *next;
    ListNode() : val(0), next(nullptr) {}
    ListNode(int x) : val(x), next(nullptr) {}
    ListNode(int x, ListNode *next) : val(x), next(next) {}
};
'''

TREE_NODE = '''#pragma once
#include <bits/stdc++.h>
using namespace std;

struct TreeNode {
    int val;
    TreeNode *left;
    TreeNode *right;
    TreeNode() : val(0), left(nullptr), right(nullptr) {}
    TreeNode(int x) : val(x), left(nullptr), right(nullptr) {}
    TreeNode(int x, TreeNode *left, TreeNode *right) : val(x), left(left), right(right) {}
};
'''

HELPER_FILES = {"ListNode.cpp": LIST_NODE, "TreeNode.cpp": TREE_NODE}

SOLUTION_HEADER = '#include "ListNode.cpp"\n#include "TreeNode.cpp"\n'

TYPE_NAMES = {
    "int": "int",
    "long": "long long",
    "double": "double",
    "boolean": "bool",
    "string": "string",
    "int[]": "vector<int>",
    "long[]": "vector<long long>",
    "double[]": "vector<double>",
    "boolean[]": "vector<bool>",
    "string[]": "vector<string>",
    "int[][]": "vector<vector<int>>",
    "ListNode": "ListNode*",
    "TreeNode": "TreeNode*",
}

PRELUDE = r'''#include "Solution.cpp"

static ListNode* build_list_node(const vector<int>& values) {
    ListNode dummy;
    ListNode* tail = &dummy;
    for (int v : values) {
        tail->next = new ListNode(v);
        tail = tail->next;
    }
    return dummy.next;
}

static TreeNode* build_tree_node(const vector<optional<int>>& values) {
    if (values.empty() || !values[0]) return nullptr;
    TreeNode* root = new TreeNode(*values[0]);
    deque<TreeNode*> pending{root};
    size_t i = 1;
    while (!pending.empty() && i < values.size()) {
        TreeNode* node = pending.front();
        pending.pop_front();
        if (values[i]) {
            node->left = new TreeNode(*values[i]);
            pending.push_back(node->left);
        }
        i++;
        if (i < values.size() && values[i]) {
            node->right = new TreeNode(*values[i]);
            pending.push_back(node->right);
        }
        i++;
    }
    return root;
}

static string show_int(long long x) { return to_string(x); }

static string show_long(long long x) { return to_string(x); }

static string show_double(double x) {
    char buf[64];
    snprintf(buf, sizeof buf, "%.5f", x);
    return buf;
}

static string show_bool(bool x) { return x ? "true" : "false"; }

static string show_string(const string& s) {
    string out = "\"";
    for (unsigned char c : s) {
        switch (c) {
            case '"': out += "\\\""; break;
            case '\\': out += "\\\\"; break;
            case '\n': out += "\\n"; break;
            case '\r': out += "\\r"; break;
            case '\t': out += "\\t"; break;
            case '\b': out += "\\b"; break;
            case '\f': out += "\\f"; break;
            default:
                if (c < 0x20) {
                    char buf[8];
                    snprintf(buf, sizeof buf, "\\u%04x", c);
                    out += buf;
                } else {
                    out += (char) c;
                }
        }
    }
    return out + "\"";
}

template <class C, class F>
static string show_seq(const C& xs, F show) {
    string out = "[";
    bool first = true;
    for (const auto& x : xs) {
        if (!first) out += ",";
        first = false;
        out += show(x);
    }
    return out + "]";
}

template <class C> static string show_int_array(const C& xs) { return show_seq(xs, [](long long x) { return show_int(x); }); }

template <class C> static string show_long_array(const C& xs) { return show_seq(xs, [](long long x) { return show_long(x); }); }

template <class C> static string show_double_array(const C& xs) { return show_seq(xs, [](double x) { return show_double(x); }); }

template <class C> static string show_bool_array(const C& xs) { return show_seq(xs, [](bool x) { return show_bool(x); }); }

template <class C> static string show_string_array(const C& xs) { return show_seq(xs, [](const string& x) { return show_string(x); }); }

template <class C> static string show_int_matrix(const C& rows) {
    string out = "[";
    bool first = true;
    for (const auto& row : rows) {
        if (!first) out += ",";
        first = false;
        out += show_int_array(row);
    }
    return out + "]";
}

static string show_list_node(ListNode* node) {
    string out = "[";
    for (bool first = true; node != nullptr; node = node->next, first = false) {
        if (!first) out += ",";
        out += show_int(node->val);
    }
    return out + "]";
}

static string show_tree_node(TreeNode* root) {
    vector<string> out;
    deque<TreeNode*> pending{root};
    while (!pending.empty()) {
        TreeNode* node = pending.front();
        pending.pop_front();
        if (node == nullptr) {
            out.push_back("null");
            continue;
        }
        out.push_back(show_int(node->val));
        pending.push_back(node->left);
        pending.push_back(node->right);
    }
    while (!out.empty() && out.back() == "null") out.pop_back();
    string joined = "[";
    for (size_t i = 0; i < out.size(); i++) {
        if (i) joined += ",";
        joined += out[i];
    }
    return joined + "]";
}
'''


def string_literal(value: str) -> str:
    data = value.encode("utf-8")
    body = []
    for b in data:
        ch = chr(b)
        if 0x20 <= b < 0x7F and ch not in '"\\?':
            body.append(ch)
        else:
            # three-digit octal never swallows the next character
            body.append(f"\\{b:03o}")
    return f'string("{"".join(body)}", {len(data)})'


def _int(v: int) -> str:
    return str(v)


def _long(v: int) -> str:
    if v == -(2**63):
        return "(-9223372036854775807LL - 1)"
    return f"{v}LL"


def _double(v: float) -> str:
    r = float_repr(v)
    if r is not None:
        return r
    if v != v:
        return "numeric_limits<double>::quiet_NaN()"
    return "numeric_limits<double>::infinity()" if v > 0 else "-numeric_limits<double>::infinity()"


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
            return "nullptr"
        return f"build_list_node(vector<int>{{{', '.join(_int(x) for x in v)}}})"
    if t == "TreeNode":
        if tree_is_empty(v):
            return "nullptr"
        return f"build_tree_node(vector<optional<int>>{{{', '.join('nullopt' if x is None else _int(x) for x in v)}}})"
    if t == "int[][]":
        rows = ", ".join("vector<int>{" + ", ".join(_int(x) for x in row) + "}" for row in v)
        return f"vector<vector<int>>{{{rows}}}"
    elem = t[:-2]
    return f"{TYPE_NAMES[t]}{{{', '.join(_element(elem, x) for x in v)}}}"


def solution_driver(problem: ProblemSpec, test_cases: list[TestCase]) -> str:
    show = "show_" + SUFFIX[normalize_type(problem.output_type)]
    lines = [PRELUDE, "int main() {", "    ios::sync_with_stdio(false);"]
    for case in test_cases:
        names = []
        lines.append("    {")
        lines.append("        Solution solution;")
        for i, (param, value) in enumerate(zip(problem.params, case.values_for(problem.params))):
            t = normalize_type(param.type)
            lines.append(f"        {TYPE_NAMES[t]} p{i} = {literal(t, value)};")
            names.append(f"p{i}")
        lines.append(f"        cout << {show}(solution.{problem.function_name}({', '.join(names)})) << \"\\n\";")
        lines.append('        cout << "---" << "\\n";')
        lines.append("    }")
    lines.append("    cout.flush();")
    lines.append("    return 0;")
    lines.append("}")
    lines.append("")
    return "\n".join(lines)
