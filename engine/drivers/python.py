from engine.drivers.types import coerce, float_repr, normalize_type, tree_is_empty, SUFFIX
from schemas.problem import ProblemSpec, TestCase

LIST_NODE = '''class ListNode:
    def __init__(self, val=0, next=None):
        self.val = val
        self.next = next
'''

TREE_NODE = '''class TreeNode:
    def __init__(self, val=0, left=None, right=None):
        self.val = val
        self.left = left
        self.right = right
'''

HELPER_FILES = {"ListNode.py": LIST_NODE, "TreeNode.py": TREE_NODE}

SOLUTION_HEADER = "from ListNode import ListNode\nfrom TreeNode import TreeNode\n"

PRELUDE = '''import json
import sys

from ListNode import ListNode
from TreeNode import TreeNode
from Solution import Solution


def build_list_node(values):
    head = tail = None
    for v in values:
        node = ListNode(v)
        if head is None:
            head = tail = node
        else:
            tail.next = node
            tail = node
    return head


def build_tree_node(values):
    if not values or values[0] is None:
        return None
    root = TreeNode(values[0])
    queue = [root]
    head, i = 0, 1
    while head < len(queue) and i < len(values):
        node = queue[head]
        head += 1
        if values[i] is not None:
            node.left = TreeNode(values[i])
            queue.append(node.left)
        i += 1
        if i < len(values) and values[i] is not None:
            node.right = TreeNode(values[i])
            queue.append(node.right)
        i += 1
    return root


def show_int(x):
    return str(int(x))


show_long = show_int


def show_double(x):
    return "%.5f" % x


def show_bool(x):
    return "true" if x else "false"


def show_string(x):
    return "null" if x is None else json.dumps(x, ensure_ascii=False)


def show_seq(xs, show):
    return "[" + ",".join(show(x) for x in (xs or [])) + "]"


def show_int_array(xs):
    return show_seq(xs, show_int)


show_long_array = show_int_array


def show_double_array(xs):
    return show_seq(xs, show_double)


def show_bool_array(xs):
    return show_seq(xs, show_bool)


def show_string_array(xs):
    return show_seq(xs, show_string)


def show_int_matrix(rows):
    return show_seq(rows, show_int_array)


def show_list_node(node):
    out = []
    while node is not None:
        out.append(show_int(node.val))
        node = node.next
    return "[" + ",".join(out) + "]"


def show_tree_node(root):
    out = []
    queue = [root]
    head = 0
    while head < len(queue):
        node = queue[head]
        head += 1
        if node is None:
            out.append("null")
            continue
        out.append(show_int(node.val))
        queue.append(node.left)
        queue.append(node.right)
    while out and out[-1] == "null":
        out.pop()
    return "[" + ",".join(out) + "]"
'''


def literal(type_name: str, value) -> str:
    t = normalize_type(type_name)
    v = coerce(t, value)
    return _literal(t, v)


def _literal(t: str, v) -> str:
    if t in ("int", "long"):
        return str(v)
    if t == "double":
        r = float_repr(v)
        return r if r is not None else f'float("{v}")'
    if t == "boolean":
        return "True" if v else "False"
    if t == "string":
        return repr(v)
    if t == "ListNode":
        if not v:
            return "None"
        return f"build_list_node([{', '.join(str(x) for x in v)}])"
    if t == "TreeNode":
        if tree_is_empty(v):
            return "None"
        return f"build_tree_node([{', '.join('None' if x is None else str(x) for x in v)}])"
    inner = "int[]" if t == "int[][]" else t[:-2]
    return "[" + ", ".join(_literal(inner, x) for x in v) + "]"


def solution_driver(problem: ProblemSpec, test_cases: list[TestCase]) -> str:
    show = "show_" + SUFFIX[normalize_type(problem.output_type)]
    lines = [PRELUDE, "", "def main():"]
    for n, case in enumerate(test_cases, 1):
        values = case.values_for(problem.params)
        args = ", ".join(literal(p.type, v) for p, v in zip(problem.params, values))
        lines.append(f"    # case {n}")
        lines.append(f"    result = Solution().{problem.function_name}({args})")
        lines.append(f"    print({show}(result))")
        lines.append('    print("---")')
    lines.append("    sys.stdout.flush()")
    lines.append("")
    lines.append("")
    lines.append('if __name__ == "__main__":')
    lines.append("    main()")
    lines.append("")
    return "\n".join(lines)
