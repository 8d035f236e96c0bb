import numpy as np
import pytest

from symbolic_core import (
    Dataset, ExpressionSyntaxError, ExpressionTree, FormatError, InfixFormatter, InfixParser, Node,
    NodeType, NotFoundError, TreeFormatter, variable_hash
)

NAMES = ["x", "y", "z"]
HASH_OF = {name: variable_hash(name) for name in NAMES}
NAME_OF = {h: name for name, h in HASH_OF.items()}

X = Node.variable(HASH_OF["x"])
Y = Node.variable(HASH_OF["y"])
Z = Node.variable(HASH_OF["z"])


def parse(text: str) -> tuple:
    return InfixParser.parse(text, HASH_OF).nodes


def c(value: float) -> Node:
    return Node.constant(value)


def op(node_type: NodeType, arity=None) -> Node:
    return Node.operator(node_type, arity)


def x_plus_y_times_2() -> ExpressionTree:
    return ExpressionTree([X, Y, c(2.0), op(NodeType.MUL), op(NodeType.ADD)])


# -------------------------------------------------------------------
# formatting
# -------------------------------------------------------------------
def test_infix_format_fully_parenthesizes_binary_operators():
    text = InfixFormatter.format(x_plus_y_times_2(), NAME_OF, precision=3)
    assert text == "(x + (y * 2.000))"


def test_infix_format_functions_and_negatives():
    tree = ExpressionTree([X, op(NodeType.SIN), c(-1.5), op(NodeType.FMIN, 2)])
    assert InfixFormatter.format(tree, NAME_OF, precision=1) == "fmin(sin(x), (-1.5))"

    neg = ExpressionTree([X, op(NodeType.NEG)])
    assert InfixFormatter.format(neg, NAME_OF) == "(-(x))"


def test_tree_format_is_prefix():
    text = TreeFormatter.format(x_plus_y_times_2(), NAME_OF, precision=3)
    assert text == "(+ x (* y 2.000))"

    neg = ExpressionTree([X, op(NodeType.NEG)])
    assert TreeFormatter.format(neg, NAME_OF) == "(neg x)"


def test_format_with_dataset_names_follows_renames():
    ds = Dataset(np.zeros((2, 2)), variable_names=["x", "y"])
    tree = x_plus_y_times_2()
    assert InfixFormatter.format(tree, ds, precision=1) == "(x + (y * 2.0))"

    ds.variable_names = ["a", "b"]
    with pytest.raises(NotFoundError):
        InfixFormatter.format(tree, ds)


def test_format_unknown_hash_raises():
    with pytest.raises(NotFoundError):
        InfixFormatter.format(ExpressionTree([Z]), {HASH_OF["x"]: "x"})


def test_negative_precision_is_rejected():
    with pytest.raises(ValueError):
        InfixFormatter.format(x_plus_y_times_2(), NAME_OF, precision=-1)
    with pytest.raises(ValueError):
        TreeFormatter.format(x_plus_y_times_2(), NAME_OF, precision=-1)


# -------------------------------------------------------------------
# parsing
# -------------------------------------------------------------------
def test_parse_concrete_example():
    assert parse("x + y * 2") == x_plus_y_times_2().nodes


@pytest.mark.parametrize("text,expected", [
    ("x - y - z", (X, Y, op(NodeType.SUB), Z, op(NodeType.SUB))),
    ("x / y * z", (X, Y, op(NodeType.DIV), Z, op(NodeType.MUL))),
    ("x ^ y ^ z", (X, Y, Z, op(NodeType.POW), op(NodeType.POW))),
    ("(x + y) * z", (X, Y, op(NodeType.ADD), Z, op(NodeType.MUL))),
    ("-x ^ 2", (X, c(2.0), op(NodeType.POW), op(NodeType.NEG))),
    ("-x * y", (X, op(NodeType.NEG), Y, op(NodeType.MUL))),
    ("-2", (c(-2.0),)),
    ("-2 ^ 2", (c(2.0), c(2.0), op(NodeType.POW), op(NodeType.NEG))),
    ("2 * -x", (c(2.0), X, op(NodeType.NEG), op(NodeType.MUL))),
    ("x - 2", (X, c(2.0), op(NodeType.SUB))),
    ("+x", (X,)),
    ("1.5e2", (c(150.0),)),
])
def test_precedence_and_associativity(text, expected):
    assert parse(text) == expected


def test_parse_functions():
    assert parse("aq(x, y)") == (X, Y, op(NodeType.AQ))
    assert parse("fmin(x, y, 3)") == (X, Y, c(3.0), op(NodeType.FMIN, 3))
    assert parse("sqrt(exp(x))") == (X, op(NodeType.EXP), op(NodeType.SQRT))


@pytest.mark.parametrize("text", [
    "(x + y",
    "x + y)",
    "x + $",
    "sin(x, y)",
    "fmin(x)",
    "foo(x)",
    "",
    "x y",
    "x +",
    "sin(x",
    "()",
])
def test_malformed_text_raises_syntax_error(text):
    with pytest.raises(ExpressionSyntaxError):
        parse(text)


def test_syntax_error_reports_position():
    with pytest.raises(ExpressionSyntaxError) as excinfo:
        parse("x + $")
    assert excinfo.value.position == 4


def test_unknown_identifier_raises_not_found():
    with pytest.raises(NotFoundError):
        parse("x + w")


def test_parse_with_dataset():
    ds = Dataset(np.array([[1.0, 2.0], [3.0, 4.0], [5.0, 6.0]]), variable_names=["x", "y"])
    tree = InfixParser.parse("x + y * 2", ds)
    assert tree.evaluate(ds).tolist() == [5.0, 11.0, 17.0]
    with pytest.raises(NotFoundError):
        InfixParser.parse("z", ds)


# -------------------------------------------------------------------
# format -> parse
# -------------------------------------------------------------------
@pytest.mark.parametrize("nodes", [
    [X, Y, c(2.0), op(NodeType.MUL), op(NodeType.ADD)],
    [c(2.0), op(NodeType.NEG)],
    [c(-1.5)],
    [X, op(NodeType.NEG), c(2.0), op(NodeType.POW)],
    [X, c(2.0), op(NodeType.POW), op(NodeType.NEG)],
    [X, op(NodeType.NEG), op(NodeType.NEG)],
    [X, Y, c(0.25), op(NodeType.FMAX, 3)],
    [X, Y, Z, op(NodeType.SUB), op(NodeType.SUB)],
    [X, Y, op(NodeType.POW), Z, op(NodeType.POW)],
    [X, op(NodeType.LOGABS), Y, op(NodeType.AQ), op(NodeType.TANH)],
])
def test_formatted_text_parses_back_to_same_nodes(nodes):
    tree = ExpressionTree(nodes)
    text = InfixFormatter.format(tree, NAME_OF, precision=4)
    assert InfixParser.parse(text, HASH_OF) == tree


# -------------------------------------------------------------------
# names that are not plain identifiers
# -------------------------------------------------------------------
def test_non_identifier_names_are_quoted_and_parse_back(tmp_path):
    path = tmp_path / "data.csv"
    path.write_text("temp c,a-b,y\n1,2,3\n4,5,6\n")
    ds = Dataset(path, has_header=True)
    tree = InfixParser.parse("`temp c` * `a-b` - y", ds)

    text = InfixFormatter.format(tree, ds, precision=2)
    assert text == "((`temp c` * `a-b`) - y)"
    assert InfixParser.parse(text, ds) == tree
    assert tree.evaluate(ds).tolist() == [-1.0, 14.0]
    assert TreeFormatter.format(tree, ds) == "(- (* `temp c` `a-b`) y)"


def test_quoted_identifier_is_the_same_variable():
    assert parse("`x` + y") == parse("x + y")


def test_unquotable_mapping_name_cannot_be_formatted():
    with pytest.raises(FormatError):
        InfixFormatter.format(ExpressionTree([X]), {HASH_OF["x"]: "a`b"})


@pytest.mark.parametrize("text", ["`x", "``", "`x` (y)"])
def test_malformed_quoting_raises_syntax_error(text):
    with pytest.raises(ExpressionSyntaxError):
        parse(text)


# -------------------------------------------------------------------
# deep nesting
# -------------------------------------------------------------------
def test_deeply_nested_tree_round_trips():
    # x + (x + (x + ... + x))
    depth = 5000
    nodes = [X] * (depth + 1) + [op(NodeType.ADD)] * depth
    tree = ExpressionTree(nodes)
    text = InfixFormatter.format(tree, NAME_OF)
    assert InfixParser.parse(text, HASH_OF) == tree


def test_deeply_nested_calls_and_negations_parse():
    depth = 3000
    text = "sin(" * depth + "-x" + ")" * depth
    nodes = InfixParser.parse(text, HASH_OF).nodes
    assert nodes == (X, op(NodeType.NEG)) + (op(NodeType.SIN),) * depth
