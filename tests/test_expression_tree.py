import numpy as np
import pytest
import sympy as sp

from symbolic_core import (
    Dataset, ExpressionTree, Node, NodeType, NotFoundError, Range, ShapeError, variable_hash
)
from symbolic_core.expression_tree import ExpressionValidator, evaluate_unary_op

X = variable_hash("x")
Y = variable_hash("y")
NAMES = {X: "x", Y: "y"}


def x_plus_y_times_2() -> ExpressionTree:
    # postfix: x y 2 * +
    return ExpressionTree([
        Node.variable(X),
        Node.variable(Y),
        Node.constant(2.0),
        Node.operator(NodeType.MUL),
        Node.operator(NodeType.ADD),
    ])


def make_dataset() -> Dataset:
    return Dataset(np.array([[1.0, 2.0], [3.0, 4.0], [5.0, 6.0]]), variable_names=["x", "y"])


# -------------------------------------------------------------------
# structure
# -------------------------------------------------------------------
def test_well_formed_tree_navigation():
    tree = x_plus_y_times_2()
    assert len(tree) == 5
    assert tree.root.type == NodeType.ADD
    assert tree.children(4) == [0, 3]
    assert tree.children(3) == [1, 2]
    assert tree.subtree_length(4) == 5
    assert tree.subtree_length(3) == 3
    assert tree.depth() == 3


def test_subtree_extracts_a_valid_tree():
    tree = x_plus_y_times_2()
    sub = tree.subtree(3)
    assert sub.nodes == (Node.variable(Y), Node.constant(2.0), Node.operator(NodeType.MUL))


@pytest.mark.parametrize("nodes", [
    [],
    [Node.variable(X), Node.operator(NodeType.ADD)],
    [Node.variable(X), Node.variable(Y)],
    [Node.operator(NodeType.SIN)],
    [Node.variable(X), Node.variable(Y), Node.variable(X), Node.operator(NodeType.ADD)],
])
def test_malformed_sequences_raise_shape_error(nodes):
    with pytest.raises(ShapeError):
        ExpressionTree(nodes)
    assert not ExpressionValidator.is_valid_expression(nodes)


def test_node_rejects_wrong_arity():
    with pytest.raises(ShapeError):
        Node(NodeType.SIN, 2)
    with pytest.raises(ShapeError):
        Node(NodeType.FMAX, 1)
    assert Node(NodeType.FMAX, 4).arity == 4


def test_validator_flags_non_finite_constants():
    nodes = [Node.constant(float("nan"))]
    assert not ExpressionValidator.is_valid_expression(nodes)
    assert ExpressionValidator.is_valid_expression(nodes, require_finite=False)


def test_nary_children_in_argument_order():
    tree = ExpressionTree([
        Node.variable(X),
        Node.variable(Y),
        Node.constant(1.0),
        Node.operator(NodeType.SIN),
        Node.constant(3.0),
        Node.operator(NodeType.FMIN, 4),
    ])
    assert tree.children(5) == [0, 1, 3, 4]


def test_replace_subtree_returns_new_tree():
    tree = x_plus_y_times_2()
    replacement = ExpressionTree([Node.variable(X), Node.operator(NodeType.SIN)])
    new_tree = tree.replace_subtree(3, replacement)

    assert new_tree.nodes == (
        Node.variable(X), Node.variable(X), Node.operator(NodeType.SIN), Node.operator(NodeType.ADD)
    )
    assert tree == x_plus_y_times_2()


def test_constants_and_with_constants():
    tree = x_plus_y_times_2()
    assert tree.constants() == (2.0,)
    tuned = tree.with_constants([0.5])
    assert tuned.constants() == (0.5,)
    assert tree.constants() == (2.0,)
    with pytest.raises(ValueError):
        tree.with_constants([1.0, 2.0])


def test_variable_queries():
    tree = ExpressionTree([Node.variable(X), Node.variable(X), Node.operator(NodeType.MUL)])
    assert tree.variable_hashes() == frozenset({X})
    assert tree.variable_usage() == {X: 2}


def test_structural_equality_and_hash():
    a = x_plus_y_times_2()
    b = x_plus_y_times_2()
    c = a.with_constants([3.0])
    assert a == b
    assert hash(a) == hash(b)
    assert a != c
    assert len({a, b, c}) == 2


# -------------------------------------------------------------------
# evaluation
# -------------------------------------------------------------------
def test_evaluate_over_dataset():
    ds = make_dataset()
    result = x_plus_y_times_2().evaluate(ds)
    assert result.tolist() == [5.0, 11.0, 17.0]


def test_evaluate_over_range():
    ds = make_dataset()
    result = x_plus_y_times_2().evaluate(ds, Range(1, 3))
    assert result.tolist() == [11.0, 17.0]


def test_evaluate_is_portable_across_datasets():
    """Leaves resolve by hash, so column order does not matter."""
    swapped = Dataset([[2.0, 4.0, 6.0], [1.0, 3.0, 5.0]], variable_names=["y", "x"])
    assert x_plus_y_times_2().evaluate(swapped).tolist() == [5.0, 11.0, 17.0]


def test_evaluate_unary_and_nary_operators():
    ds = make_dataset()
    tree = ExpressionTree([
        Node.variable(X),
        Node.operator(NodeType.SQUARE),
        Node.variable(Y),
        Node.constant(4.0),
        Node.operator(NodeType.FMAX, 3),
    ])
    assert tree.evaluate(ds).tolist() == [4.0, 9.0, 25.0]

    neg = ExpressionTree([Node.variable(Y), Node.operator(NodeType.NEG)])
    assert neg.evaluate(ds).tolist() == [-2.0, -4.0, -6.0]


def test_evaluate_analytic_quotient():
    ds = make_dataset()
    tree = ExpressionTree([Node.variable(X), Node.constant(0.0), Node.operator(NodeType.AQ)])
    assert tree.evaluate(ds).tolist() == [1.0, 3.0, 5.0]


def test_evaluate_unknown_variable_raises():
    ds = make_dataset()
    tree = ExpressionTree([Node.variable(variable_hash("z"))])
    with pytest.raises(NotFoundError):
        tree.evaluate(ds)


def test_unary_kernel_matches_numpy():
    values = np.linspace(0.1, 2.0, 7)
    assert np.allclose(evaluate_unary_op(values, NodeType.SIN), np.sin(values))
    assert np.allclose(evaluate_unary_op(values, NodeType.LOG), np.log(values))
    assert np.allclose(evaluate_unary_op(-values, NodeType.CBRT), -np.cbrt(values))


# -------------------------------------------------------------------
# sympy conversion
# -------------------------------------------------------------------
def test_to_sympy_with_mapping():
    expr = x_plus_y_times_2().to_sympy(NAMES)
    x, y = sp.symbols("x y")
    assert sp.simplify(expr - (x + sp.Float(2.0) * y)) == 0


def test_to_sympy_with_dataset_and_missing_name():
    ds = make_dataset()
    tree = ExpressionTree([Node.variable(X), Node.operator(NodeType.SIN)])
    assert tree.to_sympy(ds) == sp.sin(sp.Symbol("x"))
    with pytest.raises(NotFoundError):
        tree.to_sympy({Y: "y"})
