import pytest
import tensorflow as tf

from minikeras import GraphContainer
from minikeras.exceptions import GraphBuildingError

tf1 = tf.compat.v1


def _variable(graph, name, value=0.0):
    with graph.tf_graph.as_default():
        return tf.Variable(value, name=name)


def test_duplicate_variable_fails_every_time(graph):
    variable = _variable(graph, "weights")
    graph.add_variable(variable, True)

    with pytest.raises(GraphBuildingError, match="weights is added to graph already"):
        graph.add_variable(variable, True)
    with pytest.raises(GraphBuildingError):
        graph.add_variable(variable, False)

    # The first registration stays untouched.
    assert graph.variables() == [variable]
    assert graph.trainable_variables() == [variable]


def test_duplicate_initializer_fails_every_time(graph):
    variable = _variable(graph, "weights")
    with graph.tf_graph.as_default():
        first = variable.assign(1.0, read_value=False)
        second = variable.assign(2.0, read_value=False)
    graph.add_initializer("weights_init", first)

    with pytest.raises(GraphBuildingError, match="weights_init has initializer already"):
        graph.add_initializer("weights_init", second)
    with pytest.raises(GraphBuildingError):
        graph.add_initializer("weights_init", second)

    assert graph.initializers == {"weights_init": first}


def test_variables_keep_registration_order(graph):
    names = ["c", "a", "b", "slot"]
    created = [_variable(graph, name) for name in names]
    for variable in created[:3]:
        graph.add_variable(variable, True)
    graph.add_variable(created[3], False)

    assert [v.op.name for v in graph.trainable_variables()] == ["c", "a", "b"]
    assert [v.op.name for v in graph.variables()] == names
    assert graph.variable("slot") is created[3]


def test_unknown_variable_lookup(graph):
    with pytest.raises(KeyError):
        graph.variable("missing")


def test_initialize_graph_variables(graph, session):
    first = _variable(graph, "first")
    second = _variable(graph, "second")
    with graph.tf_graph.as_default():
        graph.add_initializer("first_init", first.assign(3.0, read_value=False))
        graph.add_initializer("second_init", second.assign(4.0, read_value=False))
        total = first.read_value() + second.read_value()

    graph.initialize_graph_variables(session)

    assert session.run(total) == pytest.approx(7.0)


def test_accumulating_initializers_run_after_direct_ones(graph, session):
    base = _variable(graph, "base")
    accumulator = _variable(graph, "accumulator")
    with graph.tf_graph.as_default():
        graph.add_optimizer_variable_initializer(base.assign(5.0, read_value=False))
        graph.add_optimizer_variable_initializer(accumulator.assign(1.0, read_value=False))
        graph.add_optimizer_variable_assign_add_initializer(
            accumulator.assign_add(base.read_value(), read_value=False))
        value = accumulator.read_value()

    graph.initialize_optimizer_variables(session)

    assert session.run(value) == pytest.approx(6.0)


def test_graph_dump_lists_operations(graph):
    _variable(graph, "weights")

    dump = str(graph)

    assert "Name: weights; Type: VarHandleOp; Out #tensors:  1\n" in dump
    assert len(dump.splitlines()) == len(graph.tf_graph.get_operations())


def test_import_graph_def_with_prefix():
    source = tf.Graph()
    with source.as_default():
        tf.constant(1.0, name="one")

    container = GraphContainer(source.as_graph_def().SerializeToString(), prefix="imported")

    assert "Name: imported/one; Type: Const" in str(container)
    container.close()


def test_close_finalizes_graph():
    container = GraphContainer()
    container.close()

    assert container.closed
    with pytest.raises(RuntimeError):
        with container.tf_graph.as_default():
            tf.constant(1.0)
