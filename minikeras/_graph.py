"""
Graph container: owns the TensorFlow graph and the registry of variables and initializers.
"""
import tensorflow as tf

from .exceptions import GraphBuildingError

tf1 = tf.compat.v1


def _variable_name(variable):
    return variable.op.name


class GraphContainer:
    """
    Wrapper around a ``tf.Graph`` that keeps track of model variables and
    the operations that initialize them.
    """

    def __init__(self, graph_def=None, prefix=""):
        """
        Args:
            graph_def (bytes or GraphDef, optional): Serialized graph to import
            prefix (str): Name prefix for imported operations
        """
        self.tf_graph = tf.Graph()

        # Initializers of optimizer state, each one is run on its own.
        self._optimizer_initializers = []
        # Accumulating initializers, run together after the ones above.
        self._optimizer_assign_add_initializers = []
        # name -> (variable, is_trainable), in registration order
        self._variables = {}
        self._initializers = {}
        self._closed = False

        if graph_def is not None:
            if isinstance(graph_def, bytes):
                graph_def = tf1.GraphDef.FromString(graph_def)
            with self.tf_graph.as_default():
                tf1.import_graph_def(graph_def, name=prefix)

    def close(self):
        """Finalize the graph, no operation can be added afterwards."""
        if not self._closed:
            self.tf_graph.finalize()
            self._closed = True

    @property
    def closed(self):
        return self._closed

    def __str__(self):
        return self.convert_graph_def_to_string()

    def convert_graph_def_to_string(self):
        lines = []
        for operation in self.tf_graph.get_operations():
            lines.append(f"Name: {operation.name}; Type: {operation.type}; "
                         f"Out #tensors:  {len(operation.outputs)}\n")
        return "".join(lines)

    def add_variable(self, variable, is_trainable, name=None):
        name = name or _variable_name(variable)
        if name in self._variables:
            raise GraphBuildingError(
                f"{name} is added to graph already. "
                "Analyze and fix the static graph building process.")
        self._variables[name] = (variable, is_trainable)

    def add_initializer(self, variable_name, initializer):
        if variable_name in self._initializers:
            raise GraphBuildingError(
                f"{variable_name} has initializer already. "
                "Analyze and fix the static graph building process.")
        self._initializers[variable_name] = initializer

    def add_optimizer_variable_initializer(self, initializer):
        self._optimizer_initializers.append(initializer)

    def add_optimizer_variable_assign_add_initializer(self, initializer):
        self._optimizer_assign_add_initializers.append(initializer)

    def trainable_variables(self):
        return [variable for variable, trainable in self._variables.values() if trainable]

    def variables(self):
        return [variable for variable, _ in self._variables.values()]

    def variable(self, name):
        """Look up a registered variable by name."""
        try:
            return self._variables[name][0]
        except KeyError:
            raise KeyError(f"Variable {name} is not registered in the graph") from None

    @property
    def initializers(self):
        return dict(self._initializers)

    def initialize_graph_variables(self, session):
        """Run all variable initializers in a single engine call."""
        if self._initializers:
            session.run(list(self._initializers.values()))

    def initialize_optimizer_variables(self, session):
        """
        Run optimizer state initializers.

        Direct assignments are issued one call at a time, accumulating
        initializers read the assigned values and run afterwards in one call.
        """
        for initializer in self._optimizer_initializers:
            session.run(initializer)

        if self._optimizer_assign_add_initializers:
            session.run(list(self._optimizer_assign_add_initializers))
