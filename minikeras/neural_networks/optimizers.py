"""
Optimizers building parameter update operations in the model graph.
"""
import tensorflow as tf

from ..common.utils import DTYPE

tf1 = tf.compat.v1


class Optimizer:
    """
    Base class for optimizers.

    ``prepare_targets`` computes the gradients of the loss, creates the
    optimizer state (slots) in the graph container together with its
    initializers and returns the update operations to run on every batch.
    """

    name = "Optimizer"

    def prepare_targets(self, graph, loss, trainable_variables):
        """
        Args:
            graph (GraphContainer): Graph of the model
            loss (tf.Tensor): Scalar loss tensor
            trainable_variables (list): Variables to update

        Returns:
            list: Update operations
        """
        if not trainable_variables:
            raise ValueError("There are no trainable variables to optimize")

        gradients = tf1.gradients(loss, trainable_variables)
        grads_and_vars = []
        for gradient, variable in zip(gradients, trainable_variables):
            if gradient is None:
                raise ValueError(f"No gradient flows from the loss to {variable.op.name}")
            grads_and_vars.append((tf.convert_to_tensor(gradient), variable))
        return self._apply_gradients(graph, grads_and_vars)

    def feed_for_epoch(self, epoch):
        """Extra values to feed during the given (1-based) epoch."""
        return {}

    def _apply_gradients(self, graph, grads_and_vars):
        raise NotImplementedError

    def _create_slot(self, graph, variable, slot_name, value):
        """Create a non-trainable variable shaped like ``variable`` and filled with ``value``."""
        name = f"{variable.op.name}_{self.name}_{slot_name}"
        shape = variable.shape.as_list()
        slot = tf.Variable(tf.zeros(shape, dtype=DTYPE), name=name, trainable=False)
        graph.add_variable(slot, False, name=name)
        graph.add_optimizer_variable_initializer(
            slot.assign(tf.fill(shape, tf.constant(value, dtype=DTYPE)),
                        read_value=False, name=f"{name}_init"))
        return slot

    def _create_scalar(self, graph, scalar_name, value, dtype=DTYPE):
        name = f"{self.name}_{scalar_name}"
        scalar = tf.Variable(tf.zeros((), dtype=dtype), name=name, trainable=False)
        graph.add_variable(scalar, False, name=name)
        graph.add_optimizer_variable_initializer(
            scalar.assign(tf.constant(value, dtype=dtype), read_value=False, name=f"{name}_init"))
        return scalar

    def _constant(self, value, name):
        return tf.constant(value, dtype=DTYPE, name=f"{self.name}_{name}")


class SGD(Optimizer):
    """
    Stochastic gradient descent with an optional per-epoch learning rate schedule.
    """

    name = "SGD"

    def __init__(self, learning_rate=0.2, learning_rate_schedule=None):
        """
        Args:
            learning_rate (float): Learning rate, used for epochs before the first scheduled one
            learning_rate_schedule (dict, optional): Epoch number (1-based) to learning rate
        """
        self.learning_rate = learning_rate
        self.learning_rate_schedule = dict(learning_rate_schedule) if learning_rate_schedule else None
        self._learning_rate_op = None

    def _apply_gradients(self, graph, grads_and_vars):
        self._learning_rate_op = tf1.placeholder_with_default(
            self._constant(self.learning_rate, "default_learning_rate"), shape=(),
            name=f"{self.name}_learning_rate")

        return [tf.raw_ops.ResourceApplyGradientDescent(
                    var=variable.handle, alpha=self._learning_rate_op, delta=gradient)
                for gradient, variable in grads_and_vars]

    def learning_rate_for_epoch(self, epoch):
        """Learning rate of the latest scheduled epoch not after ``epoch``."""
        if not self.learning_rate_schedule:
            return self.learning_rate
        if epoch in self.learning_rate_schedule:
            return self.learning_rate_schedule[epoch]
        earlier = [scheduled for scheduled in self.learning_rate_schedule if scheduled <= epoch]
        if not earlier:
            return self.learning_rate
        return self.learning_rate_schedule[max(earlier)]

    def feed_for_epoch(self, epoch):
        if self._learning_rate_op is None or not self.learning_rate_schedule:
            return {}
        return {self._learning_rate_op: self.learning_rate_for_epoch(epoch)}


class Momentum(Optimizer):
    """SGD with momentum and optional Nesterov acceleration."""

    name = "Momentum"

    def __init__(self, learning_rate=0.001, momentum=0.9, use_nesterov=False):
        self.learning_rate = learning_rate
        self.momentum = momentum
        self.use_nesterov = use_nesterov

    def _apply_gradients(self, graph, grads_and_vars):
        learning_rate = self._constant(self.learning_rate, "learning_rate")
        momentum = self._constant(self.momentum, "momentum")

        targets = []
        for gradient, variable in grads_and_vars:
            accumulator = self._create_slot(graph, variable, "momentum", 0.0)
            targets.append(tf.raw_ops.ResourceApplyMomentum(
                var=variable.handle, accum=accumulator.handle, lr=learning_rate,
                grad=gradient, momentum=momentum, use_nesterov=self.use_nesterov))
        return targets


class AdaGrad(Optimizer):
    name = "AdaGrad"

    def __init__(self, learning_rate=0.1, initial_accumulator_value=0.01):
        self.learning_rate = learning_rate
        self.initial_accumulator_value = initial_accumulator_value

    def _apply_gradients(self, graph, grads_and_vars):
        learning_rate = self._constant(self.learning_rate, "learning_rate")

        targets = []
        for gradient, variable in grads_and_vars:
            accumulator = self._create_slot(graph, variable, "accumulator",
                                            self.initial_accumulator_value)
            targets.append(tf.raw_ops.ResourceApplyAdagrad(
                var=variable.handle, accum=accumulator.handle, lr=learning_rate, grad=gradient))
        return targets


class AdaGradDA(Optimizer):
    """
    Adagrad dual averaging. Its global step starts at 1: it is assigned zero
    and then incremented by an accumulating initializer.
    """

    name = "AdaGradDA"

    def __init__(self, learning_rate=0.1, initial_accumulator_value=0.01,
                 l1_strength=0.01, l2_strength=0.01):
        self.learning_rate = learning_rate
        self.initial_accumulator_value = initial_accumulator_value
        self.l1_strength = l1_strength
        self.l2_strength = l2_strength
        self._global_step = None

    def _apply_gradients(self, graph, grads_and_vars):
        learning_rate = self._constant(self.learning_rate, "learning_rate")
        l1_strength = self._constant(self.l1_strength, "l1_strength")
        l2_strength = self._constant(self.l2_strength, "l2_strength")

        self._global_step = self._create_scalar(graph, "global_step", 0, dtype=tf.int64)
        graph.add_optimizer_variable_assign_add_initializer(
            self._global_step.assign_add(tf.constant(1, dtype=tf.int64), read_value=False,
                                         name=f"{self.name}_global_step_start"))
        global_step = self._global_step.read_value()

        targets = []
        for gradient, variable in grads_and_vars:
            gradient_accumulator = self._create_slot(graph, variable, "accumulator", 0.0)
            squared_accumulator = self._create_slot(graph, variable, "squared_accumulator",
                                                    self.initial_accumulator_value)
            targets.append(tf.raw_ops.ResourceApplyAdagradDA(
                var=variable.handle, gradient_accumulator=gradient_accumulator.handle,
                gradient_squared_accumulator=squared_accumulator.handle, grad=gradient,
                lr=learning_rate, l1=l1_strength, l2=l2_strength, global_step=global_step))

        with tf.control_dependencies(targets):
            targets.append(self._global_step.assign_add(
                tf.constant(1, dtype=tf.int64), read_value=False))
        return targets


class AdaDelta(Optimizer):
    name = "AdaDelta"

    def __init__(self, learning_rate=0.1, rho=0.95, epsilon=1e-8):
        self.learning_rate = learning_rate
        self.rho = rho
        self.epsilon = epsilon

    def _apply_gradients(self, graph, grads_and_vars):
        learning_rate = self._constant(self.learning_rate, "learning_rate")
        rho = self._constant(self.rho, "rho")
        epsilon = self._constant(self.epsilon, "epsilon")

        targets = []
        for gradient, variable in grads_and_vars:
            accumulator = self._create_slot(graph, variable, "accumulator", 0.0)
            update_accumulator = self._create_slot(graph, variable, "accumulator_update", 0.0)
            targets.append(tf.raw_ops.ResourceApplyAdadelta(
                var=variable.handle, accum=accumulator.handle,
                accum_update=update_accumulator.handle, lr=learning_rate, rho=rho,
                epsilon=epsilon, grad=gradient))
        return targets


class RMSProp(Optimizer):
    name = "RMSProp"

    def __init__(self, learning_rate=0.001, decay=0.9, momentum=0.0, epsilon=1e-10):
        self.learning_rate = learning_rate
        self.decay = decay
        self.momentum = momentum
        self.epsilon = epsilon

    def _apply_gradients(self, graph, grads_and_vars):
        learning_rate = self._constant(self.learning_rate, "learning_rate")
        decay = self._constant(self.decay, "decay")
        momentum = self._constant(self.momentum, "momentum")
        epsilon = self._constant(self.epsilon, "epsilon")

        targets = []
        for gradient, variable in grads_and_vars:
            mean_square = self._create_slot(graph, variable, "rms", 1.0)
            moment = self._create_slot(graph, variable, "momentum", 0.0)
            targets.append(tf.raw_ops.ResourceApplyRMSProp(
                var=variable.handle, ms=mean_square.handle, mom=moment.handle,
                lr=learning_rate, rho=decay, momentum=momentum, epsilon=epsilon, grad=gradient))
        return targets


class Adam(Optimizer):
    """
    Adam optimizer. Keeps first and second moment slots per variable and the
    running powers of beta1 and beta2 used for bias correction.
    """

    name = "Adam"

    def __init__(self, learning_rate=0.001, beta1=0.9, beta2=0.999, epsilon=1e-07):
        """
        Args:
            learning_rate (float): Learning rate
            beta1 (float): Exponential decay rate for first moment
            beta2 (float): Exponential decay rate for second moment
            epsilon (float): Small constant for numerical stability
        """
        self.learning_rate = learning_rate
        self.beta1 = beta1
        self.beta2 = beta2
        self.epsilon = epsilon

    def _apply_gradients(self, graph, grads_and_vars):
        learning_rate = self._constant(self.learning_rate, "learning_rate")
        beta1 = self._constant(self.beta1, "beta1")
        beta2 = self._constant(self.beta2, "beta2")
        epsilon = self._constant(self.epsilon, "epsilon")

        beta1_power = self._create_scalar(graph, "beta1_power", self.beta1)
        beta2_power = self._create_scalar(graph, "beta2_power", self.beta2)
        beta1_power_value = beta1_power.read_value()
        beta2_power_value = beta2_power.read_value()

        targets = []
        for gradient, variable in grads_and_vars:
            first_moment = self._create_slot(graph, variable, "m", 0.0)
            second_moment = self._create_slot(graph, variable, "v", 0.0)
            targets.append(tf.raw_ops.ResourceApplyAdam(
                var=variable.handle, m=first_moment.handle, v=second_moment.handle,
                beta1_power=beta1_power_value, beta2_power=beta2_power_value,
                lr=learning_rate, beta1=beta1, beta2=beta2, epsilon=epsilon, grad=gradient))

        with tf.control_dependencies(targets):
            update_beta1 = beta1_power.assign(beta1_power_value * beta1, read_value=False)
            update_beta2 = beta2_power.assign(beta2_power_value * beta2, read_value=False)
        return targets + [update_beta1, update_beta2]


class Adamax(Optimizer):
    name = "Adamax"

    def __init__(self, learning_rate=0.001, beta1=0.9, beta2=0.999, epsilon=1e-07):
        self.learning_rate = learning_rate
        self.beta1 = beta1
        self.beta2 = beta2
        self.epsilon = epsilon

    def _apply_gradients(self, graph, grads_and_vars):
        learning_rate = self._constant(self.learning_rate, "learning_rate")
        beta1 = self._constant(self.beta1, "beta1")
        beta2 = self._constant(self.beta2, "beta2")
        epsilon = self._constant(self.epsilon, "epsilon")

        beta1_power = self._create_scalar(graph, "beta1_power", self.beta1)
        beta1_power_value = beta1_power.read_value()

        targets = []
        for gradient, variable in grads_and_vars:
            first_moment = self._create_slot(graph, variable, "m", 0.0)
            weighted_norm = self._create_slot(graph, variable, "v", 0.0)
            targets.append(tf.raw_ops.ResourceApplyAdaMax(
                var=variable.handle, m=first_moment.handle, v=weighted_norm.handle,
                beta1_power=beta1_power_value, lr=learning_rate, beta1=beta1, beta2=beta2,
                epsilon=epsilon, grad=gradient))

        with tf.control_dependencies(targets):
            update_beta1 = beta1_power.assign(beta1_power_value * beta1, read_value=False)
        return targets + [update_beta1]


def get_optimizer(solver='adam', **kwargs):
    """
    Factory function to get optimizer instances.

    Args:
        solver (str): Optimizer type ('sgd', 'momentum', 'adagrad', 'adagrad_da',
            'adadelta', 'rmsprop', 'adam', 'adamax')
        **kwargs: Optimizer-specific parameters

    Returns:
        Optimizer instance
    """
    optimizers = {
        'sgd': SGD,
        'momentum': Momentum,
        'adagrad': AdaGrad,
        'adagrad_da': AdaGradDA,
        'adadelta': AdaDelta,
        'rmsprop': RMSProp,
        'adam': Adam,
        'adamax': Adamax,
    }
    if solver not in optimizers:
        raise ValueError(f"Unknown solver: {solver}")
    return optimizers[solver](**kwargs)
