"""
Feed-forward neural network for the evolved drivers.

Each Layer owns the state of its neurons as numpy arrays (outputs, input sums,
back-propagation terms) plus a weight matrix whose row i holds neuron i's
connections and whose column j refers, by index, to neuron j of the source
layer. Layers therefore never own the neurons they read from.
"""
import numpy as np


class DimensionMismatch(ValueError):
    """Two networks, layers or neurons do not have the same shape."""


def transfer(value):
    return np.tanh(value)


def transfer_prime(value):
    """Derivative of tanh, forced to 0 beyond |x| > 100."""
    value = np.asarray(value, dtype=float)
    return np.where(np.abs(value) > 100, 0.0, 1.0 - np.tanh(value) ** 2)


class Neuron:
    """Read/write view of one neuron inside a Layer."""

    def __init__(self, layer, index):
        self.layer = layer
        self.index = index

    @property
    def output(self):
        return float(self.layer.outputs[self.index])

    @output.setter
    def output(self, value):
        self.layer.outputs[self.index] = value

    @property
    def input(self):
        return float(self.layer.inputs[self.index])

    @property
    def di(self):
        return float(self.layer.di[self.index])

    @property
    def weights(self):
        return self.layer.weights[self.index]

    @property
    def connections(self):
        """List of (source neuron index, weight) pairs."""
        return [(j, float(w)) for j, w in enumerate(self.layer.weights[self.index])]

    def median(self):
        """Mean absolute weight of this neuron's connections."""
        return float(self.layer.medians()[self.index])


class Layer:
    def __init__(self, size):
        if size <= 0:
            raise ValueError(f"Layer size must be positive, got {size}")
        self.size = int(size)
        self.outputs = np.zeros(self.size)
        self.inputs = np.zeros(self.size)
        self.di = np.zeros(self.size)
        self.source = None
        self.weights = np.zeros((self.size, 0))

    def __len__(self):
        return self.size

    def neuron(self, index):
        if not -self.size <= index < self.size:
            raise IndexError(f"Neuron index {index} out of range for layer of {self.size}")
        return Neuron(self, index % self.size)

    @property
    def connection_count(self):
        return self.weights.shape[1]

    def connect(self, layer):
        """Fully connect every neuron of this layer to every neuron of ``layer``."""
        self.source = layer
        self.weights = np.zeros((self.size, layer.size))

    def process(self):
        self.inputs = self.weights @ self.source.outputs
        self.outputs = transfer(self.inputs)

    def init_random(self, amplitude, rng):
        self.weights[:, :] = (rng.random(self.weights.shape) - 0.5) * amplitude

    def init_const(self, c):
        self.weights[:, :] = c

    def medians(self):
        if self.connection_count == 0:
            return np.zeros(self.size)
        return np.abs(self.weights).mean(axis=1)

    def median(self):
        return float(self.medians().mean())

    def mutate(self, percent, factor, rng):
        """Perturb each weight with probability ``percent``.

        The step is ``(U(0,1) - 0.5) * factor * m`` where m is the owning
        neuron's mean absolute weight, measured before any change.
        """
        scale = self.medians()[:, None] * factor
        mask = rng.random(self.weights.shape) < percent
        noise = (rng.random(self.weights.shape) - 0.5) * scale
        self.weights[mask] += noise[mask]

    def check_compatible(self, layer):
        if self.size != layer.size:
            raise DimensionMismatch(
                f"Layers must have same number of neurons ({self.size} != {layer.size})")
        if self.weights.shape != layer.weights.shape:
            raise DimensionMismatch(
                f"Neurons must have same number of connections "
                f"({self.connection_count} != {layer.connection_count})")

    def copy(self, layer):
        self.check_compatible(layer)
        self.weights[:, :] = layer.weights

    def reproduction(self, layer, p, rng):
        """Adopt each of ``layer``'s weights independently with probability ``p``."""
        self.check_compatible(layer)
        mask = rng.random(self.weights.shape) < p
        self.weights[mask] = layer.weights[mask]

    def retro_propagate(self, di, gradient):
        self.di = np.asarray(di, dtype=float)
        if self.source is not None and self.connection_count:
            self.weights -= gradient * np.outer(self.di, self.source.outputs)

    def retro_output(self, gradient, ideal):
        ideal = np.asarray(ideal, dtype=float)
        if ideal.shape != (self.size,):
            raise DimensionMismatch(
                f"Layers must have same size for retropropagation ({self.size} != {ideal.size})")
        di = 2.0 * (self.outputs - ideal) * transfer_prime(self.inputs)
        self.retro_propagate(di, gradient)

    def retro_hidden(self, gradient, next_layer):
        # Column j of next_layer.weights lists every downstream connection reading neuron j
        if next_layer.source is not self:
            raise DimensionMismatch("retro_hidden needs the layer directly downstream")
        di = (next_layer.di @ next_layer.weights) * transfer_prime(self.inputs)
        self.retro_propagate(di, gradient)

    def quadratic_error(self, ideal):
        ideal = np.asarray(ideal, dtype=float)
        if ideal.shape != (self.size,):
            raise DimensionMismatch(
                f"Layers must have same size for error calculation ({self.size} != {ideal.size})")
        return float(np.sum((self.outputs - ideal) ** 2))


class FeedForwardNetwork:
    """Entry layer -> hidden layers -> output layer, tanh everywhere but the entries."""

    def __init__(self, entries, outputs, rng=None):
        self.entries = entries
        self.outputs = outputs
        self.layers = []  # hidden layers between entries and outputs
        self.rng = rng if rng is not None else np.random.default_rng()

    @classmethod
    def build(cls, num_inputs, hidden_sizes=(), num_outputs=2, amplitude=0.2, rng=None):
        """Create a fully connected network with random weights in +-amplitude/2."""
        net = cls(Layer(num_inputs), Layer(num_outputs), rng=rng)
        previous = net.entries
        for size in hidden_sizes:
            layer = Layer(size)
            layer.connect(previous)
            net.add_layer(layer)
            previous = layer
        net.outputs.connect(previous)
        net.init_random(amplitude)
        return net

    def add_layer(self, layer):
        self.layers.append(layer)

    @property
    def weighted_layers(self):
        return self.layers + [self.outputs]

    def init_random(self, amplitude):
        for layer in self.weighted_layers:
            layer.init_random(amplitude, self.rng)

    def init_const(self, c):
        for layer in self.weighted_layers:
            layer.init_const(c)

    def set_inputs(self, values):
        values = np.asarray(values, dtype=float)
        if values.shape != (self.entries.size,):
            raise DimensionMismatch(
                f"Expected {self.entries.size} inputs, got {values.size}")
        self.entries.outputs[:] = values

    def infer(self):
        for layer in self.layers:
            layer.process()
        self.outputs.process()
        return self.outputs.outputs

    def mutate(self, percent, factor):
        for layer in self.weighted_layers:
            layer.mutate(percent, factor, self.rng)

    def _check_compatible(self, net):
        if len(self.layers) != len(net.layers):
            raise DimensionMismatch(
                f"Networks must have same number of layers ({len(self.layers)} != {len(net.layers)})")
        if self.entries.size != net.entries.size:
            raise DimensionMismatch(
                f"Entry layers differ ({self.entries.size} != {net.entries.size})")
        for mine, theirs in zip(self.weighted_layers, net.weighted_layers):
            mine.check_compatible(theirs)

    def copy(self, net):
        """Overwrite every weight with ``net``'s. Shapes are checked before anything changes."""
        self._check_compatible(net)
        for mine, theirs in zip(self.weighted_layers, net.weighted_layers):
            mine.copy(theirs)

    def reproduction(self, net, percent):
        self._check_compatible(net)
        for mine, theirs in zip(self.weighted_layers, net.weighted_layers):
            mine.reproduction(theirs, percent, self.rng)

    def median(self):
        total = sum(layer.median() for layer in self.layers)
        return (total + self.outputs.median()) / (len(self.layers) + 1)

    def retro_propagate(self, gradient, ideal):
        """One gradient step towards ``ideal`` outputs for the current inputs.

        Call after ``infer``. Output weights are updated first; each hidden layer
        then back-propagates through the already updated downstream weights.
        """
        self.outputs.retro_output(gradient, ideal)
        downstream = self.outputs
        for layer in reversed(self.layers):
            layer.retro_hidden(gradient, downstream)
            downstream = layer
        if self.layers:
            self.entries.retro_hidden(gradient, downstream)

    def quadratic_error(self, ideal):
        return self.outputs.quadratic_error(ideal)

    def get_weights(self):
        """Flat copy of all weights ordered by (layer, neuron, connection)."""
        return np.concatenate([layer.weights.ravel() for layer in self.weighted_layers])

    def set_weights(self, flat):
        flat = np.asarray(flat, dtype=float)
        expected = sum(layer.weights.size for layer in self.weighted_layers)
        if flat.shape != (expected,):
            raise DimensionMismatch(f"Expected {expected} weights, got {flat.size}")
        offset = 0
        for layer in self.weighted_layers:
            n = layer.weights.size
            layer.weights[:, :] = flat[offset:offset + n].reshape(layer.weights.shape)
            offset += n

    def clone(self):
        """Independent network of the same topology and weights sharing this RNG."""
        sizes = [layer.size for layer in self.layers]
        twin = FeedForwardNetwork.build(self.entries.size, sizes, self.outputs.size,
                                        amplitude=0.0, rng=self.rng)
        twin.copy(self)
        return twin
