# global_parameters.py
import copy

# Keys use underscores; session files and `set` name them the same way.
DEFAULT_PARAMETERS = {
    "function": "quadratic",
    "custom_expression": "x^2 + y^2",
    "learning_rate": 0.1,
    # One of SGD, Momentum, RMSProp, Adam.
    "optimizer": "SGD",
    # Adam reuses `momentum` as its beta1.
    "momentum": 0.9,
    "beta2": 0.999,
    "epsilon": 1e-8,
    "tick_interval_ms": 100,
    "start_point": [1.5, 1.5],
    "mesh_resolution": 100,
    # Upper bound on ticks for a single `run` command.
    "max_ticks": 1000,
    # Stopping thresholds
    "convergence_tol": 1e-3,
    "bounds_factor": 2.0,
    "divergence_window": 5,
    "divergence_dip_tolerance": 0.95,
    "divergence_growth": 1.5,
}


class GlobalParameters:
    """Simulation settings with both ``params.key`` and ``params.get(key)``.

    Unknown keys are stored as given so sessions can carry extra entries.
    """

    def __init__(self, initial_params=None):
        object.__setattr__(self, "_params", copy.deepcopy(DEFAULT_PARAMETERS))
        if initial_params:
            self.update(initial_params)

    def __getattr__(self, name):
        params = self.__dict__.get("_params", {})
        if name in params:
            return params[name]
        raise AttributeError(f"{type(self).__name__} has no parameter {name!r}")

    def __setattr__(self, name, value):
        if name in self._params:
            self._params[name] = value
        else:
            object.__setattr__(self, name, value)

    def __contains__(self, key):
        return key in self._params

    def __repr__(self):
        return f"GlobalParameters({self._params})"

    def get(self, key, default=None):
        return self._params.get(key, default)

    def set(self, key, value):
        self._params[key] = value

    def update(self, params):
        self._params.update(params)

    def to_dict(self):
        """Return a copy of all parameters."""
        return dict(self._params)
