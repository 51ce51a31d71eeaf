"""Registry of bodies, constraints and force generators that forms a simulation."""

from __future__ import annotations

from .constraint import Constraint
from .force_generators import ForceGenerator
from .matrix import Matrix
from .rigid_body import RigidBody
from .system_state import SystemState


class RigidBodySystem:
    """Holds the parts of a simulation and the shared state they act on.

    The base class does not integrate; subclasses implement ``process``.
    Timing averages cover the last ``PROFILING_SAMPLES`` processed frames.
    """

    PROFILING_SAMPLES = 60 * 10

    def __init__(self) -> None:
        self._rigid_bodies: list[RigidBody] = []
        self._constraints: list[Constraint] = []
        self._force_generators: list[ForceGenerator] = []
        self._state = SystemState()

        self._ode_solve_samples = [-1] * self.PROFILING_SAMPLES
        self._constraint_solve_samples = [-1] * self.PROFILING_SAMPLES
        self._force_eval_samples = [-1] * self.PROFILING_SAMPLES
        self._constraint_eval_samples = [-1] * self.PROFILING_SAMPLES
        self._frame_index = 0

    def reset(self) -> None:
        """Forget every body, constraint and force generator."""
        self._rigid_bodies.clear()
        self._constraints.clear()
        self._force_generators.clear()

    def process(self, dt: float, steps: int = 1) -> None:
        """Advance the simulation by ``dt`` in ``steps`` sub-steps."""

    @property
    def rigid_bodies(self) -> tuple[RigidBody, ...]:
        return tuple(self._rigid_bodies)

    @property
    def constraints(self) -> tuple[Constraint, ...]:
        return tuple(self._constraints)

    @property
    def force_generators(self) -> tuple[ForceGenerator, ...]:
        return tuple(self._force_generators)

    @staticmethod
    def _swap_remove(items: list, item, index: int, what: str) -> None:
        if not 0 <= index < len(items) or items[index] is not item:
            raise ValueError(f"{what} is not part of this system")
        last = items.pop()
        if last is not item:
            items[index] = last
            last.index = index
        item.index = -1

    def add_rigid_body(self, body: RigidBody) -> None:
        self._rigid_bodies.append(body)
        body.index = len(self._rigid_bodies) - 1

    def remove_rigid_body(self, body: RigidBody) -> None:
        """Remove ``body``; the last body takes over its index."""
        self._swap_remove(self._rigid_bodies, body, body.index, "body")

    def add_constraint(self, constraint: Constraint) -> None:
        self._constraints.append(constraint)
        constraint.index = len(self._constraints) - 1

    def remove_constraint(self, constraint: Constraint) -> None:
        """Remove ``constraint``; the last constraint takes over its index."""
        self._swap_remove(self._constraints, constraint, constraint.index, "constraint")

    def add_force_generator(self, generator: ForceGenerator) -> None:
        self._force_generators.append(generator)
        generator.index = len(self._force_generators) - 1

    def remove_force_generator(self, generator: ForceGenerator) -> None:
        """Remove ``generator``; the last generator takes over its index."""
        self._swap_remove(
            self._force_generators, generator, generator.index, "force generator"
        )

    @property
    def full_constraint_count(self) -> int:
        """Total number of scalar constraint rows."""
        return sum(c.constraint_count for c in self._constraints)

    @staticmethod
    def _find_average(samples: list[int]) -> float:
        valid = [s for s in samples if s != -1]
        return sum(valid) / len(valid) if valid else 0.0

    @property
    def ode_solve_microseconds(self) -> float:
        return self._find_average(self._ode_solve_samples)

    @property
    def constraint_solve_microseconds(self) -> float:
        return self._find_average(self._constraint_solve_samples)

    @property
    def force_eval_microseconds(self) -> float:
        return self._find_average(self._force_eval_samples)

    @property
    def constraint_eval_microseconds(self) -> float:
        return self._find_average(self._constraint_eval_samples)

    @property
    def state(self) -> SystemState:
        return self._state

    def _record_timings(
        self,
        ode_solve: int,
        constraint_solve: int,
        force_eval: int,
        constraint_eval: int,
    ) -> None:
        """Store one frame's timings (microseconds) in the ring buffers."""
        i = self._frame_index
        self._ode_solve_samples[i] = ode_solve
        self._constraint_solve_samples[i] = constraint_solve
        self._force_eval_samples[i] = force_eval
        self._constraint_eval_samples[i] = constraint_eval
        self._frame_index = (i + 1) % self.PROFILING_SAMPLES

    def _populate_system_state(self) -> None:
        """Copy body kinematics into the state and build the constraint index map."""
        state = self._state
        state.resize(len(self._rigid_bodies), self.full_constraint_count)

        for i, body in enumerate(self._rigid_bodies):
            state.a_x[i] = 0.0
            state.a_y[i] = 0.0
            state.v_x[i] = body.v_x
            state.v_y[i] = body.v_y
            state.p_x[i] = body.p_x
            state.p_y[i] = body.p_y
            state.a_theta[i] = 0.0
            state.v_theta[i] = body.v_theta
            state.theta[i] = body.theta
            state.m[i] = body.m

        row = 0
        for i, constraint in enumerate(self._constraints):
            state.index_map[i] = row
            row += constraint.constraint_count

    def _populate_mass_matrices(self) -> tuple[Matrix, Matrix]:
        """Return the diagonal mass matrix and its inverse as column vectors."""
        masses: list[float] = []
        inverses: list[float] = []
        for i, body in enumerate(self._rigid_bodies):
            if body.m == 0 or body.I == 0:
                raise ValueError(f"body {i} has zero mass or inertia")
            masses += [body.m, body.m, body.I]
            inverses += [1 / body.m, 1 / body.m, 1 / body.I]
        return Matrix.column(masses), Matrix.column(inverses)

    def _process_forces(self) -> None:
        """Clear accumulated forces and let every generator apply its own."""
        state = self._state
        for i in range(len(self._rigid_bodies)):
            state.f_x[i] = 0.0
            state.f_y[i] = 0.0
            state.t[i] = 0.0

        for generator in self._force_generators:
            generator.apply(state)