# planarsolver

A small 2D rigid-body constraint solver in pure Python with no third-party
dependencies. You describe rigid bodies, the constraints that tie them together
(pins, links, lines, rolling contacts, gears, clutches, friction, constant
spin) and the forces that act on them (gravity, springs, static forces,
motors). A system then steps the simulation forward in time.

## Installing

```
pip install .
```

To run the test suite:

```
pip install .[test]
pytest
```

## Building blocks

- **Rigid bodies**: `planarsolver.rigid_body.RigidBody` is a dataclass with a
  position (`p_x`, `p_y`), an angle `theta`, velocities (`v_x`, `v_y`,
  `v_theta`), a mass `m` and a moment of inertia `I`. It provides
  `local_to_world`, `world_to_local`, `energy` and `reset`. `index` is the
  body's slot in a system, or -1 when the body is not part of one.
- **Systems** own bodies, constraints and force generators and advance them in
  time with `process(dt, steps=1)`:
  - `planarsolver.generic_system.GenericRigidBodySystem(sle_solver, ode_solver)`
    solves constraint forces at acceleration level, using each constraint's
    stiffness `ks` and damping `kd`, and integrates with any ODE solver.
  - `planarsolver.nsv_system.OptimizedNsvRigidBodySystem(sle_solver, bias_factor=1.0)`
    solves at velocity level with semi-implicit Euler integration. If the
    linear solver supports limits, it passes on the constraints' force and
    torque bounds. Its `time_elapsed` property holds the total simulated time.

  Both derive from `planarsolver.rigid_body_system.RigidBodySystem`. It has
  `add_rigid_body` / `remove_rigid_body`, `add_constraint` /
  `remove_constraint`, `add_force_generator` / `remove_force_generator`,
  `reset`, `full_constraint_count`, and the `state` property, which returns the
  `SystemState` that is being integrated. It also has timing averages over the
  last 600 frames: `ode_solve_microseconds`, `constraint_solve_microseconds`,
  `force_eval_microseconds` and `constraint_eval_microseconds`. When a body is
  removed, the last body takes over its index. Every body in a system needs a
  non-zero `m` and `I`; `process` raises `ValueError` otherwise.
- **Linear (SLE) solvers** solve `(J · diag(W) · Jᵀ) x = right`:
  - `planarsolver.gauss_seidel.GaussSeidelSleSolver(max_iterations=128, min_delta=0.1)`
    supports limits.
  - `planarsolver.conjugate_gradient.ConjugateGradientSleSolver(max_iterations=1000, max_error=0.01, min_error=0.001)`.
  - `planarsolver.gaussian_elimination.GaussianEliminationSleSolver()`.

  A solver raises `planarsolver.sle_solver.ConvergenceError` when it cannot
  produce a solution. Gaussian elimination raises its subclass
  `SingularSystemError` when the system is singular.
- **ODE solvers** in `planarsolver.ode_solvers`: `EulerOdeSolver`,
  `NsvOdeSolver` (semi-implicit Euler) and `Rk4OdeSolver` (four stages,
  tracked by the `RkStage` enum).
- **Constraints** all derive from `planarsolver.constraint.Constraint`. Their
  `calculate(state)` returns a `ConstraintOutput`.
  - `planarsolver.joint_constraints`: `FixedPositionConstraint`,
    `FixedRotationConstraint`, `LinkConstraint` and `LineConstraint`.
  - `planarsolver.rolling_constraint`: `RollingConstraint`.
  - `planarsolver.drive_constraints`: `ConstantRotationConstraint`,
    `ClutchConstraint`, `RotationFrictionConstraint` and `SimpleGearConstraint`.
- **Force generators** in `planarsolver.force_generators`:
  `GravityForceGenerator(g=9.81)`, `StaticForceGenerator`, `Spring` and
  `ConstantSpeedMotor`. A spring or motor body whose index is -1 is treated as
  fixed. `Spring.ends()` returns the world positions of both attachment points,
  or `None` if a body is missing, and `Spring.energy()` returns the stored
  potential energy.

## Example: a pendulum

```python
from planarsolver.rigid_body import RigidBody
from planarsolver.nsv_system import OptimizedNsvRigidBodySystem
from planarsolver.gauss_seidel import GaussSeidelSleSolver
from planarsolver.joint_constraints import FixedPositionConstraint
from planarsolver.force_generators import GravityForceGenerator

bob = RigidBody(p_x=1.0, m=1.0, I=1.0)

system = OptimizedNsvRigidBodySystem(GaussSeidelSleSolver())
system.add_rigid_body(bob)

pin = FixedPositionConstraint(bob)
pin.set_local_position(-1.0, 0.0)   # the pin is 1 unit to the bob's left
pin.set_world_position(0.0, 0.0)
system.add_constraint(pin)

system.add_force_generator(GravityForceGenerator())

for _ in range(60):
    system.process(1 / 60, 10)

print(bob.p_x, bob.p_y, system.time_elapsed)
```

Each call to `process` writes the new positions and velocities back to the
bodies. It also writes the reaction forces each constraint applied to its
`f_x`, `f_y` and `f_t` lists, indexed by constraint row and then by body.

## Matrices

`planarsolver.matrix.Matrix` is a small dense matrix, indexed as
`matrix[column, row]`. Use `Matrix.column([...])` to build a column vector and
`Matrix.from_rows(...)` to build a full matrix.

`planarsolver.sparse_matrix.SparseMatrix(width, height, stride=3, entries=2)`
is a block-sparse matrix. Each row holds up to `entries` blocks, and each block
spans `stride` columns. The solvers use it for constraint Jacobians.

## What it does not do

planarsolver is a library only:

- It has no command-line tool.
- It draws nothing and has no rendering or visualisation.
- It cannot save or load scenes.
- It does not detect collisions. Contacts exist only where you add constraints.