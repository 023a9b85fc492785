# examples/collision_bounce.py
import io
from nbody_sim import Body, FixedLayout, LiveParameters, RestartParameters, Simulation
from nbody_sim.core.invariants import kinetic_energy, linear_momentum
from nbody_sim.renderer import DebugRenderer

# Two bodies on a head-on course; gravity is weak next to their speeds.
layout = FixedLayout([
    Body(position=(-5.0, 0.0), velocity=(+3.0, 0.0), mass=10.0),
    Body(position=(+5.0, 0.0), velocity=(-1.0, 0.0), mass=40.0),
])
sim = Simulation(
    RestartParameters(min_mass=10.0, max_mass=40.0),
    LiveParameters(g=1e-6, dt=0.01, collisions=True, elasticity=1.0),
    layout=layout,
)

p0, ke0 = linear_momentum(sim.store), kinetic_energy(sim.store)
hits = 0
for _ in range(500):
    sim.step()
    hits += len(sim.contacts)
p1, ke1 = linear_momentum(sim.store), kinetic_energy(sim.store)

print("contacts:", hits)
print("p0", p0, "p1", p1, "dp", p1 - p0)
print("ke0", ke0, "ke1", ke1, "dke", ke1 - ke0)

out = io.StringIO()
DebugRenderer(out).render_simulation(sim)
print(out.getvalue())
