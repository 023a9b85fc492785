# examples/two_body.py
import numpy as np
from nbody_sim import Body, FixedLayout, LiveParameters, RestartParameters, Simulation
from nbody_sim.core.invariants import kinetic_energy, linear_momentum, potential_energy

M, m, r = 1000.0, 1.0, 50.0
v = np.sqrt((M + m) / r)  # circular orbit speed, G = 1

layout = FixedLayout([
    Body(position=(0.0, 0.0), velocity=(0.0, -m / M * v), mass=M),
    Body(position=(r, 0.0), velocity=(0.0, v), mass=m),
])
sim = Simulation(RestartParameters(), LiveParameters(g=1.0, dt=0.01), layout=layout)
eps = sim.restart_params.softening

e0 = kinetic_energy(sim.store) + potential_energy(sim.store, 1.0, eps)
p0 = linear_momentum(sim.store)

t_end = 2 * np.pi * r / v  # one orbit
while sim.time < t_end:
    sim.step()

e1 = kinetic_energy(sim.store) + potential_energy(sim.store, 1.0, eps)
print("t:", sim.time)
print("pos:", sim.store.positions[1])
print("energy", e0, "->", e1, "rel", abs((e1 - e0) / e0))
print("momentum", p0, "->", linear_momentum(sim.store))
