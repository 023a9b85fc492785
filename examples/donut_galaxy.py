# examples/donut_galaxy.py
import logging
from nbody_sim import LiveParameters, RestartParameters, Simulation
from nbody_sim.profiler import Profiler

logging.basicConfig(level=logging.INFO)

profiler = Profiler()
with Simulation(
    RestartParameters(num_bodies=1500, donut_start=True, seed=7, workers=4),
    LiveParameters(dt=0.001, show_quadtree=True),
    profiler=profiler,
) as sim:
    for _ in range(200):
        sim.step()

    frame = sim.frame()
    print("t:", frame.time, "bodies:", len(frame.bodies), "tree nodes:", len(frame.squares))
    print("tree depth:", sim.quadtree.depth)
    for name, s in profiler.stats.summary().items():
        print(f"  {name:10s} mean {s['mean_ms']:7.3f} ms  max {s['max_ms']:7.3f} ms")

    # G can change while running; the body count needs a restart
    sim.params.update(g=5.0)
    sim.run(50)
    sim.restart(RestartParameters(num_bodies=500, donut_start=True, seed=7, workers=4))
    print("after restart:", len(sim.store), "bodies, t =", sim.time)
