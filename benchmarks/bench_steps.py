"""
Microbenchmark: time per step vs number of bodies.
Run:
  python benchmarks/bench_steps.py
"""
import time
from nbody_sim import LiveParameters, RestartParameters, Simulation
from nbody_sim.profiler import Profiler

def run(n: int, steps: int = 50, workers: int = 1):
    prof = Profiler()
    sim = Simulation(
        RestartParameters(num_bodies=n, seed=12345, workers=workers),  # determinism
        LiveParameters(dt=0.001),
        profiler=prof,
    )

    # warmup
    for _ in range(5):
        sim.step()
    prof.stats.clear()

    t0 = time.perf_counter()
    for _ in range(steps):
        sim.step()
    t1 = time.perf_counter()
    sim.close()

    total = t1 - t0
    per_step = total / steps
    return per_step, prof.stats.summary()

if __name__ == "__main__":
    for n in [100, 250, 500, 1000, 1500]:
        per_step, summary = run(n)
        print(f"N={n:5d}  step={1e3*per_step:8.3f} ms  steps/s={1/per_step:8.1f}")
        # print sections
        for k in ["tree", "forces", "integrate", "collisions"]:
            if k in summary:
                print(" ", k, summary[k])
        print()

    per_step, _ = run(1500, workers=4)
    print(f"N= 1500  workers=4  step={1e3*per_step:8.3f} ms")
