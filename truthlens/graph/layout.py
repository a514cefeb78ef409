"""
truthlens.graph.layout – force-directed layout for entity graphs.

Pairwise repulsion, Hookean springs along links, a weak pull toward the
centre of the canvas, then velocity integration with damping.  Each tick is
O(n²) over the node set; graphs extracted from a single analysis rarely
exceed a few dozen entities.

Usage::

    layout = initialize(graph, Bounds(), seed=7)
    while not is_settled(layout):
        layout = tick(layout, graph, Bounds())

``tick`` never mutates its input and uses no randomness: the only random
draw happens in ``initialize``.
"""
from __future__ import annotations

import math
import random
from dataclasses import dataclass, field, replace

from truthlens.graph.models import Graph


@dataclass(frozen=True)
class LayoutConfig:
    """Simulation constants.  Defaults are the reference values."""
    repulsion:        float = 1200.0
    spring_length:    float = 150.0
    spring_strength:  float = 0.05
    center_gravity:   float = 0.02
    damping:          float = 0.85
    settle_threshold: float = 0.5


@dataclass(frozen=True)
class Bounds:
    width:  float = 800.0
    height: float = 600.0

    @property
    def center(self) -> tuple[float, float]:
        return self.width / 2.0, self.height / 2.0


@dataclass
class NodeState:
    x:  float
    y:  float
    vx: float = 0.0
    vy: float = 0.0


@dataclass
class Layout:
    """Position and velocity per node id, in graph order."""
    states: dict[str, NodeState] = field(default_factory=dict)
    ticks:  int = 0

    def __len__(self) -> int:
        return len(self.states)

    def position(self, node_id: str) -> tuple[float, float]:
        state = self.states[node_id]
        return state.x, state.y

    def distance(self, a: str, b: str) -> float:
        ax, ay = self.position(a)
        bx, by = self.position(b)
        return math.hypot(ax - bx, ay - by)

    def copy(self) -> Layout:
        return Layout(
            states={node_id: replace(s) for node_id, s in self.states.items()},
            ticks=self.ticks,
        )


DEFAULT_CONFIG = LayoutConfig()


# ---------------------------------------------------------------------------
# Public interface
# ---------------------------------------------------------------------------

def initialize(graph: Graph, bounds: Bounds, seed: int | None = None) -> Layout:
    """
    Place every node uniformly at random inside *bounds* with zero velocity.

    An empty graph yields an empty layout; callers treat that as
    "nothing to display".
    """
    rng = random.Random(seed)
    layout = Layout()
    for node in graph.nodes:
        if node.id in layout.states:
            continue
        layout.states[node.id] = NodeState(
            x=rng.uniform(0.0, bounds.width),
            y=rng.uniform(0.0, bounds.height),
        )
    return layout


def tick(
    layout: Layout,
    graph: Graph,
    bounds: Bounds,
    config: LayoutConfig = DEFAULT_CONFIG,
) -> Layout:
    """Advance the simulation by one step and return the new layout."""
    nxt = layout.copy()
    nodes = list(nxt.states.values())

    # Repulsion
    for i in range(len(nodes)):
        n1 = nodes[i]
        for j in range(i + 1, len(nodes)):
            n2 = nodes[j]
            dx = n1.x - n2.x
            dy = n1.y - n2.y
            dist_sq = dx * dx + dy * dy
            if dist_sq == 0:
                dist_sq = 1.0
            dist = math.sqrt(dist_sq)
            force = config.repulsion / dist_sq
            fx = dx / dist * force
            fy = dy / dist * force
            n1.vx += fx
            n1.vy += fy
            n2.vx -= fx
            n2.vy -= fy

    # Attraction
    for link in graph.links:
        source = nxt.states.get(link.source)
        target = nxt.states.get(link.target)
        if source is None or target is None:
            continue
        dx = target.x - source.x
        dy = target.y - source.y
        dist = math.sqrt(dx * dx + dy * dy)
        if dist == 0:
            continue
        force = (dist - config.spring_length) * config.spring_strength
        fx = dx / dist * force
        fy = dy / dist * force
        source.vx += fx
        source.vy += fy
        target.vx -= fx
        target.vy -= fy

    # Centering, integration, damping
    cx, cy = bounds.center
    for state in nodes:
        state.vx += (cx - state.x) * config.center_gravity
        state.vy += (cy - state.y) * config.center_gravity
        state.x += state.vx
        state.y += state.vy
        state.vx *= config.damping
        state.vy *= config.damping

    nxt.ticks += 1
    return nxt


def kinetic_energy(layout: Layout) -> float:
    """Sum of absolute velocity components across all nodes."""
    return sum(abs(s.vx) + abs(s.vy) for s in layout.states.values())


def is_settled(layout: Layout, config: LayoutConfig = DEFAULT_CONFIG) -> bool:
    return kinetic_energy(layout) < config.settle_threshold


def run_until_settled(
    graph: Graph,
    bounds: Bounds,
    config: LayoutConfig = DEFAULT_CONFIG,
    *,
    seed: int | None = None,
    max_ticks: int = 500,
) -> Layout:
    """
    Initialise and tick until settled or *max_ticks* is reached.

    The check runs after each tick, so a freshly initialised layout (zero
    velocity) is always advanced at least once.
    """
    layout = initialize(graph, bounds, seed=seed)
    if not layout.states:
        return layout
    for _ in range(max_ticks):
        layout = tick(layout, graph, bounds, config)
        if is_settled(layout, config):
            break
    return layout
