"""
sim — Simulation host
=====================

Drives the collision warning core the way a traffic simulator would:
vehicles follow recorded route polylines in fixed steps, broadcast CAMs
and receive speed commands.

Modules
-------
world
    :class:`World` vehicles on route polylines, actuators, contact count.
network
    :func:`default_routes` crossroads route polylines.
scheduler
    :class:`EventScheduler` simulation-time deferred events.
sim_bridge
    :class:`SimBridge` per-step orchestrator.
physics
    Low-level conversion and speed helpers.
"""
