"""Services Layer — managers that orchestrate core rules around store IO.

Invariants:
    - Every manager is constructed with an explicit store handle (no global connection)
    - Primary writes commit before secondary side effects (notification fan-out) run
"""
