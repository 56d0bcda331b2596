"""JSON web API for the MLFQ simulator.

This package provides a Flask application that runs simulations over
HTTP.  It is an **optional** extra — install with::

    pip install py-mlfq[web]

The ``create_app`` factory in ``app.py`` serves two endpoints:

- ``GET /api/config`` — default scheduler configuration.
- ``POST /api/simulate`` — run a workload and return trace and metrics.
"""
