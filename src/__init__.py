"""Event-weighted product recommendation service.

Ranks the products a user interacted with recently by the summed weight of
their interaction events (views, cart adds, purchases).

Modules:
    api: FastAPI application and REST API endpoints
    recommender: Event model, weight table, scoring and ranking engine
"""

__version__ = "0.1.0"
