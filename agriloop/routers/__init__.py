"""API routers, mounted under the configured prefix by ``agriloop.main``."""

from agriloop.routers import auth, dashboard, orders, showcase, users, waste

ROUTERS = [
    auth.router,
    users.router,
    waste.router,
    orders.router,
    showcase.router,
    dashboard.router,
]

__all__ = ["ROUTERS"]
