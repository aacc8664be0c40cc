from .shipping_routes import shipping_router
from .webhook_routes import webhook_router
