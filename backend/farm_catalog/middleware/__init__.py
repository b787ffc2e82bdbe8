from farm_catalog.middleware.actor_middleware import ActorMiddleware

__all__ = ["ActorMiddleware"]
