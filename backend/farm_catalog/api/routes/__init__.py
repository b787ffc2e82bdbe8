from farm_catalog.api.routes import farms, preferences
from farm_catalog.api.routes.catalog import build_catalog_routers
from farm_catalog.api.routes.junctions import build_junction_routers

__all__ = ["farms", "preferences", "build_catalog_routers", "build_junction_routers"]
