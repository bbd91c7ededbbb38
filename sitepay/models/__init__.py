from .employee import Employee, UnitPayHistory
from .site import Site, SiteDate, SiteDateEmployee

__all__ = ["Employee", "UnitPayHistory", "Site", "SiteDate", "SiteDateEmployee"]
