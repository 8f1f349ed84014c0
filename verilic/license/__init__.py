# License aggregate and product rules
from verilic.license.license import License as License
from verilic.license.site_license import SiteLicense as SiteLicense

__all__ = ["License", "SiteLicense"]
