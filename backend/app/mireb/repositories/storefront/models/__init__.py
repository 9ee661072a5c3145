"""ORM models; importing the package registers every table on ``Base.metadata``."""

from mireb.repositories.storefront.models.users_model import User  # noqa: F401
from mireb.repositories.storefront.models.products_model import Product  # noqa: F401
from mireb.repositories.storefront.models.leads_model import Lead  # noqa: F401
