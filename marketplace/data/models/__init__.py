#import wszystkich modeli zeby SQLAlchemy je zarejestrowal w base metadata

from marketplace.data.models.user import UserModel
from marketplace.data.models.catalog_set import CatalogSetModel
from marketplace.data.models.provider_set import ProviderSetModel
from marketplace.data.models.order import OrderModel
from marketplace.data.models.order_item import OrderItemModel
from marketplace.data.models.system_setting import SystemSettingModel

__all__ = [
    "UserModel",
    "CatalogSetModel",
    "ProviderSetModel",
    "OrderModel",
    "OrderItemModel",
    "SystemSettingModel",
]
