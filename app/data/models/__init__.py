#import all models so they are registered on Base.metadata

from app.data.models.product import ProductModel, ProductVariantModel
from app.data.models.order import OrderModel, OrderItemModel
from app.data.models.settings import AdminSettingsModel

__all__ = [
    "ProductModel",
    "ProductVariantModel",
    "OrderModel",
    "OrderItemModel",
    "AdminSettingsModel",
]
