#import wszystkich modeli zeby SQLAlchemy je zarejestrowal w base metadata

from marketplace.data.models.user import UserModel
from marketplace.data.models.seller import SellerModel
from marketplace.data.models.product import ProductModel
from marketplace.data.models.cart_item import CartItemModel
from marketplace.data.models.order import OrderModel

__all__ = ["UserModel", "SellerModel", "ProductModel", "CartItemModel", "OrderModel"]
