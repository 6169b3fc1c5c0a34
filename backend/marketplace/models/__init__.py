from .users import User, Certification
from .catalog import Product, ProductVariety, AuthorizedProduct
from .offers import Offer, OfferProduct, DailyQuantity
from .documents import Document

__all__ = [
    'User', 'Certification',
    'Product', 'ProductVariety', 'AuthorizedProduct',
    'Offer', 'OfferProduct', 'DailyQuantity',
    'Document',
]
