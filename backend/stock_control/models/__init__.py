from .catalog import Product, Location
from .auth import User
from .transfers import Transfer
from .settings import EmailSettings

__all__ = [
    'Product', 'Location',
    'User',
    'Transfer',
    'EmailSettings',
]
