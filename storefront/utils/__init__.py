"""
Utility modules for the storefront
"""
from .config_loader import load_shop_config, ShopConfig

__all__ = [
    'load_shop_config',
    'ShopConfig',
]
