from .cart import Cart, CartError, CartItem, CartValidationResult

__all__ = ['Cart', 'CartError', 'CartItem', 'CartValidationResult']
