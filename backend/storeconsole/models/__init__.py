from .catalog import Category, Product, ProductList, new_document_id
from .auth import Identity, SessionToken, PasswordResetToken, AdminUser, ROLE_ADMIN, ROLE_SUPER_ADMIN, ADMIN_ROLES
from .settings import AppSettings, StoreSettings, APP_SETTINGS_ID, STORE_SETTINGS_ID
from .security import SecurityEvent

__all__ = [
    'Category', 'Product', 'ProductList', 'new_document_id',
    'Identity', 'SessionToken', 'PasswordResetToken', 'AdminUser',
    'ROLE_ADMIN', 'ROLE_SUPER_ADMIN', 'ADMIN_ROLES',
    'AppSettings', 'StoreSettings', 'APP_SETTINGS_ID', 'STORE_SETTINGS_ID',
    'SecurityEvent',
]
