from .users import User
from .mofs import Mof
from .items import Item
from .records import PickRecord, VerificationRecord

__all__ = [
    'User',
    'Mof',
    'Item',
    'PickRecord', 'VerificationRecord',
]
