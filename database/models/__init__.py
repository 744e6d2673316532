from .base import Base, JsonType
from .account import CreditAccount, CreditTransaction, UserQuota
from .opportunity import Opportunity
from .profile import StudentProfile
from .access import UnlockRecord, ApplicationRecord

__all__ = [
    'Base',
    'JsonType',
    'CreditAccount',
    'CreditTransaction',
    'UserQuota',
    'Opportunity',
    'StudentProfile',
    'UnlockRecord',
    'ApplicationRecord',
]
