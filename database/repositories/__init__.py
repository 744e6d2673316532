from database.repositories.base import BaseRepository
from database.repositories.account import AccountRepository
from database.repositories.quota import QuotaRepository
from database.repositories.opportunity import OpportunityRepository, OpportunityFilter
from database.repositories.profile import ProfileRepository
from database.repositories.access import UnlockRepository, ApplicationRepository

__all__ = [
    'BaseRepository',
    'AccountRepository',
    'QuotaRepository',
    'OpportunityRepository',
    'OpportunityFilter',
    'ProfileRepository',
    'UnlockRepository',
    'ApplicationRepository',
]
