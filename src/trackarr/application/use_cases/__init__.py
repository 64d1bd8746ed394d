from .site_search import SearchAggregator, SiteAccount
from .site_user_info import SiteUserInfoUseCase

__all__ = ["SearchAggregator", "SiteAccount", "SiteUserInfoUseCase"]
