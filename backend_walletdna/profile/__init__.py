"""
Profile features — wallet bio (timeline, badges, tagline) and wallet discovery.
"""

from backend_walletdna.profile.bio import UserBio, generate_user_bio
from backend_walletdna.profile.discover import DiscoverPage, WalletProfile, discover_wallets

__all__ = [
    "UserBio",
    "generate_user_bio",
    "DiscoverPage",
    "WalletProfile",
    "discover_wallets",
]
