"""
Module 'auth': identité de l'acheteur (résolue via Supabase Auth).
"""

from .identity import Identity, IdentityProvider, StaticIdentityProvider, SupabaseIdentityProvider

__all__ = ["Identity", "IdentityProvider", "StaticIdentityProvider", "SupabaseIdentityProvider"]
