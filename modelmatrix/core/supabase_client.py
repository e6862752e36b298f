# modelmatrix/core/supabase_client.py
from functools import lru_cache
from supabase import create_client, Client


@lru_cache
def supabase_public(url: str, key: str) -> Client:
    """
    Create a Supabase client with the anon/public key.

    Use cases:
      - verifying access tokens via the Supabase Auth endpoint

    Note: This client still respects RLS; it never touches our tables.
    """
    return create_client(url, key)
