# =============================================================================
# lib/ - Standalone Utility Modules
# =============================================================================
# This package contains the adapters the services are built on:
# - repository.py: Persistence contract + in-memory backend
# - supabase_client.py: Supabase-backed repository
# - paystack_client.py: Paystack payment gateway adapter
# - security.py: bcrypt password hashing and session tokens
# - seed.py: Demo catalog data
# - utils.py: Id and reference generation
#
# These modules are self-contained and can be tested in isolation.
# Import them by module path; this package does not re-export, so importing
# lib.repository doesn't pull in the Supabase client.
# =============================================================================
