"""Business logic services.

This package contains keyword derivation, the explore page orchestration
and authentication.
"""
