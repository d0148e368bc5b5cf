"""Resolver - Turns reference sources into comparable version identifiers."""

from streamcheck.resolver.exceptions import ResolutionError
from streamcheck.resolver.models import ResolutionStatus, ResolvedReference
from streamcheck.resolver.resolver import Resolver

__all__ = [
    "ResolutionError",
    "ResolutionStatus",
    "ResolvedReference",
    "Resolver",
]
