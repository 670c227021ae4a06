"""Shared Kernel Domain Layer"""

from src.service.shared_kernel.domain.clock import Clock, utc_now

__all__ = ['Clock', 'utc_now']
