"""Pure domain helpers shared by the site-operations packages."""

from siteops_kernel.domain.clock import Clock, DeterministicClock, SystemClock

__all__ = ["Clock", "DeterministicClock", "SystemClock"]
