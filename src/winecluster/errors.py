from __future__ import annotations


class WineclusterError(Exception):
    pass


class InvalidArgument(WineclusterError, ValueError):
    """Bad input to a fit: k out of range, ragged rows, degenerate clusters."""


class FitCancelled(WineclusterError, RuntimeError):
    pass
