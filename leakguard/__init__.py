"""LeakGuard: marketplace disintermediation signals and risk scoring."""

__version__ = "0.1.0"
