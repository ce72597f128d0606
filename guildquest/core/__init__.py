"""Guild Quest Core Engine — pure domain logic, no DB or HTTP."""
__version__ = "0.1.0"
