"""
Core Module Package.

Infrastructure shared by every other package.

Components:
- clock: Testable time abstraction and default reporting month
- config: Dataclass configuration loaded from the environment
"""
