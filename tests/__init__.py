"""
typedstore testing package.

Test Organization:
    unit/: Unit tests for individual components
    conftest.py: Shared fixtures isolating configuration, preferences
        files and memory pressure from the host machine
"""
