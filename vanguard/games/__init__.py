"""
Games module - Card pools and match setup.

Each format has its own subpackage with:
- Card definitions
- Deck lists
- Match setup
"""
