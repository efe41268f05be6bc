"""
Shared helpers for the herokuapp UI suite.

- ``polling``: bounded condition polling
- ``dialogs``: scoped browser dialog interception
- ``driver``: driver capability over a Playwright page
- ``live_site``: reachability checks for the demo site
"""
