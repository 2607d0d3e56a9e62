# rsvp_e2e/__init__.py
