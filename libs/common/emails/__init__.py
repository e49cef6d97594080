"""
Dashboard Email Package.

Modules:
- core: Base send_email function (SMTP)
- team: Team invitation email
"""
