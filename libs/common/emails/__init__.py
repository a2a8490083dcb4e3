"""
Storefront Email Package.

Modules:
- core: Base send_email function (Resend HTTP API)
- store: Order confirmation template and sender
"""
