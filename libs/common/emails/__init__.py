"""
Store email package.

Modules:
- core: send_email over the Resend HTTP API
- store: order summary and order status templates
"""
