"""
Business logic for the Wallet app.

Views and management commands call into these modules; nothing here depends
on request or response objects.
"""
