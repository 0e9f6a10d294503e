"""
account_platform_tests package

Tests for the account service:

- Token issuing, verification and password hashing (`test_auth.py`)
- Session controller behaviour against a real store (`test_controller.py`)
- HTTP flows for register/login/logout/refresh/change-password (`test_users.py`)
- Image host client (`test_image_host.py`)
- Event logging, dev monitor and database initialization
"""
