# Test Utility Constants

# Test Passwords
DEFAULT_PASSWORD = 'P@ssw0rd'

# Test Accounts
CLIENT_EMAIL = 'c1@test.com'
ANOTHER_CLIENT_EMAIL = 'c2@test.com'
ADMIN_USERNAME = 'admin'
ADMIN_EMAIL = 'admin@test.com'

# Inventory
GEN_LOCALITY = 'GEN'
VIP_LOCALITY = 'VIP'
COUPON_SAVE10 = 'SAVE10'
