"""Common constants."""

# User roles
ROLE_ADMIN = "admin"
ROLE_RECRUITER = "recruiter"
ROLE_COMMUNITY_MANAGER = "community_manager"
ROLE_CANDIDATE = "candidate"

# Roles allowed to author offers
OFFER_AUTHOR_ROLES = [ROLE_RECRUITER, ROLE_COMMUNITY_MANAGER]

# Sponsorship levels (0 = not featured)
SPONSORED_LEVEL_MIN = 0
SPONSORED_LEVEL_MAX = 3

# Field limits
REJECTION_REASON_MAX_LENGTH = 500
