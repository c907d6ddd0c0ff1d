from rest_framework.throttling import AnonRateThrottle


class CafeSignupThrottle(AnonRateThrottle):
    """Limit café applications per client IP."""
    scope = 'cafe_signup'
    rate = '3/hour'


class PasswordResetThrottle(AnonRateThrottle):
    """Limit password reset requests per client IP."""
    scope = 'password_reset'
    rate = '5/hour'
