import re

from rest_framework.throttling import SimpleRateThrottle

DURATIONS = {'s': 1, 'm': 60, 'h': 3600, 'd': 86400}


class IPRateThrottle(SimpleRateThrottle):
    """Per-IP throttle whose rate accepts a multiplier, e.g. '5/15m'."""

    def get_cache_key(self, request, view):
        return self.cache_format % {
            'scope': self.scope,
            'ident': self.get_ident(request),
        }

    def parse_rate(self, rate):
        if rate is None:
            return (None, None)
        num, period = rate.split('/')
        match = re.fullmatch(r'(\d*)([smhd])\w*', period.strip())
        if not match:
            raise ValueError(f"Invalid throttle period: {period}")
        multiplier = int(match.group(1) or 1)
        return (int(num), multiplier * DURATIONS[match.group(2)])


class LoginRateThrottle(IPRateThrottle):
    scope = 'login'


class RegisterRateThrottle(IPRateThrottle):
    scope = 'register'
