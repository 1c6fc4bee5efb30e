from ninja_extra.throttling import AnonRateThrottle, UserRateThrottle


class AnonDefaultThrottle(AnonRateThrottle):
    rate = "60/min"


class UserDefaultThrottle(UserRateThrottle):
    rate = "300/min"


class AuthThrottle(AnonRateThrottle):
    rate = "100/min"


class ScanThrottle(UserRateThrottle):
    rate = "120/min"


class PassRequestThrottle(AnonRateThrottle):
    rate = "20/min"
