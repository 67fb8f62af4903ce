"""profile enumeration, deletion and account probes."""
from .source import ProfileSource, WmiProfileSource
from .probes import SessionProbe, DomainProbe, QueryUserSessionProbe, NetUserDomainProbe

__all__ = [
    "ProfileSource",
    "WmiProfileSource",
    "SessionProbe",
    "DomainProbe",
    "QueryUserSessionProbe",
    "NetUserDomainProbe",
]
