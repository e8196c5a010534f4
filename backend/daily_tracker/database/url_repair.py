"""Database connection string auto-repair.

Managed Postgres providers hand out connection strings that the driver does
not always accept as-is. ``repair_database_url`` normalizes them before the
engine is created. Provider handling is table-driven: a rule applies when its
marker appears in the URL, no general URL parsing is attempted beyond the
query string.
"""

import logging
import re
from dataclasses import dataclass, field
from urllib.parse import parse_qsl, urlencode

logger = logging.getLogger(__name__)

_QUOTES = "\"'"
_TRAILING_SEPARATORS = "?&"

# SQLAlchemy dropped the ``postgres://`` alias, several hosts still emit it.
_LEGACY_SCHEME = "postgres://"
_SCHEME = "postgresql://"

_NEON_ENDPOINT = re.compile(r"^(ep-[^.:]+?)(\.)")


@dataclass(frozen=True)
class ProviderRule:
    """Normalization applied to URLs whose text contains ``marker``."""

    name: str
    marker: str
    drop_params: tuple[str, ...] = ()
    require_params: dict[str, str] = field(default_factory=dict)
    pooled_endpoint: bool = False


PROVIDER_RULES: tuple[ProviderRule, ...] = (
    ProviderRule(
        name="neon",
        marker="neon.tech",
        drop_params=("channel_binding",),
        require_params={"sslmode": "require"},
        pooled_endpoint=True,
    ),
    ProviderRule(
        name="supabase",
        marker="supabase.co",
        require_params={"sslmode": "require"},
    ),
)


def _strip_wrapping(url: str) -> str:
    previous = None
    while url != previous:
        previous = url
        url = url.strip().strip(_QUOTES).rstrip(_TRAILING_SEPARATORS)
    return url


def _split_query(url: str) -> tuple[str, list[tuple[str, str]]]:
    base, sep, query = url.partition("?")
    if not sep:
        return base, []
    return base, parse_qsl(query, keep_blank_values=True)


def _join_query(base: str, params: list[tuple[str, str]]) -> str:
    if not params:
        return base
    return f"{base}?{urlencode(params)}"


def _use_pooler(base: str) -> str:
    """Point the host at the pooled endpoint; credentials are left alone."""
    scheme, sep, rest = base.partition("://")
    netloc, slash, path = rest.partition("/")
    userinfo, at, host = netloc.rpartition("@")
    if "-pooler." in host:
        return base
    host = _NEON_ENDPOINT.sub(r"\1-pooler\2", host, count=1)
    return f"{scheme}{sep}{userinfo}{at}{host}{slash}{path}"


def _apply_rule(rule: ProviderRule, url: str) -> str:
    base, params = _split_query(url)
    params = [(k, v) for k, v in params if k not in rule.drop_params]
    present = {k for k, _ in params}
    for key, value in rule.require_params.items():
        if key not in present:
            params.append((key, value))
    if rule.pooled_endpoint:
        base = _use_pooler(base)
    return _join_query(base, params)


def repair_database_url(raw: str | None) -> str:
    """Return a driver-ready connection string, or "" to use in-memory storage.

    Pure and idempotent: ``repair_database_url(repair_database_url(u))``
    equals ``repair_database_url(u)``.
    """
    if not raw:
        return ""
    url = _strip_wrapping(raw)
    if not url:
        return ""

    if url.startswith(_LEGACY_SCHEME):
        url = _SCHEME + url[len(_LEGACY_SCHEME):]

    for rule in PROVIDER_RULES:
        if rule.marker in url:
            url = _apply_rule(rule, url)
            break
    return url


def describe_provider(url: str) -> str:
    """Name of the matching provider rule, "postgres" otherwise."""
    for rule in PROVIDER_RULES:
        if rule.marker in url:
            return rule.name
    return "postgres" if url else "memory"
