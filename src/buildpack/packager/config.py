"""Runtime configuration for a packaging run."""

from attrs import define, field, validators

DEFAULT_MAX_CONCURRENT_FETCHES = 4
DEFAULT_FETCH_TIMEOUT = 30.0


@define(frozen=True, slots=True)
class PackagerConfig:
    max_concurrent_fetches: int = field(
        default=DEFAULT_MAX_CONCURRENT_FETCHES,
        validator=[validators.instance_of(int), validators.gt(0)],
    )
    fetch_timeout: float = field(
        default=DEFAULT_FETCH_TIMEOUT,
        converter=float,
        validator=validators.gt(0),
    )
